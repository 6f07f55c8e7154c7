from __future__ import annotations
from typing import Any, Mapping, MutableMapping, Protocol, Sequence, Tuple

from .errors import InvalidFieldPath

PATH_SEPARATOR = "."


class ValueAccessor(Protocol):
    """Protocol to write into an in-memory document."""

    def set(self, value: Any, path: Sequence[str], new: Any) -> Any: ...


def split_path(path: str) -> Tuple[str, ...]:
    """Split a dotted field path (``'a.b.c'``) into its segments.

    Raises `InvalidFieldPath` when any segment is empty.
    """
    parts = tuple(path.split(PATH_SEPARATOR))
    if not all(parts):
        raise InvalidFieldPath(path)
    return parts


class DictAccessor:
    """Accessor for nested dict-like structures using a sequence of keys.

    Path elements are treated as mapping keys. Missing intermediate mappings
    are created on `set`, and an intermediate value that is not a mapping is
    replaced by one.
    """

    def set(self, value: MutableMapping, path: Sequence[str], new: Any) -> Any:
        cur = value
        for p in path[:-1]:
            if p not in cur or not isinstance(cur[p], MutableMapping):
                cur[p] = {}
            cur = cur[p]
        cur[path[-1]] = new
        return value


def apply_fields(document: MutableMapping, fields: Mapping[str, Any], accessor: ValueAccessor | None = None,
                 skip: Sequence[str] = ()) -> MutableMapping:
    """Set every ``dotted.path: value`` pair of `fields` on `document`.

    All paths are validated before anything is written, so an invalid path
    leaves `document` untouched. Paths whose first segment is in `skip` are
    ignored. Two paths where one is a prefix of the other (``'a'`` and
    ``'a.b'``) conflict and are rejected.
    """
    accessor = accessor or DictAccessor()
    paths = []
    for name, new in fields.items():
        path = split_path(name)
        if path[0] in skip:
            continue
        paths.append((path, new))

    # After sorting, a path that prefixes others sits right before them.
    ordered = sorted(path for path, _ in paths)
    for shorter, longer in zip(ordered, ordered[1:]):
        if longer[:len(shorter)] == shorter:
            raise InvalidFieldPath(PATH_SEPARATOR.join(longer))

    for path, new in paths:
        accessor.set(document, path, new)
    return document
