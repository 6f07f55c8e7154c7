"""Composite key construction.

A document is addressed by two components, `prefix` and `suffix`, joined
by a reserved separator. The prefix lets different assets use the same
suffix without clashing, e.g. assets ``A`` and ``B`` can both store a
document under ``key``:

    build_key('A', 'key')  ->  'A|key'
    build_key('B', 'key')  ->  'B|key'

Neither component may contain the separator, which keeps the mapping from
``(prefix, suffix)`` to key injective.
"""
from __future__ import annotations
from typing import Optional

from .errors import InvalidKeyComponent, MissingKeyComponent

SEPARATOR = "|"


def _check_component(name: str, value: Optional[str]) -> str:
    if not value:
        raise MissingKeyComponent(name)
    if SEPARATOR in value:
        raise InvalidKeyComponent(name, value, SEPARATOR)
    return value


def build_key(prefix: Optional[str], suffix: Optional[str]) -> str:
    """Return ``prefix + '|' + suffix``.

    Raises `MissingKeyComponent` for an empty component and
    `InvalidKeyComponent` when a component contains the separator. The
    prefix is checked first.
    """
    prefix = _check_component("prefix", prefix)
    suffix = _check_component("suffix", suffix)
    return prefix + SEPARATOR + suffix
