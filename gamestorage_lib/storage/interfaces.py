from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class DocumentBackendProtocol(Protocol):
    """Document backend protocol mirroring `gamestorage_lib.storage.DocumentBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `gamestorage_lib.storage.base` (None from `get` for a
    missing key, `DuplicateKey`/`NotFound` from the mutating operations,
    thread-safety, etc.). Test doubles only need this surface.
    """

    def get(self, key: str) -> Optional[dict]: ...

    def create(self, key: str, document: Mapping[str, Any]) -> None: ...

    def update(self, key: str, document: Mapping[str, Any]) -> None: ...

    def update_fields(self, key: str, fields: Mapping[str, Any]) -> None: ...

    def update_and_set(self, key: str, document: Mapping[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def clean(self) -> None: ...


@runtime_checkable
class DocumentStorageProtocol(Protocol):
    """Surface of the prefix/suffix facade used by the web layer."""

    def get(self, prefix: str, suffix: str) -> Optional[dict]: ...

    def create(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None: ...

    def update(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None: ...

    def update_fields(self, prefix: str, suffix: str, fields: Mapping[str, Any]) -> None: ...

    def update_and_set(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None: ...

    def delete(self, prefix: str, suffix: str) -> None: ...

    def clean(self) -> None: ...
