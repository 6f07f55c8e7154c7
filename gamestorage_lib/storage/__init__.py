"""Document storage package for the game storage server."""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from .base import KEY_FIELD, RETRY_INTERVAL, DocumentBackend
from .document_storage import DocumentStorage
from .errors import (
    BackendError,
    BackendUnavailable,
    DuplicateKey,
    InvalidFieldPath,
    InvalidKeyComponent,
    MissingKeyComponent,
    NotFound,
    StorageClientError,
    StorageError,
)
from .file_backend import FileDocumentBackend
from .keys import SEPARATOR, build_key
from .memory_backend import MemoryDocumentBackend
from .serializer import get_serializer


def create_backend(
    backend: str = "file",
    serializer: str = "json",
    data_dir: str | Path = "./data",
    collection: str = "documents",
    password: Optional[str] = None,
    retry_interval: float = RETRY_INTERVAL,
) -> DocumentBackend:
    """Build a (not yet started) document backend by name."""
    if backend == "memory":
        return MemoryDocumentBackend()
    if backend == "file":
        return FileDocumentBackend(
            data_dir=data_dir,
            collection=collection,
            serializer=get_serializer(serializer, password=password),
            retry_interval=retry_interval,
        )
    raise ValueError(f"Unknown storage backend: {backend!r}")


__all__ = [
    "KEY_FIELD",
    "RETRY_INTERVAL",
    "SEPARATOR",
    "DocumentBackend",
    "DocumentStorage",
    "FileDocumentBackend",
    "MemoryDocumentBackend",
    "create_backend",
    "build_key",
    "StorageError",
    "StorageClientError",
    "MissingKeyComponent",
    "InvalidKeyComponent",
    "InvalidFieldPath",
    "DuplicateKey",
    "NotFound",
    "BackendUnavailable",
    "BackendError",
]
