"""Services package: DI container and the protocols it hands out."""
from .container import ServiceContainer
from .resolver import resolve_optional_service, resolve_service
from gamestorage_lib.storage.interfaces import DocumentBackendProtocol, DocumentStorageProtocol

__all__ = [
    "ServiceContainer",
    "resolve_service",
    "resolve_optional_service",
    "DocumentBackendProtocol",
    "DocumentStorageProtocol",
]
