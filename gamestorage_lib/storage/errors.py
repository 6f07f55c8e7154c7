"""Error taxonomy for the document storage layer.

Every error carries an HTTP-like `status` (400 for client errors, 500 for
server errors) and a human readable `message`. The web layer maps them to
responses with a single exception handler.
"""
from __future__ import annotations
from typing import Optional


class StorageError(Exception):
    """Base class for all storage errors."""

    status = 500
    default_message = "Storage error."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class StorageClientError(StorageError):
    """The request itself is at fault; retrying it unchanged will not help."""

    status = 400


class MissingKeyComponent(StorageClientError):
    def __init__(self, component: str) -> None:
        self.component = component
        super().__init__(f"{component.capitalize()} required!")


class InvalidKeyComponent(StorageClientError):
    def __init__(self, component: str, value: str, character: str) -> None:
        self.component = component
        self.value = value
        self.character = character
        super().__init__(f"The {component} {value} cannot contain {character}")


class InvalidFieldPath(StorageClientError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Invalid field path {path!r}")


class DuplicateKey(StorageClientError):
    default_message = "The prefix and suffix provided are already in use, change them and try again."

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__()


class NotFound(StorageClientError):
    default_message = "No document found!"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__()


class BackendUnavailable(StorageError):
    default_message = "The document store is not available yet, try again later."


class BackendError(StorageError):
    """Any other backend failure.

    The original exception is kept as `__cause__` for logging but its text
    is never exposed through `message`.
    """

    default_message = "An unexpected error occurred in the document store."
