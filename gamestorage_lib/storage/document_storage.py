"""Prefix/suffix facade over a document backend.

Every operation first builds the composite key and only then delegates to
the backend, so an invalid key never causes a side effect. The facade keeps
no state of its own besides the backend reference and can be shared freely
between threads.
"""
from __future__ import annotations
import logging
from typing import Any, Mapping, Optional

from .interfaces import DocumentBackendProtocol
from .keys import build_key

logger = logging.getLogger(__name__)


class DocumentStorage:
    def __init__(self, backend: DocumentBackendProtocol) -> None:
        self._backend = backend

    @property
    def backend(self) -> DocumentBackendProtocol:
        return self._backend

    def get(self, prefix: str, suffix: str) -> Optional[dict]:
        """Return the document for ``prefix|suffix``.

        A missing document is not an error: None is returned instead.
        """
        key = build_key(prefix, suffix)
        return self._backend.get(key)

    def create(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None:
        """Create a new document. Raises `DuplicateKey` if the key is taken."""
        key = build_key(prefix, suffix)
        self._backend.create(key, document)
        logger.debug("Created document %s", key)

    def update(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None:
        """Replace an existing document. Raises `NotFound` if there is none."""
        key = build_key(prefix, suffix)
        self._backend.update(key, document)
        logger.debug("Updated document %s", key)

    def update_fields(self, prefix: str, suffix: str, fields: Mapping[str, Any]) -> None:
        """Set fields of an existing document.

        Field names support dot notation (``{'a.b.c': 1}``); embedded
        documents are created as needed to fulfill the dotted path. Raises
        `NotFound` if there is no document for the key.
        """
        key = build_key(prefix, suffix)
        self._backend.update_fields(key, fields)
        logger.debug("Updated %d field(s) of document %s", len(fields), key)

    def update_and_set(self, prefix: str, suffix: str, document: Mapping[str, Any]) -> None:
        """Create the document, or override all of its values if it exists."""
        key = build_key(prefix, suffix)
        self._backend.update_and_set(key, document)
        logger.debug("Set document %s", key)

    def delete(self, prefix: str, suffix: str) -> None:
        """Delete a document. Raises `NotFound` and deletes nothing if absent."""
        key = build_key(prefix, suffix)
        self._backend.delete(key)
        logger.debug("Deleted document %s", key)

    def clean(self) -> None:
        """Delete every document. Administrative/test use only."""
        self._backend.clean()
        logger.warning("All documents were deleted")
