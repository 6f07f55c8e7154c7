"""Simple memory-backed document backend.

This backend keeps records in a process-local dict `{<key>: <record>}`.
Records are deep-copied on the way in and out so callers never share
mutable state with the store. Used by the development server and tests.
"""
import copy
from threading import RLock
from typing import Any, Dict, Mapping, Optional

from .accessor import apply_fields
from .base import KEY_FIELD, DocumentBackend
from .errors import DuplicateKey, NotFound


class MemoryDocumentBackend(DocumentBackend):
    name = "memory"

    def __init__(self, retry_interval: float = 0.0) -> None:
        super().__init__(retry_interval)
        self._lock = RLock()
        self._store: Dict[str, dict] = {}

    def connect(self) -> None:
        return

    def get(self, key: str) -> Optional[dict]:
        self._require_connection()
        with self._lock:
            record = self._store.get(key)
            if record is None:
                return None
            return copy.deepcopy(self.from_record(record))

    def create(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        record = copy.deepcopy(self.to_record(key, document))
        with self._lock:
            if key in self._store:
                raise DuplicateKey(key)
            self._store[key] = record

    def update(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        record = copy.deepcopy(self.to_record(key, document))
        with self._lock:
            if key not in self._store:
                raise NotFound(key)
            self._store[key] = record

    def update_fields(self, key: str, fields: Mapping[str, Any]) -> None:
        self._require_connection()
        with self._lock:
            if key not in self._store:
                raise NotFound(key)
            record = copy.deepcopy(self._store[key])
            apply_fields(record, copy.deepcopy(dict(fields)), skip=(KEY_FIELD,))
            self._store[key] = record

    def update_and_set(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        record = copy.deepcopy(self.to_record(key, document))
        with self._lock:
            self._store[key] = record

    def delete(self, key: str) -> None:
        self._require_connection()
        with self._lock:
            if self._store.pop(key, None) is None:
                raise NotFound(key)

    def clean(self) -> None:
        self._require_connection()
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
