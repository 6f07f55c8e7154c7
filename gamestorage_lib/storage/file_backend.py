"""File-backed document backend.

Each document is one file under `<data_dir>/<collection>/`. The file name is
the percent-encoded composite key plus the serializer's extension. Keys
whose encoded name would be too long for the file system are stored under
`#` plus the SHA-256 digest of the key instead; `#` never survives percent
encoding, so the two kinds of names cannot clash. The stored record embeds
the key under `_id`, which is checked on read and stripped again before a
document is returned.

Writes are atomic: records are written to a temporary file, fsynced and then
renamed (or hard-linked, for `create`) into place. Creating a document uses
the file system itself as the uniqueness constraint: linking onto an
existing name fails, so exactly one of several concurrent creates wins.
"""
from __future__ import annotations
import hashlib
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional
from urllib.parse import quote

from .accessor import apply_fields
from .base import KEY_FIELD, RETRY_INTERVAL, DocumentBackend
from .errors import BackendError, DuplicateKey, NotFound, StorageError
from .serializer import JSONSerializer, Serializer

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"

# Longest file name (in bytes, extension included) we create. Most file
# systems stop at 255.
MAX_NAME_BYTES = 200
HASHED_NAME_MARKER = "#"


class KeyLockRegistry:
    """A fixed pool of locks; every key maps to one of them.

    Operations on the same key are serialized while the number of locks
    stays bounded no matter how many keys the store holds.
    """

    def __init__(self, size: int = 64) -> None:
        self._locks = [threading.Lock() for _ in range(size)]

    def lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]


class FileDocumentBackend(DocumentBackend):
    name = "file"

    def __init__(
        self,
        data_dir: str | Path = "./data",
        collection: str = "documents",
        serializer: Optional[Serializer] = None,
        retry_interval: float = RETRY_INTERVAL,
    ) -> None:
        super().__init__(retry_interval)
        self.data_dir = Path(data_dir)
        self.collection = collection
        self.serializer = serializer or JSONSerializer()
        self._locks = KeyLockRegistry()

    @property
    def collection_dir(self) -> Path:
        return self.data_dir / self.collection

    def describe(self) -> str:
        return str(self.collection_dir)

    def connect(self) -> None:
        self.collection_dir.mkdir(parents=True, exist_ok=True)
        # Make sure we can actually write there before accepting requests.
        fd, probe = tempfile.mkstemp(dir=self.collection_dir, suffix=TMP_SUFFIX)
        os.close(fd)
        os.unlink(probe)

    def _path_for(self, key: str) -> Path:
        name = quote(key, safe="") + self.serializer.extension
        if len(name) > MAX_NAME_BYTES:
            digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
            name = HASHED_NAME_MARKER + digest + self.serializer.extension
        return self.collection_dir / name

    @contextmanager
    def _translate_errors(self, operation: str, key: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except StorageError:
            raise
        except Exception as e:
            logger.exception("%s failed for key %r in %s", operation, key, self.describe())
            raise BackendError() from e

    def _read(self, key: str, path: Path) -> Optional[dict]:
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        record = self.serializer.load(data)
        if record.get(KEY_FIELD) != key:
            raise ValueError(f"{path.name} holds key {record.get(KEY_FIELD)!r}, expected {key!r}")
        return record

    def _write_tmp(self, record: Mapping[str, Any]) -> Path:
        payload = self.serializer.dump(record)
        fd, tmp = tempfile.mkstemp(dir=self.collection_dir, suffix=TMP_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            os.unlink(tmp)
            raise
        return Path(tmp)

    def _replace(self, path: Path, record: Mapping[str, Any]) -> None:
        self._write_tmp(record).replace(path)

    def get(self, key: str) -> Optional[dict]:
        self._require_connection()
        with self._translate_errors("get", key):
            record = self._read(key, self._path_for(key))
        if record is None:
            return None
        return self.from_record(record)

    def create(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        path = self._path_for(key)
        with self._locks.lock_for(key), self._translate_errors("create", key):
            tmp = self._write_tmp(self.to_record(key, document))
            try:
                os.link(tmp, path)
            except FileExistsError:
                raise DuplicateKey(key)
            finally:
                tmp.unlink()
        logger.debug("Created %s", path.name)

    def update(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        path = self._path_for(key)
        with self._locks.lock_for(key), self._translate_errors("update", key):
            if not path.exists():
                raise NotFound(key)
            self._replace(path, self.to_record(key, document))

    def update_fields(self, key: str, fields: Mapping[str, Any]) -> None:
        self._require_connection()
        path = self._path_for(key)
        with self._locks.lock_for(key), self._translate_errors("update_fields", key):
            record = self._read(key, path)
            if record is None:
                raise NotFound(key)
            apply_fields(record, fields, skip=(KEY_FIELD,))
            self._replace(path, record)

    def update_and_set(self, key: str, document: Mapping[str, Any]) -> None:
        self._require_connection()
        path = self._path_for(key)
        with self._locks.lock_for(key), self._translate_errors("update_and_set", key):
            self._replace(path, self.to_record(key, document))

    def delete(self, key: str) -> None:
        self._require_connection()
        path = self._path_for(key)
        with self._locks.lock_for(key), self._translate_errors("delete", key):
            try:
                path.unlink()
            except FileNotFoundError:
                raise NotFound(key)

    def clean(self) -> None:
        self._require_connection()
        removed = 0
        with self._translate_errors("clean"):
            for p in self.collection_dir.iterdir():
                if not p.is_file() or p.suffix not in (self.serializer.extension, TMP_SUFFIX):
                    continue
                try:
                    p.unlink()
                    removed += 1
                except FileNotFoundError:
                    pass
        logger.info("Cleaned %d records from %s", removed, self.describe())
