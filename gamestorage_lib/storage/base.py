"""Document backend interface definitions.

Defines the `DocumentBackend` abstract class the storage facade delegates
to. A backend stores Key -> Document pairs, where the key is the composite
string produced by `gamestorage_lib.storage.keys.build_key`, and owns the
lifecycle of its connection to the underlying store.

Connection handling: `start()` connects in a background thread and keeps
retrying every `retry_interval` seconds until it succeeds. Requests that
arrive before then fail with `BackendUnavailable` instead of blocking.
"""
from __future__ import annotations
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from .errors import BackendUnavailable

logger = logging.getLogger(__name__)

# Seconds between two connection attempts.
RETRY_INTERVAL = 5.0

# Field a backend uses to keep the key inside the stored record. It is never
# exposed to callers.
KEY_FIELD = "_id"


class DocumentBackend(ABC):
    """Abstract document backend.

    Implementations must be thread-safe: a single instance serves every
    request of the process.
    """

    name = "abstract"

    def __init__(self, retry_interval: float = RETRY_INTERVAL) -> None:
        self.retry_interval = retry_interval
        self._connected = threading.Event()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # Connection lifecycle -------------------------------------------------

    @abstractmethod
    def connect(self) -> None:
        """Establish the connection. Raise on failure; the caller retries."""

    def disconnect(self) -> None:
        """Release connection resources. Default is a no-op."""

    def describe(self) -> str:
        """Short human readable target used in log messages."""
        return self.name

    def start(self) -> None:
        """Start connecting in the background. Calling it twice is harmless."""
        if self._connected.is_set() or (self._thread is not None and self._thread.is_alive()):
            return
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._connect_loop, name=f"{self.name}-backend-connect", daemon=True
        )
        self._thread.start()

    def _connect_loop(self) -> None:
        while not self._stopped.is_set():
            try:
                self.connect()
            except Exception as e:
                logger.warning(
                    "Impossible to connect to %s (%s). Retrying in %ss",
                    self.describe(), e, self.retry_interval,
                )
                self._stopped.wait(self.retry_interval)
                continue
            logger.info("Successfully connected to %s", self.describe())
            self._connected.set()
            return

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def wait_until_connected(self, timeout: Optional[float] = None) -> bool:
        return self._connected.wait(timeout)

    def close(self) -> None:
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        self._thread = None
        if self._connected.is_set():
            self._connected.clear()
            self.disconnect()
            logger.info("Disconnected from %s", self.describe())

    def _require_connection(self) -> None:
        if not self._connected.is_set():
            raise BackendUnavailable()

    # Records ---------------------------------------------------------------

    @staticmethod
    def to_record(key: str, document: Mapping[str, Any]) -> dict:
        """Copy `document` and embed `key` under the internal key field."""
        record = dict(document)
        record[KEY_FIELD] = key
        return record

    @staticmethod
    def from_record(record: Mapping[str, Any]) -> dict:
        """Copy `record` without the internal key field."""
        return {k: v for k, v in record.items() if k != KEY_FIELD}

    # Storage operations ----------------------------------------------------

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Return the document stored under `key`, or None if there is none."""

    @abstractmethod
    def create(self, key: str, document: Mapping[str, Any]) -> None:
        """Store a new document. Raise `DuplicateKey` if `key` is in use."""

    @abstractmethod
    def update(self, key: str, document: Mapping[str, Any]) -> None:
        """Replace an existing document. Raise `NotFound` if there is none."""

    @abstractmethod
    def update_fields(self, key: str, fields: Mapping[str, Any]) -> None:
        """Set (dotted) fields of an existing document.

        Intermediate mappings are created as needed. Raise `NotFound` if no
        document matched.
        """

    @abstractmethod
    def update_and_set(self, key: str, document: Mapping[str, Any]) -> None:
        """Create the document, or fully replace it when it exists."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the document. Raise `NotFound` if there is none."""

    @abstractmethod
    def clean(self) -> None:
        """Irreversibly delete every document of the collection."""
