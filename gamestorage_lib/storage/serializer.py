from __future__ import annotations
import base64
import json
import os
from typing import Any, Protocol

import yaml


class Serializer(Protocol):
    """Serialize/deserialize stored records for backends that keep bytes.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    `extension` is the file suffix a file backend uses for records.
    """

    extension: str

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class JSONSerializer:
    """Default serializer: documents arrive as JSON and are stored as JSON."""

    extension = ".json"

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text). Handy for hand-inspecting a data directory."""

    extension = ".yml"

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value, sort_keys=False, allow_unicode=True).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class EncryptedSerializer:
    """Serializer that encrypts records at rest using Fernet.

    Provide either `key` (a Fernet key) or `password`. In password mode each
    record carries its own random salt and the PBKDF2 iteration count so the
    key can be derived again on load.
    """

    extension = ".enc"

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_serializer: Serializer | None = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedSerializer requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    def _derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        from cryptography.hazmat.primitives import hashes
        from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

        kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def dump(self, value: Any) -> bytes:
        from cryptography.fernet import Fernet

        inner = self.base_serializer.dump(value)
        if self._password is not None:
            salt = os.urandom(16)
            ct = Fernet(self._derive_key(self._password, salt, self._iterations)).encrypt(inner)
            frame = {
                "v": 1,
                "mode": "password",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                "ct": ct.decode("ascii"),
            }
        else:
            ct = Fernet(self._key).encrypt(inner)
            frame = {"v": 1, "mode": "key", "ct": ct.decode("ascii")}
        return json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        from cryptography.fernet import Fernet

        frame = json.loads(data.decode("utf-8"))
        mode = frame.get("mode")
        if mode == "password":
            if self._password is None:
                raise ValueError("serializer was not configured with a password")
            salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            key = self._derive_key(self._password, salt, frame.get("iterations", self._iterations))
        elif mode == "key":
            if self._key is None:
                raise ValueError("serializer was not configured with a key")
            key = self._key
        else:
            raise ValueError("unknown frame format")
        return self.base_serializer.load(Fernet(key).decrypt(frame["ct"].encode("ascii")))


def get_serializer(name: str, password: str | None = None) -> Serializer:
    if name == "json":
        return JSONSerializer()
    if name == "yaml":
        return YAMLSerializer()
    if name == "encrypted":
        return EncryptedSerializer(password=password)
    raise ValueError(f"Unknown serializer: {name!r}")
