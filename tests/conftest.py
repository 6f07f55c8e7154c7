"""Pytest configuration helpers and shared fixtures.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def backend():
    from gamestorage_lib.storage import MemoryDocumentBackend

    b = MemoryDocumentBackend()
    b.start()
    assert b.wait_until_connected(5)
    yield b
    b.close()


@pytest.fixture
def storage(backend):
    from gamestorage_lib.storage import DocumentStorage

    return DocumentStorage(backend)


@pytest.fixture
def app(backend):
    from gamestorage_lib.main import Config, create_app

    return create_app(Config(storage_backend='memory', enable_brotli=False, server_name='test'), backend=backend)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c
