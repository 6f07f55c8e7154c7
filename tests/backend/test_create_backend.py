import pytest

from gamestorage_lib.storage import (
    FileDocumentBackend,
    MemoryDocumentBackend,
    create_backend,
)
from gamestorage_lib.storage.serializer import EncryptedSerializer, YAMLSerializer


def test_create_memory_backend():
    assert isinstance(create_backend(backend='memory'), MemoryDocumentBackend)


def test_create_file_backend(tmp_path):
    b = create_backend(backend='file', serializer='yaml', data_dir=tmp_path, collection='games', retry_interval=1.5)
    assert isinstance(b, FileDocumentBackend)
    assert isinstance(b.serializer, YAMLSerializer)
    assert b.collection_dir == tmp_path / 'games'
    assert b.retry_interval == 1.5
    # not started yet
    assert b.connected is False


def test_create_encrypted_file_backend(tmp_path):
    b = create_backend(serializer='encrypted', password='pw', data_dir=tmp_path)
    assert isinstance(b.serializer, EncryptedSerializer)


def test_unknown_names_raise():
    with pytest.raises(ValueError):
        create_backend(backend='mongo')
    with pytest.raises(ValueError):
        create_backend(serializer='pickle')
    with pytest.raises(ValueError):
        create_backend(serializer='encrypted')
