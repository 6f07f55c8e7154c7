import pytest

from gamestorage_lib.main import Config, build_backend, clean_documents, create_app
from gamestorage_lib.setup import default_template
from gamestorage_lib.storage import FileDocumentBackend, MemoryDocumentBackend


def test_config_from_server_config_template():
    cfg = Config.from_server_config(default_template(), env={})
    assert cfg.storage_backend == 'file'
    assert cfg.serializer == 'json'
    assert cfg.collection == 'documents'
    assert cfg.api_path == '/api'
    assert cfg.server_name == 'Game Storage Server'
    assert cfg.log_level == 'INFO'
    assert cfg.password is None


def test_config_ignores_unknown_keys_and_applies_env():
    cfg = Config.from_server_config(
        {'schema_version': 1, 'feature_flags': {}, 'data_dir': 'from-file', 'retry_interval': 2},
        env={'GAMESTORAGE_DATA_DIR': '/srv/data', 'GAMESTORAGE_PASSWORD': 'secret'},
    )
    assert cfg.data_dir == '/srv/data'
    assert cfg.password == 'secret'
    assert cfg.retry_interval == 2


def test_build_backend_uses_config(tmp_path):
    b = build_backend(Config(data_dir=str(tmp_path), collection='c', serializer='yaml'))
    assert isinstance(b, FileDocumentBackend)
    assert b.collection_dir == tmp_path / 'c'


def test_create_app_with_file_backend(tmp_path):
    from fastapi.testclient import TestClient

    app = create_app(Config(data_dir=str(tmp_path), enable_brotli=False, api_path='/v2/'))
    backend = app.state.container.get('document_backend')
    assert backend.wait_until_connected(5)
    with TestClient(app) as client:
        assert client.post('/v2/storage/app/k1', json={'score': 1}).status_code == 200
        assert client.get('/v2/storage/app/k1').json() == {'score': 1}
    # lifespan shutdown closes the backend
    assert backend.connected is False
    assert (tmp_path / 'documents' / 'app%7Ck1.json').exists()


def test_create_app_with_brotli_enabled(backend):
    from fastapi.testclient import TestClient

    app = create_app(Config(storage_backend='memory', enable_brotli=True), backend=backend)
    client = TestClient(app)
    client.put('/api/storage/app/big', json={'blob': 'x' * 2000})
    r = client.get('/api/storage/app/big', headers={'Accept-Encoding': 'br'})
    assert r.headers.get('content-encoding') == 'br'
    assert r.json() == {'blob': 'x' * 2000}


def test_clean_documents_with_confirmation(backend):
    backend.create('a|1', {})
    rc = clean_documents(Config(storage_backend='memory'), input_fn=lambda prompt: 'n', backend=backend)
    assert rc == 1

    assert backend.get('a|1') == {}

    rc = clean_documents(Config(storage_backend='memory'), input_fn=lambda prompt: 'y', backend=backend)
    assert rc == 0
    assert len(backend) == 0


def test_clean_documents_unreachable_store():
    class NeverConnects(MemoryDocumentBackend):
        def connect(self):
            raise ConnectionError('down')

    rc = clean_documents(Config(), assume_yes=True, timeout=0.1, backend=NeverConnects(retry_interval=0.01))
    assert rc == 2


def test_entrypoint_print_template_and_help(capsys):
    import gamestorage

    assert gamestorage.main(['--print-template']) == 0
    out = capsys.readouterr().out
    assert 'storage_backend: file' in out

    assert gamestorage.main(['--help']) == 0
    assert '--clean' in capsys.readouterr().out


def test_entrypoint_missing_config(tmp_path, monkeypatch, capsys):
    import gamestorage

    monkeypatch.delenv('GAMESTORAGE_SKIP_SETUP', raising=False)
    assert gamestorage.main(['--config', str(tmp_path / 'missing.yml')]) == 2


def test_entrypoint_clean(tmp_path, capsys):
    import gamestorage
    from gamestorage_lib import setup as setup_mod

    cfg = tmp_path / 'server_config.yml'
    cfg.write_text(f'storage_backend: file\ndata_dir: {tmp_path}\n', encoding='utf-8')
    docs = tmp_path / 'documents'
    docs.mkdir()
    (docs / 'app%7Ck1.json').write_text('{"_id": "app|k1"}', encoding='utf-8')
    try:
        assert gamestorage.main(['--config', str(cfg), '--clean', '--yes']) == 0
    finally:
        setup_mod._loaded_config.clear()
    assert list(docs.iterdir()) == []


def test_create_app_keeps_injected_empty_backend(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    b = MemoryDocumentBackend()
    assert len(b) == 0
    app = create_app(Config(enable_brotli=False), backend=b)
    assert app.state.container.get('document_backend') is b
    assert not (tmp_path / 'data').exists()
    b.close()


def test_clean_documents_uses_injected_empty_backend(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    b = MemoryDocumentBackend()
    assert clean_documents(Config(), assume_yes=True, backend=b) == 0
    assert not (tmp_path / 'data').exists()


def test_retry_interval_defaults_to_five_seconds(tmp_path):
    from gamestorage_lib.storage import RETRY_INTERVAL, create_backend

    assert RETRY_INTERVAL == 5.0
    assert Config().retry_interval == 5.0
    assert create_backend('file', data_dir=tmp_path).retry_interval == 5.0
    assert FileDocumentBackend(data_dir=tmp_path).retry_interval == 5.0


def test_long_keys_through_the_api_on_file_backend(tmp_path):
    from fastapi.testclient import TestClient

    app = create_app(Config(data_dir=str(tmp_path), enable_brotli=False))
    with TestClient(app) as client:
        assert app.state.container.get('document_backend').wait_until_connected(5)
        for prefix, suffix in (('p' * 130, 's' * 130), ('game', '游戏' * 15)):
            url = f'/api/storage/{prefix}/{suffix}'
            r = client.post(url, json={'v': 1})
            assert r.status_code == 200, r.json()
            assert client.get(url).json() == {'v': 1}
            assert client.delete(url).status_code == 200
