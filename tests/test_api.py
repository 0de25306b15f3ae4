"""Tests for the HTTP layer."""

import pytest
from fastapi.testclient import TestClient

from blob_service import main
from blob_service.config import settings
from blob_service.errors import IOFailure, StorageInitError
from blob_service.main import app, content_disposition, get_file_service


@pytest.fixture
def client(service):
    """Client wired to the test service; startup hooks are not run."""
    app.dependency_overrides[get_file_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(client, name='report.pdf', data=b'%PDF-1.4 test', content_type='application/pdf'):
    return client.post('/api/files/upload', files={'file': (name, data, content_type)})


def test_health(client):
    resp = client.get('/health')

    assert resp.status_code == 200
    assert resp.json() == {'status': 'ok'}


def test_upload(client):
    resp = _upload(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body['original_name'] == 'report.pdf'
    assert body['size_bytes'] == len(b'%PDF-1.4 test')
    assert body['content_type'] == 'application/pdf'
    assert body['storage_name'].endswith('.pdf')
    assert set(body) == {
        'id',
        'storage_name',
        'original_name',
        'size_bytes',
        'content_type',
        'uploaded_at',
        'last_modified_at',
    }


def test_upload_unsupported_type(client):
    resp = _upload(client, name='payload.exe')

    assert resp.status_code == 400
    assert resp.json()['reason'] == 'UnsupportedType'
    assert resp.json()['kind'] == 'validation'


def test_upload_empty_file(client):
    resp = _upload(client, data=b'')

    assert resp.status_code == 400
    assert resp.json()['reason'] == 'EmptyFile'


def test_list_files(client):
    first = _upload(client, name='a.txt').json()
    second = _upload(client, name='b.txt').json()

    resp = client.get('/api/files')

    assert resp.status_code == 200
    assert [f['storage_name'] for f in resp.json()] == [second['storage_name'], first['storage_name']]


def test_download(client):
    stored = _upload(client, name='quarterly report.pdf', data=b'binary\x00content').json()

    resp = client.get(f"/api/files/download/{stored['storage_name']}")

    assert resp.status_code == 200
    assert resp.content == b'binary\x00content'
    assert resp.headers['content-type'] == 'application/octet-stream'
    assert resp.headers['content-disposition'] == content_disposition('quarterly report.pdf')


def test_download_unknown(client):
    resp = client.get('/api/files/download/missing.pdf')

    assert resp.status_code == 404
    assert resp.json()['kind'] == 'not_found'


def test_delete(client):
    stored = _upload(client).json()

    resp = client.delete(f"/api/files/{stored['storage_name']}")
    assert resp.status_code == 204

    resp = client.delete(f"/api/files/{stored['storage_name']}")
    assert resp.status_code == 404


def test_delete_io_failure(client, service, monkeypatch):
    stored = _upload(client).json()

    def _fail(key):
        raise IOFailure('disk error')

    monkeypatch.setattr(service.blob_store, 'delete', _fail)

    resp = client.delete(f"/api/files/{stored['storage_name']}")

    assert resp.status_code == 500
    assert resp.json()['kind'] == 'io'


def test_content_disposition_percent_encodes():
    assert content_disposition('my report.pdf') == "attachment; filename*=UTF-8''my%20report.pdf"


def test_startup_creates_blob_root(tmp_path, monkeypatch):
    files_dir = tmp_path / 'data' / 'files'
    monkeypatch.setattr(settings, 'files_dir', str(files_dir))
    monkeypatch.setattr(main, 'init_db', lambda: None)

    with TestClient(app) as client:
        assert client.get('/health').status_code == 200

    assert files_dir.is_dir()


def test_startup_fails_when_blob_root_cannot_be_created(tmp_path, monkeypatch):
    blocker = tmp_path / 'files'
    blocker.write_bytes(b'not a directory')
    monkeypatch.setattr(settings, 'files_dir', str(blocker))
    monkeypatch.setattr(main, 'init_db', lambda: None)

    with pytest.raises(StorageInitError):
        with TestClient(app):
            pass
