from pathlib import Path

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from mediaserver import MediaServer
from mediaserver.app import create_app, get_file_path, main


@pytest.fixture
def client(media_dir, server):
    return TestClient(create_app(str(media_dir), server))


def test_get_full_file(client, media_bytes):
    response = client.get("/video.mp4")
    assert response.status_code == 200
    assert response.headers['content-length'] == "1000000"
    assert response.content == media_bytes


def test_get_range(client, media_bytes):
    response = client.get("/video.mp4", headers={"Range": "bytes=500000-"})
    assert response.status_code == 206
    assert response.headers['content-range'] == "bytes 500000-631072/1000000"
    assert response.headers['content-length'] == "131072"
    assert response.content == media_bytes[500000:631072]


def test_missing_file_body(client, media_dir):
    response = client.get("/missing.mp4")
    assert response.status_code == 200
    assert response.text == "/missing.mp4 not found"
    assert str(Path(media_dir).resolve()) not in response.text


def test_type_query_selects_handlers(media_dir, server):
    (media_dir / "notes.bin").write_bytes(b"hello")
    server.media_types['.upper'] = 'text/plain'

    def upper(stream, request, response, finish):
        async def run():
            response.write((await stream.read()).upper())
            finish()
        return run()

    server.on('.upper', upper)
    client = TestClient(create_app(str(media_dir), server))

    response = client.get("/notes.bin", params={"type": ".upper"})
    assert response.status_code == 200
    assert response.text == "HELLO"


def test_preflight(client):
    response = client.options("/video.mp4", headers={
        "Origin": "http://player.local",
        "Access-Control-Request-Method": "GET",
        "Access-Control-Request-Headers": "Range",
    })
    assert response.status_code == 200
    assert response.headers['access-control-allow-origin'] == "http://player.local"
    assert response.headers['access-control-allow-methods'] == "GET, POST, OPTIONS"
    assert "range" in response.headers['access-control-allow-headers'].lower()
    assert response.headers['access-control-max-age'] == "86400"


def test_preflight_rejects_unlisted_method(client):
    response = client.options("/video.mp4", headers={
        "Origin": "http://player.local",
        "Access-Control-Request-Method": "DELETE",
    })
    assert response.status_code == 400


def test_get_with_origin_echoes_origin(client):
    response = client.get("/video.mp4", headers={"Origin": "http://player.local", "Range": "bytes=0-"})
    assert response.status_code == 206
    assert response.headers['access-control-allow-origin'] == "http://player.local"


def test_get_without_origin_allows_any(client):
    response = client.get("/video.mp4", headers={"Range": "bytes=0-"})
    assert response.headers['access-control-allow-origin'] == "*"


def test_get_file_path_rejects_traversal(tmp_path):
    base = tmp_path.resolve()
    assert get_file_path(base, "/a/b.mp4") == base / "a" / "b.mp4"
    with pytest.raises(HTTPException) as exc:
        get_file_path(base, "../outside.mp4")
    assert exc.value.status_code == 403


def test_main_parses_arguments(monkeypatch):
    calls = []
    monkeypatch.setattr("mediaserver.app.run_server", lambda *args: calls.append(args))
    main(["--port", "9000", "--host", "0.0.0.0", "-d", "/srv/media", "--no-cache"])
    assert calls == [(9000, "0.0.0.0", "/srv/media", True)]


def test_create_app_defaults_to_new_server(tmp_path):
    app = create_app(str(tmp_path))
    assert isinstance(app.state.media_server, MediaServer)
    assert app.state.base_dir == tmp_path.resolve()
