from types import SimpleNamespace

import anyio
import pytest
from starlette.datastructures import Headers

from mediaserver import MediaServer

MEDIA_SIZE = 1_000_000


def _make_request(**headers):
    """headers 만 가진 요청 객체 (키는 Range, Origin 처럼 넘긴다)"""
    return SimpleNamespace(headers=Headers(headers))


async def _serve(response, disconnect=False):
    """PipeResponse 를 ASGI 로 실행하고 (status, headers, body, messages) 반환"""
    messages = []
    received = []

    async def receive():
        if not received:
            received.append(True)
            return {'type': 'http.request', 'body': b'', 'more_body': False}
        if disconnect:
            return {'type': 'http.disconnect'}
        await anyio.sleep_forever()

    async def send(message):
        messages.append(message)

    scope = {'type': 'http', 'method': 'GET', 'path': '/', 'headers': []}
    await response(scope, receive, send)

    start = next((m for m in messages if m['type'] == 'http.response.start'), None)
    status = start['status'] if start else None
    headers = {k.decode('latin-1'): v.decode('latin-1') for k, v in start['headers']} if start else {}
    body = b''.join(m.get('body', b'') for m in messages if m['type'] == 'http.response.body')
    return status, headers, body, messages


@pytest.fixture
def media_bytes():
    return bytes(i % 251 for i in range(MEDIA_SIZE))


@pytest.fixture
def media_dir(tmp_path, media_bytes):
    (tmp_path / "video.mp4").write_bytes(media_bytes)
    return tmp_path


@pytest.fixture
def server():
    return MediaServer(no_cache=False)


@pytest.fixture
def make_request():
    return _make_request


@pytest.fixture
def serve():
    return _serve
