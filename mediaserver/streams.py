"""
파일의 특정 바이트 구간을 비동기로 읽는 스트림
"""

from typing import Callable, List, Set

import anyio

from . import config
from .log import get_logger

logger = get_logger(__name__)


class RangeFileStream:
    """[start, stop) 구간을 청크 단위로 내보내는 읽기 소스

    async for 로 읽을 때마다 별도의 파일 핸들을 연다.
    close() 는 여러 번 불러도 한 번만 처리된다.
    """

    def __init__(self, path: str, start: int, stop: int, chunk_size: int = config.READ_CHUNK_SIZE):
        self.path = path
        self.start = max(0, start)
        self.stop = max(self.start, stop)
        self.chunk_size = chunk_size
        self.closed = False
        self._files: Set = set()
        self._close_listeners: List[Callable[[], None]] = []

    @property
    def length(self) -> int:
        return self.stop - self.start

    def on(self, event: str, callback: Callable[[], None]):
        """'close' 이벤트 구독"""
        if event != 'close':
            raise ValueError(f"Unsupported stream event: {event}")
        if self.closed:
            callback()
        else:
            self._close_listeners.append(callback)

    def __aiter__(self):
        return self._chunks()

    async def _chunks(self):
        if self.closed:
            return

        file_obj = await anyio.open_file(self.path, 'rb')
        self._files.add(file_obj)
        try:
            await file_obj.seek(self.start)
            remaining = self.length
            while remaining > 0 and not self.closed:
                chunk = await file_obj.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            self._files.discard(file_obj)
            await file_obj.aclose()

    async def read(self) -> bytes:
        """구간 전체를 bytes 로 반환"""
        data = bytearray()
        async for chunk in self:
            data.extend(chunk)
        return bytes(data)

    def close(self):
        if self.closed:
            return
        self.closed = True
        for file_obj in list(self._files):
            file_obj.wrapped.close()
        self._files.clear()
        logger.debug(f"Closed range stream {self.path} [{self.start}, {self.stop})")

        listeners, self._close_listeners = self._close_listeners, []
        for callback in listeners:
            callback()


def open_range_stream(path: str, start: int, stop: int) -> RangeFileStream:
    return RangeFileStream(path, start, stop)
