"""
헤더/본문을 직접 써 넣는 Starlette 응답
write_head() / write() / end() 로 채우고, 서빙 중 close / end / finish 이벤트를 발생시킨다
"""

import inspect
import math
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

import anyio
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from .log import get_logger

logger = get_logger(__name__)

EVENTS = ('close', 'end', 'finish')


class PipeResponse(Response):
    """핸들러가 나중에 본문을 써 넣는 응답

    pipe 시점에 예약된 작업(add_task)은 응답이 전송되는 동안 같은 태스크 그룹에서 실행된다.
    """

    charset = 'utf-8'

    def __init__(self):
        self.status_code = 200
        self.background = None
        self.raw_headers = []
        self.headers_sent = False
        self.ended = False
        self.finished = False
        self.closed = False
        self._send_stream, self._receive_stream = anyio.create_memory_object_stream(math.inf)
        self._tasks: List[Awaitable] = []
        self._listeners: Dict[str, List[Callable[[], Any]]] = defaultdict(list)
        self._fired = set()

    def on(self, event: str, callback: Callable[[], Any]):
        """close / end / finish 이벤트 구독"""
        if event not in EVENTS:
            raise ValueError(f"Unsupported response event: {event}")
        self._listeners[event].append(callback)

    def _emit(self, event: str):
        if event in self._fired:
            return
        self._fired.add(event)
        for callback in list(self._listeners[event]):
            callback()

    @property
    def writable(self) -> bool:
        return not (self.ended or self.closed)

    def write_head(self, status_code: int, headers: Optional[Mapping[str, Any]] = None):
        if self.headers_sent:
            logger.warning("write_head() called after headers were committed")
            return
        self.status_code = status_code
        self.raw_headers = [
            (str(key).lower().encode('latin-1'), str(value).encode('latin-1'))
            for key, value in (headers or {}).items()
        ]
        self.__dict__.pop("_headers", None)
        self.headers_sent = True

    def write(self, chunk: Union[bytes, str]) -> bool:
        """본문 추가. 이미 끝났거나 연결이 닫혔으면 False"""
        if not self.writable:
            return False
        if not self.headers_sent:
            self.write_head(self.status_code)
        if isinstance(chunk, str):
            chunk = chunk.encode(self.charset)
        if chunk:
            self._send_stream.send_nowait(chunk)
        return True

    def end(self, chunk: Union[bytes, str, None] = None):
        if self.ended:
            return
        if chunk:
            self.write(chunk)
        elif not self.headers_sent:
            self.write_head(self.status_code)
        self.ended = True
        self._send_stream.close()
        self._emit('end')

    def add_task(self, awaitable: Awaitable):
        """응답을 보내는 동안 실행할 작업 예약"""
        self._tasks.append(awaitable)

    async def _run_task(self, awaitable: Awaitable):
        try:
            await awaitable
        except Exception:
            logger.exception("Response task failed")
            self.end()

    async def _listen_for_disconnect(self, receive: Receive):
        while True:
            message = await receive()
            if message['type'] == 'http.disconnect':
                logger.debug("Client disconnected")
                self.closed = True
                self._send_stream.close()
                break

    async def _drain(self, send: Send):
        started = False
        async with self._receive_stream:
            async for chunk in self._receive_stream:
                if not started:
                    await self._send_start(send)
                    started = True
                await send({'type': 'http.response.body', 'body': chunk, 'more_body': True})

        if self.closed:
            return
        if not started:
            await self._send_start(send)
        await send({'type': 'http.response.body', 'body': b'', 'more_body': False})
        self.finished = True
        self._emit('finish')

    async def _send_start(self, send: Send):
        await send({
            'type': 'http.response.start',
            'status': self.status_code,
            'headers': self.raw_headers,
        })

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        try:
            async with anyio.create_task_group() as task_group:
                task_group.start_soon(self._listen_for_disconnect, receive)
                for awaitable in self._tasks:
                    task_group.start_soon(self._run_task, awaitable)
                self._tasks = []

                await self._drain(send)
                task_group.cancel_scope.cancel()

            if self.background is not None and self.finished:
                await self.background()
        finally:
            self.closed = True
            self._emit('close')


def maybe_schedule(response: PipeResponse, result: Any):
    """핸들러가 awaitable 을 돌려주면 응답 작업으로 예약"""
    if inspect.isawaitable(result):
        response.add_task(result)
