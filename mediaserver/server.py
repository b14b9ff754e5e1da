"""
미디어 파일 스트리밍 디스패처
Range 계산, 확장자별 변환 핸들러 호출, 읽기 스트림 정리를 담당한다
"""

import os
from typing import Callable, Dict, Optional

from . import config
from .log import get_logger
from .media_types import MediaTypes
from .metadata import MetadataResolver
from .ranges import compute_range
from .registry import ExtensionRegistry, HandlerLike, TransformHandler, normalize_extension
from .response import PipeResponse, maybe_schedule
from .streams import RangeFileStream, open_range_stream

logger = get_logger(__name__)


def once(action: Callable[[], None]) -> Callable[[], None]:
    """여러 번 호출돼도 action 은 한 번만 실행하는 래퍼"""
    done = False

    def guarded(*_args):
        nonlocal done
        if done:
            return
        done = True
        action()

    return guarded


def cors_headers(request) -> Dict[str, str]:
    """CORS 헤더 (Origin 이 없으면 *)"""
    return {
        'Access-Control-Allow-Origin': request.headers.get('origin') or '*',
        'Access-Control-Allow-Methods': config.CORS_ALLOW_METHODS,
        'Access-Control-Allow-Headers': config.CORS_ALLOW_HEADERS,
    }


class MediaServer:
    """크기 캐시, 핸들러 레지스트리, MIME 테이블을 가진 디스패처"""

    def __init__(
        self,
        resolver: Optional[MetadataResolver] = None,
        registry: Optional[ExtensionRegistry] = None,
        media_types: Optional[MediaTypes] = None,
        no_cache: Optional[bool] = None,
    ):
        self.resolver = resolver or MetadataResolver(config.NO_CACHE)
        self.registry = registry or ExtensionRegistry()
        self.media_types = media_types if media_types is not None else MediaTypes()
        if no_cache is not None:
            self.no_cache = no_cache

    @property
    def no_cache(self) -> bool:
        return self.resolver.no_cache

    @no_cache.setter
    def no_cache(self, value: bool):
        self.resolver.no_cache = bool(value)

    def on(self, extension: str, handler: HandlerLike) -> TransformHandler:
        """확장자에 변환 핸들러 등록 (등록 순서대로 호출)"""
        tagged = self.registry.register(extension, handler)
        logger.info(f"Registered handler #{tagged.handler_id} for {tagged.extension}")
        return tagged

    def remove_event(self, handler: Optional[HandlerLike]) -> bool:
        """on() 이 돌려준 TransformHandler 또는 등록했던 핸들러 자체로 제거"""
        removed = self.registry.unregister(handler)
        if removed is None:
            return False
        logger.info(f"Removed handler #{removed.handler_id} from {removed.extension}")
        return True

    def pipe(
        self,
        request,
        response: PipeResponse,
        path: str,
        media_type: Optional[str] = None,
        type_key: Optional[str] = None,
        on_complete: Optional[Callable[[str], None]] = None,
        label: Optional[str] = None,
    ) -> bool:
        """path 의 바이트 구간을 response 로 보낸다

        Args:
            request: headers 매핑을 가진 요청 (range, origin)
            response: PipeResponse
            path: 파일 경로
            media_type: 명시적인 MIME 타입
            type_key: 타입 조회와 핸들러 선택에 쓸 확장자 ('.mp4')
            on_complete: 직접 전송이 끝나면 path 와 함께 호출
            label: 응답 메시지에 path 대신 보여줄 이름

        Returns:
            스트리밍을 시작했으면 True, 파일이나 타입이 없으면 False
        """
        if not isinstance(path, str) or not path:
            raise TypeError("path must be a string value")

        total = self.resolver.resolve(path)
        if total is None:
            logger.info(f"{path} not found")
            response.write_head(200, {'Content-Type': 'text/plain; charset=utf-8'})
            response.end(f"{label or path} not found")
            return False

        window = compute_range(request.headers.get('range'), total)

        extension = os.path.splitext(path)[1].lower()
        if type_key:
            extension = normalize_extension(type_key)
        if not media_type:
            media_type = self.media_types.lookup(extension)

        if not media_type:
            logger.info(f"Media format not found for {os.path.basename(path)}")
            response.write_head(200, {'Content-Type': 'text/plain; charset=utf-8'})
            response.end(f"Media format not found for {os.path.basename(path)}")
            return False

        stream = open_range_stream(path, window.start, min(window.end, total))

        cleanup = once(stream.close)
        response.on('close', cleanup)
        response.on('end', cleanup)
        response.on('finish', cleanup)

        handlers = self.registry.handlers_for(extension)
        if not handlers:
            self._passthrough(request, response, path, stream, window, media_type, on_complete)
        else:
            self._transform(request, response, stream, media_type, handlers)

        return True

    def _passthrough(self, request, response, path, stream, window, media_type, on_complete):
        headers = {
            'Content-Length': str(stream.length),
            'Content-Type': media_type,
        }
        headers.update(cors_headers(request))

        if window.partial:
            headers['Accept-Ranges'] = 'bytes'
            headers['Content-Range'] = f'bytes {window.start}-{window.end}/{window.total}'
            response.write_head(206, headers)
            logger.debug(f"206 {path} {window.start}-{window.end}/{window.total}")
        else:
            response.write_head(200, headers)
            logger.debug(f"200 {path} ({stream.length} bytes)")

        def on_stream_close():
            response.end()
            if callable(on_complete):
                on_complete(path)

        stream.on('close', on_stream_close)
        response.add_task(pump(stream, response))

    def _transform(self, request, response, stream, media_type, handlers):
        headers = {'Content-Type': media_type}
        headers.update(cors_headers(request))
        response.write_head(200, headers)

        finish = once(response.end)
        for handler in handlers:
            try:
                result = handler.invoke(stream, request, response, finish)
            except Exception:
                logger.exception(f"Handler #{handler.handler_id} for {handler.extension} failed")
                finish()
                continue
            maybe_schedule(response, result)


async def pump(stream: RangeFileStream, response: PipeResponse):
    """스트림 내용을 그대로 응답에 쓴다"""
    try:
        async for chunk in stream:
            if not response.write(chunk):
                break
    finally:
        stream.close()
