"""
확장자별 변환 핸들러 레지스트리
"""

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Union, runtime_checkable


@runtime_checkable
class Transform(Protocol):
    """원본 바이트 스트림을 받아 응답 본문을 직접 만드는 변환기"""

    def invoke(self, stream, request, response, finish: Callable[[], None]) -> Any:
        ...


HandlerLike = Union[Transform, Callable[..., Any]]


def normalize_extension(extension: str) -> str:
    """소문자, 점으로 시작하는 확장자 문자열로 변환"""
    extension = extension.strip().lower()
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    return extension


@dataclass(frozen=True)
class TransformHandler:
    """레지스트리에 등록된 핸들러 (등록 번호와 확장자가 붙어 있다)"""
    callback: HandlerLike = field(compare=False)
    extension: str
    handler_id: int

    def invoke(self, stream, request, response, finish):
        if isinstance(self.callback, Transform):
            return self.callback.invoke(stream, request, response, finish)
        return self.callback(stream, request, response, finish)


class ExtensionRegistry:
    """확장자 -> 등록 순서대로 정렬된 핸들러 목록"""

    def __init__(self):
        self._handlers: Dict[str, Tuple[TransformHandler, ...]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def register(self, extension: str, handler: HandlerLike) -> TransformHandler:
        if not extension or not isinstance(extension, str):
            raise TypeError("extension must be a non-empty string")
        if not callable(handler) and not isinstance(handler, Transform):
            raise TypeError("handler must be callable or provide invoke()")

        extension = normalize_extension(extension)
        with self._lock:
            tagged = TransformHandler(handler, extension, next(self._ids))
            self._handlers[extension] = self._handlers.get(extension, ()) + (tagged,)
        return tagged

    def unregister(self, handler: Union[TransformHandler, HandlerLike, None]) -> Optional[TransformHandler]:
        """핸들러 제거 후 제거된 항목 반환. 등록된 적 없는 핸들러는 무시

        TransformHandler 를 넘기면 등록 번호가 같은 항목을, 등록했던 콜러블을 넘기면
        그 콜러블로 등록된 첫 항목을 제거한다.
        """
        if handler is None:
            return None

        with self._lock:
            if isinstance(handler, TransformHandler):
                return self._remove(handler.extension, lambda entry: entry.handler_id == handler.handler_id)

            for extension in list(self._handlers):
                removed = self._remove(extension, lambda entry: entry.callback is handler)
                if removed is not None:
                    return removed
        return None

    def _remove(self, extension: str, matches) -> Optional[TransformHandler]:
        handlers = self._handlers.get(extension)
        if not handlers:
            return None
        for index, entry in enumerate(handlers):
            if matches(entry):
                remaining = handlers[:index] + handlers[index + 1:]
                if remaining:
                    self._handlers[extension] = remaining
                else:
                    del self._handlers[extension]
                return entry
        return None

    def handlers_for(self, extension: Optional[str]) -> Tuple[TransformHandler, ...]:
        if not extension:
            return ()
        with self._lock:
            return self._handlers.get(extension.lower(), ())

    def __contains__(self, extension) -> bool:
        return bool(self.handlers_for(extension))

    def clear(self):
        with self._lock:
            self._handlers.clear()
