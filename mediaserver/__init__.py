"""
HTTP Range 지원 미디어 파일 서버
확장자별 변환 핸들러로 원본 바이트 스트림을 가로챌 수 있다
"""

from .media_types import MediaTypes
from .metadata import MetadataResolver
from .ranges import RangeWindow, compute_range
from .registry import ExtensionRegistry, Transform, TransformHandler
from .response import PipeResponse
from .server import MediaServer
from .streams import RangeFileStream, open_range_stream

__version__ = "1.0.0"

# 프로세스 기본 서버
default_server = MediaServer()
media_types = default_server.media_types


def pipe(request, response, path, media_type=None, type_key=None, on_complete=None, label=None):
    return default_server.pipe(request, response, path, media_type, type_key, on_complete, label)


def on(extension, handler):
    return default_server.on(extension, handler)


def remove_event(handler):
    return default_server.remove_event(handler)


def set_no_cache(value: bool):
    """개발 모드에서는 True 로 두면 매번 파일 크기를 다시 읽는다"""
    default_server.no_cache = value


__all__ = [
    "ExtensionRegistry",
    "MediaServer",
    "MediaTypes",
    "MetadataResolver",
    "PipeResponse",
    "RangeFileStream",
    "RangeWindow",
    "Transform",
    "TransformHandler",
    "compute_range",
    "default_server",
    "media_types",
    "on",
    "open_range_stream",
    "pipe",
    "remove_event",
    "set_no_cache",
]
