"""
확장자 -> MIME 타입 테이블
"""

import mimetypes
from collections.abc import MutableMapping
from typing import Dict, Iterator, Optional

from .registry import normalize_extension

# 미디어 서버에서 자주 쓰는 형식 (mimetypes 결과보다 우선)
DEFAULT_MEDIA_TYPES = {
    # video
    '.mp4': 'video/mp4',
    '.m4v': 'video/mp4',
    '.mov': 'video/quicktime',
    '.webm': 'video/webm',
    '.mkv': 'video/x-matroska',
    '.avi': 'video/x-msvideo',
    '.wmv': 'video/x-ms-wmv',
    '.flv': 'video/x-flv',
    '.ogv': 'video/ogg',
    '.3gp': 'video/3gpp',
    '.ts': 'video/mp2t',
    '.m3u8': 'application/vnd.apple.mpegurl',
    '.mpd': 'application/dash+xml',
    # audio
    '.mp3': 'audio/mpeg',
    '.m4a': 'audio/mp4',
    '.aac': 'audio/aac',
    '.wav': 'audio/wav',
    '.ogg': 'audio/ogg',
    '.oga': 'audio/ogg',
    '.opus': 'audio/opus',
    '.flac': 'audio/flac',
    '.weba': 'audio/webm',
    '.aiff': 'audio/aiff',
    # image
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
    '.avif': 'image/avif',
    '.bmp': 'image/bmp',
    '.ico': 'image/x-icon',
    '.svg': 'image/svg+xml',
    '.tif': 'image/tiff',
    '.tiff': 'image/tiff',
    # text / web
    '.html': 'text/html',
    '.htm': 'text/html',
    '.css': 'text/css',
    '.js': 'application/javascript',
    '.json': 'application/json',
    '.txt': 'text/plain',
    '.xml': 'application/xml',
    '.vtt': 'text/vtt',
    '.srt': 'application/x-subrip',
    '.pdf': 'application/pdf',
    '.zip': 'application/zip',
}


class MediaTypes(MutableMapping):
    """소문자 확장자(점 포함) -> MIME 타입

    테이블에 없으면 표준 mimetypes 레지스트리를 찾아본다.
    """

    def __init__(self, types: Optional[Dict[str, str]] = None, use_system: bool = True):
        self._types: Dict[str, str] = {}
        self.use_system = use_system
        self.update(DEFAULT_MEDIA_TYPES if types is None else types)

    def __getitem__(self, extension: str) -> str:
        return self._types[normalize_extension(extension)]

    def __setitem__(self, extension: str, media_type: str):
        self._types[normalize_extension(extension)] = media_type

    def __delitem__(self, extension: str):
        del self._types[normalize_extension(extension)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def lookup(self, extension: Optional[str]) -> Optional[str]:
        if not extension:
            return None
        extension = normalize_extension(extension)
        media_type = self._types.get(extension)
        if media_type is None and self.use_system:
            media_type = mimetypes.guess_type("file" + extension)[0]
        return media_type
