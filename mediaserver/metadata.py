"""
파일 크기 조회 (경로별 캐시 포함)
"""

import os
import threading
from typing import Dict, Optional

from .log import get_logger

logger = get_logger(__name__)


class MetadataResolver:
    """경로 -> 파일 크기 조회기

    캐시가 켜져 있으면 한 번 조회한 크기를 계속 돌려준다.
    파일이 바뀌어도 캐시는 갱신되지 않는다.
    """

    def __init__(self, no_cache: bool = False):
        self.no_cache = no_cache
        self._sizes: Dict[str, int] = {}
        self._lock = threading.RLock()

    def resolve(self, path: str) -> Optional[int]:
        """파일 크기 반환, 파일이 없으면 None"""
        if not self.no_cache:
            with self._lock:
                if path in self._sizes:
                    return self._sizes[path]

        if not os.path.isfile(path):
            logger.debug(f"No file at {path}")
            return None

        try:
            size = os.stat(path).st_size
        except FileNotFoundError:
            logger.debug(f"{path} disappeared before stat")
            return None

        if not self.no_cache:
            with self._lock:
                self._sizes[path] = size
            logger.debug(f"Cached size for {path}: {size}")
        return size

    def forget(self, path: Optional[str] = None):
        """캐시 항목 제거 (path 가 없으면 전체)"""
        with self._lock:
            if path is None:
                self._sizes.clear()
            else:
                self._sizes.pop(path, None)

    def __contains__(self, path) -> bool:
        with self._lock:
            return path in self._sizes
