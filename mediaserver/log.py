"""
로깅 유틸리티
"""
import logging
from typing import Optional

from . import config

PREFIX = "[mediaserver]"


class PrefixFormatter(logging.Formatter):
    """레벨과 모듈 이름 앞에 고정 접두어를 붙이는 포매터"""

    def __init__(self):
        super().__init__(f"{PREFIX} %(levelname)s %(name)s: %(message)s")


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    mediaserver 네임스페이스 로거 반환

    Args:
        name: 로거 이름 (보통 __name__)
        level: 로깅 레벨, 없으면 설정값 사용

    Returns:
        콘솔 핸들러가 붙은 로거
    """
    if name.startswith("mediaserver."):
        name = name[len("mediaserver."):]
    elif name == "__main__":
        name = "main"

    root = logging.getLogger("mediaserver")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(PrefixFormatter())
        root.addHandler(handler)
        root.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
        root.propagate = False

    logger = root if name == "mediaserver" else root.getChild(name)
    if level is not None:
        logger.setLevel(level)
    return logger
