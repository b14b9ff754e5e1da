"""
Range 헤더 -> 전송할 바이트 구간 계산
"""

from typing import NamedTuple, Optional

from . import config
from .log import get_logger

logger = get_logger(__name__)


class RangeWindow(NamedTuple):
    """(start, end, total) 바이트 구간

    total 이 0 이면 부분 응답이 아닌 전체 응답이다.
    """
    start: int
    end: int
    total: int

    @property
    def partial(self) -> bool:
        return self.total != 0


def full_window(total: int) -> RangeWindow:
    return RangeWindow(0, total, 0)


def parse_range_start(range_header: Optional[str]) -> Optional[int]:
    """'bytes=X-...' 에서 X 를 꺼낸다. 형식이 맞지 않으면 None"""
    if not range_header:
        return None

    location = range_header.find('bytes=')
    if location < 0:
        return None

    parts = range_header[location + 6:].split('-', 1)
    start_str = parts[0].strip()
    if not start_str.isdigit():
        return None
    return int(start_str)


def compute_range(range_header: Optional[str], total: int) -> RangeWindow:
    """Range 헤더와 파일 크기로 전송 구간 계산

    시작 위치부터 최대 CHUNK_SIZE 만큼만 보낸다.
    끝 위치가 파일 크기와 같으면 1 줄이고, MIN_RANGE_END 보다 작으면 올린다.
    시작 위치가 파일 끝 이상이면 전체 응답으로 돌린다.
    """
    if not range_header:
        return full_window(total)

    start = parse_range_start(range_header)
    if start is None or start >= total:
        logger.debug(f"Malformed range {range_header!r}, serving full body")
        return full_window(total)

    end = min(start + config.CHUNK_SIZE, total)
    if end == total:
        end -= 1
    if end < config.MIN_RANGE_END:
        end = config.MIN_RANGE_END

    return RangeWindow(start, end, total)
