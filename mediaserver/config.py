"""
미디어 서버 설정값
환경 변수로 기본값을 덮어쓸 수 있다
"""

import os

# 한 번의 Range 요청에 보내는 최대 바이트 수
CHUNK_SIZE = 131072

# 계산된 Range 끝 위치의 최소값
MIN_RANGE_END = 16

# 파일에서 한 번에 읽는 크기
READ_CHUNK_SIZE = 65536

CORS_METHODS = ['GET', 'POST', 'OPTIONS']
CORS_HEADERS = ['Range', 'Content-Type']
CORS_MAX_AGE = 86400

CORS_ALLOW_METHODS = ', '.join(CORS_METHODS)
CORS_ALLOW_HEADERS = ', '.join(CORS_HEADERS)

# 요청 Origin 을 그대로 돌려준다 (Origin 이 없으면 디스패처가 * 사용)
CORS_ALLOW_ORIGIN_REGEX = '.*'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def parse_bool(raw: str, default: bool) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return parse_bool(raw, default)


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    return raw if raw else default


NO_CACHE = env_bool('MEDIASERVER_NO_CACHE', False)
HOST = env_str('MEDIASERVER_HOST', 'localhost')
PORT = env_int('MEDIASERVER_PORT', 8083)
DIRECTORY = env_str('MEDIASERVER_DIRECTORY', '.')
LOG_LEVEL = env_str('MEDIASERVER_LOG_LEVEL', 'INFO').upper()
