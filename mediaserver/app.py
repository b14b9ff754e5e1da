#!/usr/bin/env python3
"""
FastAPI 기반 미디어 스트리밍 서버
Range 요청은 최대 128KB 청크 단위로 나눠 보내고, 등록된 확장자는 변환 핸들러가 처리한다
"""

from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .log import get_logger
from .response import PipeResponse
from .server import MediaServer

logger = get_logger(__name__)


def get_file_path(base_dir: Path, path: str) -> Path:
    """요청 경로를 실제 파일 경로로 변환"""
    # 경로 정규화 및 보안 검사
    clean_path = path.lstrip('/')
    file_path = base_dir / clean_path

    # 경로 순회 공격 방지
    try:
        file_path = file_path.resolve()
        file_path.relative_to(base_dir)
    except (ValueError, OSError):
        raise HTTPException(status_code=403, detail="Access denied")

    return file_path


def create_app(directory: str = config.DIRECTORY, server: Optional[MediaServer] = None) -> FastAPI:
    """directory 아래 파일을 서빙하는 앱 생성"""
    base_dir = Path(directory).resolve()
    media_server = server or MediaServer()

    app = FastAPI(title="Media Server", description="Range 요청과 확장자별 변환을 지원하는 미디어 서버")
    app.state.base_dir = base_dir
    app.state.media_server = media_server

    # CORS 설정 (preflight 는 미들웨어가, 일반 응답 헤더는 디스패처가 채운다)
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=config.CORS_ALLOW_ORIGIN_REGEX,
        allow_methods=config.CORS_METHODS,
        allow_headers=config.CORS_HEADERS,
        max_age=config.CORS_MAX_AGE,
    )

    @app.get("/{path:path}")
    async def serve_file(
        request: Request,
        path: str = "",
        type: Optional[str] = Query(None, description="타입/핸들러 선택용 확장자 (예: .mp4)"),
    ):
        """파일 서빙"""
        file_path = get_file_path(base_dir, path)

        range_header = request.headers.get('range')
        if range_header:
            logger.info(f"Range request: {range_header} for {path}")
        else:
            logger.info(f"Normal request for {path}")

        response = PipeResponse()
        label = '/' + path.lstrip('/')
        media_server.pipe(request, response, str(file_path), type_key=type, label=label)
        return response

    return app


def run_server(port: int = config.PORT, host: str = config.HOST,
               directory: str = config.DIRECTORY, no_cache: bool = config.NO_CACHE):
    """서버 실행"""
    app = create_app(directory, MediaServer(no_cache=no_cache))

    print(f"Media Server")
    print(f"Serving directory: {app.state.base_dir}")
    print(f"Server URL: http://{host}:{port}/")
    print("Features:")
    print(f"  - Range requests in chunks of up to {config.CHUNK_SIZE} bytes")
    print("  - Per-extension transform handlers")
    print(f"  - Size cache {'disabled' if no_cache else 'enabled'}")
    print("  - CORS enabled")
    print("Press Ctrl+C to stop")

    uvicorn.run(app, host=host, port=port, log_level=config.LOG_LEVEL.lower())


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description='Media streaming server with Range support')
    parser.add_argument('--port', '-p', type=int, default=config.PORT, help='Port to serve on')
    parser.add_argument('--host', default=config.HOST, help='Host to bind to')
    parser.add_argument('--directory', '-d', default=config.DIRECTORY, help='Directory to serve')
    parser.add_argument('--no-cache', action='store_true', default=config.NO_CACHE,
                        help='Re-read file sizes on every request')

    args = parser.parse_args(argv)

    run_server(args.port, args.host, args.directory, args.no_cache)


if __name__ == "__main__":
    main()
