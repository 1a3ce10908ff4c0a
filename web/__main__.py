"""
Web 진입점

실행 방법:
    python -m web
    python -m web --host 0.0.0.0 --port 8000
"""

import argparse

import uvicorn

from core.constants import Defaults
from core.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="MoonEx Web API 서버")
    parser.add_argument("--host", default=Defaults.WEB_HOST)
    parser.add_argument("--port", type=int, default=Defaults.WEB_PORT)
    args = parser.parse_args()

    # 로깅 설정 (콘솔 + 파일)
    setup_logging("web")

    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
