"""
접근 토큰 발급

secrets.yaml의 web.secret_key로 서명한 JWT 출력.

사용법:
    python -m scripts.issue_token alice
    python -m scripts.issue_token admin-1 --role admin --ttl 60
"""

import argparse
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.auth import issue_token
from core.config.loader import get_settings
from core.types import UserRole


def main() -> None:
    parser = argparse.ArgumentParser(description="접근 토큰 발급")
    parser.add_argument("user_id", help="사용자 ID (sub)")
    parser.add_argument(
        "--role",
        choices=[r.value for r in UserRole],
        default=UserRole.USER.value,
    )
    parser.add_argument("--ttl", type=int, default=None, help="유효 시간 (분)")
    parser.add_argument("--secrets", type=Path, default=None, help="secrets.yaml 경로")
    args = parser.parse_args()

    settings = get_settings(args.secrets)
    token = issue_token(
        args.user_id,
        args.role,
        settings.web_secret_key,
        ttl_min=args.ttl or settings.token_ttl_min,
    )
    print(token)


if __name__ == "__main__":
    main()
