"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → moonex/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    QUOTE_ASSET: str = "USDT"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    # 저장소 접근 타임아웃 (초)
    STORAGE_TIMEOUT_SEC: float = 5.0

    # JWT 토큰 유효 기간 (분)
    TOKEN_TTL_MIN: int = 720
    TOKEN_ALGORITHM: str = "HS256"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SECRETS_FILE: Path = CONFIG_DIR / "secrets.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "moonex_prod.db"
    TEST_DB: Path = DATA_DIR / "moonex_test.db"


# 스키마 초기화 시 등록되는 기본 자산
# (symbol, name, is_custom, price)
SEED_ASSETS: list[tuple[str, str, bool, str]] = [
    ("BTC", "Bitcoin", False, "43000"),
    ("ETH", "Ethereum", False, "2300"),
    ("BNB", "BNB", False, "220"),
    ("XRP", "XRP", False, "0.52"),
    ("USDT", "Tether", False, "1.00"),
    ("MOON", "Moon Token", True, "0.001"),
]
