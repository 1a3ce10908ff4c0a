"""
유틸리티 패키지

ID 생성, Decimal 변환, 타임존 처리 등 공통 유틸리티
"""

from core.utils.decimals import ZERO, from_db, to_db, to_decimal
from core.utils.ids import new_id
from core.utils.timezone import now_iso, now_utc, parse_ts

__all__ = [
    "ZERO",
    "from_db",
    "to_db",
    "to_decimal",
    "new_id",
    "now_iso",
    "now_utc",
    "parse_ts",
]
