"""
타임존 유틸리티

내부 저장: UTC ISO 문자열 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """현재 UTC 시간을 ISO 8601 문자열로 반환 (DB 저장용)"""
    return now_utc().isoformat()


def parse_ts(value: str | None) -> datetime | None:
    """DB에 저장된 시각 문자열을 datetime으로 변환

    naive 값(SQLite datetime('now') 기본값)은 UTC로 간주.

    Args:
        value: ISO 8601 또는 "YYYY-MM-DD HH:MM:SS" 문자열

    Returns:
        UTC datetime 또는 None
    """
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
