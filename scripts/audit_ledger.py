"""
원장 감사

ledger_entries 재생 결과와 balances 행을 전부 대조.
불일치가 있으면 종료 코드 1.

사용법:
    python -m scripts.audit_ledger --mode testnet
"""

import argparse
import asyncio
import logging
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.ledger.store import LedgerStore
from core.logging import setup_logging
from core.types import TradingMode

logger = logging.getLogger(__name__)


async def main(db_path: Path) -> int:
    """전체 잔고 행 감사

    Returns:
        불일치 행 수
    """
    async with SQLiteAdapter(db_path, readonly=True) as db:
        ledger = LedgerStore(db)
        rows = await db.fetchall("SELECT user_id, asset_id FROM balances ORDER BY user_id, asset_id")

        mismatched = 0
        for user_id, asset_id in rows:
            if not await ledger.audit(user_id, asset_id):
                mismatched += 1

    logger.info(f"감사 완료: {len(rows)}개 잔고 행, 불일치 {mismatched}개")
    return mismatched


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="원장 감사")
    parser.add_argument(
        "--mode",
        choices=["testnet", "production"],
        default="testnet",
        help="운영 모드 (기본: testnet)",
    )
    parser.add_argument("--db", type=Path, default=None, help="DB 경로 (mode보다 우선)")
    args = parser.parse_args()

    setup_logging("scripts")

    path = args.db or get_db_path(TradingMode(args.mode))
    sys.exit(1 if asyncio.run(main(path)) else 0)
