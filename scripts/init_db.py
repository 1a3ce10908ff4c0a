"""
DB 스키마 초기화 + 자산 시드

사용법:
    python -m scripts.init_db --mode testnet
    python -m scripts.init_db --db data/custom.db --no-seed
"""

import argparse
import asyncio
import logging
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.logging import setup_logging
from core.storage.asset_store import AssetStore
from core.types import TradingMode

logger = logging.getLogger(__name__)

TABLES = ["assets", "balances", "transactions", "orders", "ledger_entries"]


async def main(db_path: Path, seed: bool) -> None:
    """스키마 생성 및 검증

    Args:
        db_path: DB 파일 경로
        seed: 기본 자산 시드 여부
    """
    logger.info(f"스키마 초기화 시작: {db_path}")

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db, seed=seed)

        missing = [t for t in TABLES if not await db.table_exists(t)]
        if missing:
            logger.error(f"테이블 누락: {missing}")
            raise RuntimeError("스키마 검증 실패")

        assets = await AssetStore(db).list_assets()
        for asset in assets:
            logger.info(f"  {asset.symbol:6} {asset.price:>14} {'(custom)' if asset.is_custom else ''}")

    logger.info(f"스키마 초기화 완료 ✓ (자산 {len(assets)}개)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="DB 스키마 초기화")
    parser.add_argument(
        "--mode",
        choices=["testnet", "production"],
        default="testnet",
        help="운영 모드 (기본: testnet)",
    )
    parser.add_argument("--db", type=Path, default=None, help="DB 경로 (mode보다 우선)")
    parser.add_argument("--no-seed", action="store_true", help="기본 자산 시드 생략")
    args = parser.parse_args()

    setup_logging("scripts")

    path = args.db or get_db_path(TradingMode(args.mode))
    asyncio.run(main(path, seed=not args.no_seed))
