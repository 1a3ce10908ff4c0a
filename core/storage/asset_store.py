"""
AssetStore - 자산 저장소

assets 테이블 CRUD 처리.
가격 변경은 관리자 서비스(settlement.admin)만 호출.
"""

import logging
from decimal import Decimal

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Asset
from core.errors import NotFound
from core.utils.decimals import to_db
from core.utils.timezone import now_iso

logger = logging.getLogger(__name__)


class AssetStore:
    """자산 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get(self, asset_id: str) -> Asset | None:
        """ID로 자산 조회"""
        row = await self.db.fetchone_dict(
            "SELECT * FROM assets WHERE asset_id = ?",
            (asset_id,),
        )
        return Asset.from_row(row) if row else None

    async def get_by_symbol(self, symbol: str) -> Asset | None:
        """심볼로 자산 조회 (대소문자 무시)"""
        row = await self.db.fetchone_dict(
            "SELECT * FROM assets WHERE symbol = ?",
            (symbol.upper(),),
        )
        return Asset.from_row(row) if row else None

    async def resolve(self, asset_ref: str) -> Asset:
        """ID 또는 심볼로 자산 조회

        Raises:
            NotFound: 자산 없음
        """
        asset = await self.get(asset_ref)
        if asset is None:
            asset = await self.get_by_symbol(asset_ref)
        if asset is None:
            raise NotFound(f"Asset not found: {asset_ref}")
        return asset

    async def list_assets(self, active_only: bool = False) -> list[Asset]:
        """자산 목록 (심볼순)"""
        sql = "SELECT * FROM assets"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY symbol"

        rows = await self.db.fetchall_dict(sql)
        return [Asset.from_row(row) for row in rows]

    async def update_price(
        self,
        asset_id: str,
        price: Decimal,
        price_change_24h: Decimal | None = None,
    ) -> None:
        """가격 갱신 (호출자가 음수 여부 검증)"""
        now = now_iso()

        async with self.db.transaction():
            if price_change_24h is None:
                cursor = await self.db.execute(
                    "UPDATE assets SET price = ?, updated_at = ? WHERE asset_id = ?",
                    (to_db(price), now, asset_id),
                )
            else:
                cursor = await self.db.execute(
                    """
                    UPDATE assets SET price = ?, price_change_24h = ?, updated_at = ?
                    WHERE asset_id = ?
                    """,
                    (to_db(price), to_db(price_change_24h), now, asset_id),
                )

            if cursor.rowcount == 0:
                raise NotFound(f"Asset not found: {asset_id}")

    async def set_active(self, asset_id: str, is_active: bool) -> None:
        """거래 가능 여부 변경"""
        async with self.db.transaction():
            cursor = await self.db.execute(
                "UPDATE assets SET is_active = ?, updated_at = ? WHERE asset_id = ?",
                (int(is_active), now_iso(), asset_id),
            )
            if cursor.rowcount == 0:
                raise NotFound(f"Asset not found: {asset_id}")

    async def set_logo_url(self, asset_id: str, logo_url: str | None) -> None:
        """로고 URL 변경"""
        async with self.db.transaction():
            cursor = await self.db.execute(
                "UPDATE assets SET logo_url = ?, updated_at = ? WHERE asset_id = ?",
                (logo_url, now_iso(), asset_id),
            )
            if cursor.rowcount == 0:
                raise NotFound(f"Asset not found: {asset_id}")
