"""
관리자 서비스

자산 가격 설정/변동, 거래 가능 여부 변경, 입출금 승인/거부 위임.
권한 확인(role == admin)은 Web 계층에서 수행.
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Asset, Transaction
from core.errors import InvalidAmount
from core.storage.asset_store import AssetStore
from core.types import Decision
from core.utils.decimals import to_decimal
from settlement.transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class AdminService:
    """관리자 작업

    Args:
        db: SQLiteAdapter 인스턴스
        processor: 입출금 처리기 (승인/거부 위임 대상)
    """

    def __init__(self, db: SQLiteAdapter, processor: TransactionProcessor):
        self.db = db
        self.processor = processor
        self.assets = AssetStore(db)

    async def set_price(self, asset_ref: str, price: Any) -> Asset:
        """가격 직접 설정

        Args:
            asset_ref: 자산 ID 또는 심볼
            price: 새 가격 (0 이상)

        Raises:
            NotFound: 자산 없음
            InvalidAmount: 숫자가 아니거나 음수
        """
        value = _decimal(price, "price")
        if value < 0:
            raise InvalidAmount(f"price must not be negative: {value}")

        asset = await self.assets.resolve(asset_ref)
        await self.assets.update_price(asset.asset_id, value)

        logger.info(
            f"Price set: {asset.symbol} {asset.price} → {value}",
            extra={"asset_id": asset.asset_id},
        )
        return await self.assets.resolve(asset.asset_id)

    async def adjust_price(self, asset_ref: str, pct: Any) -> Asset:
        """퍼센트 가격 변동: new = old * (1 + pct / 100)

        24시간 변동률에 pct를 기록.

        Raises:
            NotFound: 자산 없음
            InvalidAmount: 숫자가 아니거나 결과 가격이 음수
        """
        change = _decimal(pct, "pct")
        asset = await self.assets.resolve(asset_ref)

        new_price = asset.price * (1 + change / HUNDRED)
        if new_price < 0:
            raise InvalidAmount(f"Price change {change}% would make {asset.symbol} negative")

        await self.assets.update_price(asset.asset_id, new_price, price_change_24h=change)

        logger.info(
            f"Price adjusted: {asset.symbol} {change:+}% {asset.price} → {new_price}",
            extra={"asset_id": asset.asset_id},
        )
        return await self.assets.resolve(asset.asset_id)

    async def set_active(self, asset_ref: str, is_active: bool) -> Asset:
        """거래 가능 여부 변경 (비활성 자산은 신규 주문 불가)"""
        asset = await self.assets.resolve(asset_ref)
        await self.assets.set_active(asset.asset_id, is_active)

        logger.info(
            f"Asset {'enabled' if is_active else 'disabled'}: {asset.symbol}",
        )
        return await self.assets.resolve(asset.asset_id)

    async def set_logo(self, asset_ref: str, logo_url: str | None) -> Asset:
        """로고 URL 변경 (None이면 제거)"""
        asset = await self.assets.resolve(asset_ref)
        await self.assets.set_logo_url(asset.asset_id, logo_url)

        logger.info(f"Asset logo updated: {asset.symbol}", extra={"logo_url": logo_url})
        return await self.assets.resolve(asset.asset_id)

    async def decide(
        self,
        admin_id: str,
        transaction_id: str,
        decision: Decision | str,
        transaction_hash: str | None = None,
    ) -> Transaction:
        """입출금 승인/거부"""
        return await self.processor.approve(
            admin_id, transaction_id, decision, transaction_hash=transaction_hash
        )


def _decimal(value: Any, field: str) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as e:
        raise InvalidAmount(f"Invalid {field}: {value!r}") from e
