"""
포트폴리오 평가

잔고 × 현재 가격(USDT 기준)으로 자산별 평가액과 합계 계산.
잔고를 변경하지 않는 읽기 전용 계산.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Balance
from core.ledger.store import LedgerStore
from core.storage.asset_store import AssetStore
from core.utils.decimals import ZERO


@dataclass
class Holding:
    """자산별 보유 현황"""

    asset_id: str
    symbol: str
    available: Decimal
    locked: Decimal
    price: Decimal

    @property
    def total(self) -> Decimal:
        return self.available + self.locked

    @property
    def value(self) -> Decimal:
        return self.total * self.price

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "symbol": self.symbol,
            "available": str(self.available),
            "locked": str(self.locked),
            "total": str(self.total),
            "price": str(self.price),
            "value": str(self.value),
        }


@dataclass
class Portfolio:
    """사용자 포트폴리오"""

    user_id: str
    holdings: list[Holding] = field(default_factory=list)

    @property
    def total_value(self) -> Decimal:
        return sum((h.value for h in self.holdings), ZERO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "holdings": [h.to_dict() for h in self.holdings],
            "total_value": str(self.total_value),
        }


class PortfolioService:
    """포트폴리오 평가 서비스

    Args:
        db: SQLiteAdapter 인스턴스
        ledger: 잔고 원장
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore):
        self.ledger = ledger
        self.assets = AssetStore(db)

    async def valuate(self, user_id: str) -> Portfolio:
        """보유 잔고 평가 (잔고가 0인 자산은 제외)"""
        balances: list[Balance] = await self.ledger.list_balances(user_id)
        assets = {a.asset_id: a for a in await self.assets.list_assets()}

        holdings = []
        for balance in balances:
            if balance.total == 0:
                continue
            asset = assets.get(balance.asset_id)
            if asset is None:
                continue
            holdings.append(
                Holding(
                    asset_id=asset.asset_id,
                    symbol=asset.symbol,
                    available=balance.available,
                    locked=balance.locked,
                    price=asset.price,
                )
            )

        holdings.sort(key=lambda h: h.value, reverse=True)
        return Portfolio(user_id=user_id, holdings=holdings)
