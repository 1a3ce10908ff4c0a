"""
거래소 서비스 묶음

앱 수명 동안 하나의 DB 연결과 BalanceGuard를 공유하는 서비스 인스턴스.
요청마다 새로 만들면 잔고 행 잠금이 공유되지 않으므로 app.state에 한 번만 생성.
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Asset
from core.ledger import BalanceGuard, LedgerStore
from core.storage.asset_store import AssetStore
from settlement import AdminService, OrderSettlement, PortfolioService, TransactionProcessor

logger = logging.getLogger(__name__)


class ExchangeServices:
    """Web 계층이 사용하는 서비스 컨테이너

    Args:
        db: 연결된 SQLiteAdapter (쓰기 가능)
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.guard = BalanceGuard()
        self.ledger = LedgerStore(db, self.guard)
        self.assets = AssetStore(db)
        self.transactions = TransactionProcessor(db, self.ledger)
        self.orders = OrderSettlement(db, self.ledger)
        self.admin = AdminService(db, self.transactions)
        self.portfolio = PortfolioService(db, self.ledger)

    async def asset(self, asset_ref: str) -> Asset:
        """심볼 또는 ID로 자산 조회 (없으면 NotFound)"""
        return await self.assets.resolve(asset_ref)

    async def asset_id(self, asset_ref: str) -> str:
        """심볼이면 ID로 변환, 모르는 값은 그대로 반환

        거래쌍 검증은 OrderSettlement가 InvalidPair로 처리.
        """
        asset = await self.assets.get_by_symbol(asset_ref)
        return asset.asset_id if asset else asset_ref
