"""
스토리지 모듈

자산, 입출금, 주문 저장소.
잔고(balances)는 core.ledger.LedgerStore만 변경.
"""

from core.storage.asset_store import AssetStore
from core.storage.order_store import OrderStore
from core.storage.transaction_store import TransactionStore

__all__ = [
    "AssetStore",
    "OrderStore",
    "TransactionStore",
]
