"""
정산 서비스 계층

잔고 원장(core.ledger) 위에서 입출금, 주문 정산, 관리자 작업, 포트폴리오 평가 수행.
"""

from settlement.admin import AdminService
from settlement.order_settlement import OrderSettlement
from settlement.portfolio import Holding, Portfolio, PortfolioService
from settlement.transaction_processor import TransactionProcessor

__all__ = [
    "AdminService",
    "OrderSettlement",
    "TransactionProcessor",
    "PortfolioService",
    "Portfolio",
    "Holding",
]
