"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum


class TradingMode(str, Enum):
    """운영 모드 (실서비스 / 테스트넷)"""

    PRODUCTION = "production"
    TESTNET = "testnet"


class UserRole(str, Enum):
    """사용자 역할"""

    USER = "user"
    ADMIN = "admin"


class TransactionKind(str, Enum):
    """입출금 종류"""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, Enum):
    """입출금 상태"""

    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Decision(str, Enum):
    """관리자 승인 결정"""

    APPROVE = "approve"
    REJECT = "reject"


class OrderSide(str, Enum):
    """주문 방향"""

    BUY = "buy"
    SELL = "sell"


class OrderKind(str, Enum):
    """주문 유형"""

    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(str, Enum):
    """주문 상태"""

    OPEN = "open"
    PARTIAL = "partial"
    FILLED = "filled"
    CANCELLED = "cancelled"


class RefKind(str, Enum):
    """원장 항목의 참조 대상"""

    TRANSACTION = "TRANSACTION"
    ORDER = "ORDER"


@dataclass(frozen=True)
class Ref:
    """원장 항목 참조 (불변)

    어떤 입출금/주문이 잔고 변경을 일으켰는지 기록
    """

    kind: str
    id: str

    @classmethod
    def transaction(cls, transaction_id: str) -> "Ref":
        """입출금 참조 생성"""
        return cls(kind=RefKind.TRANSACTION.value, id=transaction_id)

    @classmethod
    def order(cls, order_id: str) -> "Ref":
        """주문 참조 생성"""
        return cls(kind=RefKind.ORDER.value, id=order_id)
