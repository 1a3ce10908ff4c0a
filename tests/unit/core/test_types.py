"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능하고, Ref가 올바르게 동작하는지 확인
"""

import pytest

from core.types import (
    Decision,
    OrderKind,
    OrderSide,
    OrderStatus,
    Ref,
    RefKind,
    TradingMode,
    TransactionKind,
    TransactionStatus,
    UserRole,
)


class TestTradingMode:
    """TradingMode 테스트"""

    def test_values(self) -> None:
        assert TradingMode.PRODUCTION.value == "production"
        assert TradingMode.TESTNET.value == "testnet"

    def test_from_string(self) -> None:
        assert TradingMode("production") == TradingMode.PRODUCTION
        assert TradingMode("testnet") == TradingMode.TESTNET


class TestStringEnums:
    """문자열 비교 (str 상속)"""

    def test_user_role(self) -> None:
        assert UserRole.ADMIN == "admin"
        assert UserRole("user") == UserRole.USER

    def test_transaction_enums(self) -> None:
        assert TransactionKind.DEPOSIT == "deposit"
        assert TransactionKind.WITHDRAWAL == "withdrawal"
        assert [s.value for s in TransactionStatus] == [
            "pending",
            "completed",
            "rejected",
            "cancelled",
        ]

    def test_order_enums(self) -> None:
        assert OrderSide.BUY == "buy"
        assert OrderKind.LIMIT == "limit"
        assert {s.value for s in OrderStatus} == {"open", "partial", "filled", "cancelled"}

    def test_decision(self) -> None:
        assert Decision("approve") == Decision.APPROVE

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            OrderSide("hold")


class TestRef:
    """Ref 테스트"""

    def test_transaction(self) -> None:
        ref = Ref.transaction("tx-1")

        assert ref.kind == RefKind.TRANSACTION.value
        assert ref.id == "tx-1"

    def test_order(self) -> None:
        ref = Ref.order("ord-1")

        assert ref.kind == "ORDER"

    def test_frozen(self) -> None:
        ref = Ref.order("ord-1")

        with pytest.raises(AttributeError):
            ref.id = "ord-2"  # type: ignore

    def test_equality(self) -> None:
        assert Ref.order("a") == Ref(kind="ORDER", id="a")
