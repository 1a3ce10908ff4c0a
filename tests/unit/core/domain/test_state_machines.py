"""
core/domain/state_machines.py 테스트
"""

from decimal import Decimal

import pytest

from core.domain.state_machines import (
    OrderStateMachine,
    StateMachineError,
    TransactionStateMachine,
    derive_order_status,
)
from core.types import OrderStatus, TransactionStatus


class TestTransactionStateMachine:
    """입출금 상태 머신"""

    @pytest.mark.parametrize(
        "target",
        [TransactionStatus.COMPLETED, TransactionStatus.REJECTED, TransactionStatus.CANCELLED],
    )
    def test_pending_transitions(self, target: TransactionStatus) -> None:
        machine = TransactionStateMachine()

        assert machine.transition(target) == target.value
        assert machine.is_terminal
        assert machine.history == [("pending", target.value)]

    @pytest.mark.parametrize(
        "terminal",
        [TransactionStatus.COMPLETED, TransactionStatus.REJECTED, TransactionStatus.CANCELLED],
    )
    def test_terminal_states_are_final(self, terminal: TransactionStatus) -> None:
        """종료 상태에서는 어떤 전이도 불가"""
        machine = TransactionStateMachine(terminal)

        for target in TransactionStatus:
            assert machine.can_transition(target) is False

        with pytest.raises(StateMachineError):
            machine.transition(TransactionStatus.COMPLETED)

    def test_pending_to_pending_not_allowed(self) -> None:
        machine = TransactionStateMachine()

        assert machine.can_transition(TransactionStatus.PENDING) is False


class TestOrderStateMachine:
    """주문 상태 머신"""

    def test_open_to_partial_to_filled(self) -> None:
        machine = OrderStateMachine()

        machine.transition(OrderStatus.PARTIAL)
        machine.transition(OrderStatus.PARTIAL)
        machine.transition(OrderStatus.FILLED)

        assert machine.state == "filled"
        assert machine.is_terminal

    def test_partial_can_cancel(self) -> None:
        machine = OrderStateMachine(OrderStatus.PARTIAL)

        assert machine.can_transition(OrderStatus.CANCELLED)

    def test_open_cannot_go_back(self) -> None:
        machine = OrderStateMachine(OrderStatus.PARTIAL)

        assert machine.can_transition(OrderStatus.OPEN) is False

    @pytest.mark.parametrize("terminal", [OrderStatus.FILLED, OrderStatus.CANCELLED])
    def test_terminal(self, terminal: OrderStatus) -> None:
        machine = OrderStateMachine(terminal)

        assert machine.is_terminal
        with pytest.raises(StateMachineError, match="Cannot transition"):
            machine.transition(OrderStatus.PARTIAL)


class TestDeriveOrderStatus:
    """derive_order_status 테스트"""

    @pytest.mark.parametrize(
        "filled, amount, cancelled, expected",
        [
            ("0", "1", False, OrderStatus.OPEN),
            ("0.5", "1", False, OrderStatus.PARTIAL),
            ("1", "1", False, OrderStatus.FILLED),
            ("0", "1", True, OrderStatus.CANCELLED),
            ("0.5", "1", True, OrderStatus.CANCELLED),
            ("1", "1", True, OrderStatus.FILLED),
        ],
    )
    def test_derivation(self, filled: str, amount: str, cancelled: bool, expected) -> None:
        assert derive_order_status(Decimal(filled), Decimal(amount), cancelled) == expected

    def test_decimal_scale_ignored(self) -> None:
        """1.0 == 1 (문자열 표기 차이 무시)"""
        assert derive_order_status(Decimal("1.000"), Decimal("1")) == OrderStatus.FILLED
