"""
State Machines

입출금(Transaction), 주문(Order)의 상태 전이 관리.
주문 상태는 저장하지 않고 체결 수량에서 파생 (derive_order_status).
"""

import logging
from decimal import Decimal
from enum import Enum

from core.types import OrderStatus, TransactionStatus

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]],
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions
        self._name = name
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """더 이상 전이할 수 없는 상태인지 여부"""
        return not self._transitions.get(self._state)

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인

        Args:
            to_state: 목표 상태

        Returns:
            전이 가능 여부
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state
        allowed = self._transitions.get(self._state, [])
        return target in allowed

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state

        if not self.can_transition(target):
            allowed = self._transitions.get(self._state, [])
            raise StateMachineError(
                f"{self._name}: Cannot transition from {self._state} to {target}. "
                f"Allowed: {allowed}"
            )

        old_state = self._state
        self._state = target
        self._history.append((old_state, target))

        logger.debug(
            f"{self._name}: {old_state} → {target}",
        )

        return target

    @property
    def history(self) -> list[tuple[str, str]]:
        """상태 전이 이력"""
        return self._history.copy()


class TransactionStateMachine(StateMachine):
    """입출금 상태 머신

    전이 규칙:
    - pending → completed: 관리자 승인
    - pending → rejected: 관리자 거부
    - pending → cancelled: 사용자 취소 (관리자 처리 전에만)
    """

    TRANSITIONS: dict[str, list[str]] = {
        TransactionStatus.PENDING.value: [
            TransactionStatus.COMPLETED.value,
            TransactionStatus.REJECTED.value,
            TransactionStatus.CANCELLED.value,
        ],
    }

    def __init__(self, initial_state: str | Enum = TransactionStatus.PENDING):
        super().__init__(initial_state, self.TRANSITIONS, "TransactionSM")


class OrderStateMachine(StateMachine):
    """주문 상태 머신

    전이 규칙:
    - open → partial / filled / cancelled
    - partial → partial (추가 부분 체결) / filled / cancelled
    """

    TRANSITIONS: dict[str, list[str]] = {
        OrderStatus.OPEN.value: [
            OrderStatus.PARTIAL.value,
            OrderStatus.FILLED.value,
            OrderStatus.CANCELLED.value,
        ],
        OrderStatus.PARTIAL.value: [
            OrderStatus.PARTIAL.value,
            OrderStatus.FILLED.value,
            OrderStatus.CANCELLED.value,
        ],
    }

    def __init__(self, initial_state: str | Enum = OrderStatus.OPEN):
        super().__init__(initial_state, self.TRANSITIONS, "OrderSM")


def derive_order_status(
    filled_amount: Decimal,
    amount: Decimal,
    is_cancelled: bool = False,
) -> OrderStatus:
    """체결 수량으로부터 주문 상태 계산 (순수 함수)

    - filled: filled_amount == amount (취소 여부와 무관)
    - cancelled: 취소됨
    - partial: 0 < filled_amount < amount
    - open: 그 외
    """
    if filled_amount >= amount:
        return OrderStatus.FILLED
    if is_cancelled:
        return OrderStatus.CANCELLED
    if filled_amount > 0:
        return OrderStatus.PARTIAL
    return OrderStatus.OPEN
