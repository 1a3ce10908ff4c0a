"""
원장 타입 정의

LedgerEntryType과 항목별 잔고 효과 정의
"""

from decimal import Decimal
from enum import Enum

# (user_id, asset_id)
BalanceKey = tuple[str, str]


class LedgerEntryType(str, Enum):
    """원장 항목 종류

    잔고 행 하나에 대한 변경 한 건.
    str을 상속하여 JSON 직렬화 가능.
    """

    LOCK = "LOCK"  # available → locked
    UNLOCK = "UNLOCK"  # locked → available
    SETTLE_DEBIT = "SETTLE_DEBIT"  # 체결 지급측 locked 차감
    SETTLE_CREDIT = "SETTLE_CREDIT"  # 체결 수령측 available 증가
    DEPOSIT_CREDIT = "DEPOSIT_CREDIT"  # 입금 승인
    WITHDRAWAL_RELEASE = "WITHDRAWAL_RELEASE"  # 출금 승인 (locked 소멸)


# 항목별 (available 부호, locked 부호)
ENTRY_EFFECTS: dict[LedgerEntryType, tuple[int, int]] = {
    LedgerEntryType.LOCK: (-1, 1),
    LedgerEntryType.UNLOCK: (1, -1),
    LedgerEntryType.SETTLE_DEBIT: (0, -1),
    LedgerEntryType.SETTLE_CREDIT: (1, 0),
    LedgerEntryType.DEPOSIT_CREDIT: (1, 0),
    LedgerEntryType.WITHDRAWAL_RELEASE: (0, -1),
}


def entry_delta(entry_type: LedgerEntryType | str, amount: Decimal) -> tuple[Decimal, Decimal]:
    """항목 1건이 (available, locked)에 주는 변화량"""
    sign_available, sign_locked = ENTRY_EFFECTS[LedgerEntryType(entry_type)]
    return _signed(amount, sign_available), _signed(amount, sign_locked)


def _signed(amount: Decimal, sign: int) -> Decimal:
    # copy_negate는 컨텍스트 정밀도로 반올림하지 않음
    if sign > 0:
        return amount
    if sign < 0:
        return amount.copy_negate()
    return Decimal(0)
