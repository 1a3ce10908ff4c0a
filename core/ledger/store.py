"""
Ledger 저장소

사용자별 자산 잔고(available/locked)의 유일한 변경 주체.
모든 변경은 잔고 행 잠금(BalanceGuard) + DB 트랜잭션 안에서 수행되고,
같은 트랜잭션에서 ledger_entries에 감사 기록을 남김.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.domain.models import Balance, LedgerEntry
from core.errors import InsufficientFunds, InvariantViolation, NotFound
from core.ledger.guard import BalanceGuard
from core.ledger.types import LedgerEntryType, entry_delta
from core.types import Ref
from core.utils.decimals import ZERO, add_amount, positive_amount, to_db
from core.utils.ids import new_id
from core.utils.timezone import now_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class LedgerStore:
    """Ledger 저장소

    잔고 조회/잠금/해제/정산과 감사 기록 조회.
    서비스 계층은 잔고를 직접 쓰지 않고 반드시 이 클래스를 거침.

    Args:
        db: SQLite 어댑터
        guard: 잔고 행 잠금 레지스트리 (서비스와 공유)
    """

    def __init__(self, db: SQLiteAdapter, guard: BalanceGuard | None = None):
        self.db = db
        self.guard = guard if guard is not None else BalanceGuard()

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_balance(self, user_id: str, asset_id: str) -> Balance:
        """잔고 조회 (없으면 0 잔고 행 생성, 멱등)"""
        async with self.guard.hold((user_id, asset_id)):
            async with self.db.transaction():
                return await self._ensure(user_id, asset_id)

    async def find_balance(self, user_id: str, asset_id: str) -> Balance:
        """잔고 조회 (행을 만들지 않음, 없으면 0 잔고 반환)"""
        row = await self.db.fetchone_dict(
            "SELECT * FROM balances WHERE user_id = ? AND asset_id = ?",
            (user_id, asset_id),
        )
        if row is None:
            return Balance(user_id=user_id, asset_id=asset_id)
        return Balance.from_row(row)

    async def list_balances(self, user_id: str) -> list[Balance]:
        """사용자의 전체 잔고 목록"""
        rows = await self.db.fetchall_dict(
            "SELECT * FROM balances WHERE user_id = ? ORDER BY asset_id",
            (user_id,),
        )
        return [Balance.from_row(row) for row in rows]

    async def list_entries(
        self,
        user_id: str | None = None,
        asset_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LedgerEntry]:
        """감사 기록 조회 (최신순)

        Args:
            user_id: 사용자 필터 (선택)
            asset_id: 자산 필터 (선택)
            limit: 조회 개수 제한
            offset: 시작 위치
        """
        sql = "SELECT * FROM ledger_entries WHERE 1=1"
        params: list[Any] = []

        if user_id:
            sql += " AND user_id = ?"
            params.append(user_id)
        if asset_id:
            sql += " AND asset_id = ?"
            params.append(asset_id)

        sql += " ORDER BY seq DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = await self.db.fetchall_dict(sql, tuple(params))
        return [LedgerEntry.from_row(row) for row in rows]

    async def audit(self, user_id: str, asset_id: str) -> bool:
        """감사 기록 재생 결과와 현재 잔고 일치 여부

        ledger_entries의 변화량 합계가 balances 행과 같아야 함.
        """
        rows = await self.db.fetchall(
            """
            SELECT entry_type, amount FROM ledger_entries
            WHERE user_id = ? AND asset_id = ?
            ORDER BY seq
            """,
            (user_id, asset_id),
        )

        available = ZERO
        locked = ZERO
        for entry_type, amount in rows:
            d_available, d_locked = entry_delta(entry_type, Decimal(amount))
            available = add_amount(available, d_available)
            locked = add_amount(locked, d_locked)

        balance = await self.find_balance(user_id, asset_id)
        matched = balance.available == available and balance.locked == locked

        if not matched:
            logger.error(
                f"Ledger audit mismatch: {user_id}/{asset_id}",
                extra={
                    "replayed_available": str(available),
                    "replayed_locked": str(locked),
                    "available": str(balance.available),
                    "locked": str(balance.locked),
                },
            )

        return matched

    # -------------------------------------------------------------------------
    # 변경
    # -------------------------------------------------------------------------

    async def lock(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        ref: Ref | None = None,
    ) -> Balance:
        """available → locked 이동

        Raises:
            InvalidAmount: amount <= 0
            InsufficientFunds: available < amount
        """
        value = positive_amount(amount)

        async with self.guard.hold((user_id, asset_id)):
            async with self.db.transaction():
                balance = await self._ensure(user_id, asset_id)

                if balance.available < value:
                    raise InsufficientFunds(
                        f"Insufficient funds: available {balance.available} < {value}"
                    )

                await self._apply(balance, LedgerEntryType.LOCK, value, ref)

        logger.info(
            f"Balance locked: {user_id}/{asset_id} {value}",
            extra={"ref_id": ref.id if ref else None},
        )
        return balance

    async def unlock(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        ref: Ref | None = None,
    ) -> Balance:
        """locked → available 이동

        Raises:
            InvalidAmount: amount <= 0
            InvariantViolation: locked < amount
        """
        value = positive_amount(amount)

        async with self.guard.hold((user_id, asset_id)):
            async with self.db.transaction():
                balance = await self._ensure(user_id, asset_id)

                if balance.locked < value:
                    raise self._violation(
                        f"Unlock exceeds locked: {balance.locked} < {value}",
                        balance,
                    )

                await self._apply(balance, LedgerEntryType.UNLOCK, value, ref)

        logger.info(
            f"Balance unlocked: {user_id}/{asset_id} {value}",
            extra={"ref_id": ref.id if ref else None},
        )
        return balance

    async def settle(
        self,
        debit_user_id: str,
        credit_user_id: str,
        asset_id: str,
        amount: Any,
        ref: Ref | None = None,
    ) -> tuple[Balance, Balance]:
        """정산: debit 사용자의 locked 차감, credit 사용자의 available 증가

        양쪽 모두 반영되거나 둘 다 반영되지 않음.

        Returns:
            (debit 잔고, credit 잔고)

        Raises:
            InvalidAmount: amount <= 0
            InvariantViolation: debit 사용자의 locked < amount
        """
        value = positive_amount(amount)
        debit_key = (debit_user_id, asset_id)
        credit_key = (credit_user_id, asset_id)

        async with self.guard.hold(debit_key, credit_key):
            async with self.db.transaction():
                debit = await self._ensure(debit_user_id, asset_id)
                if debit_key == credit_key:
                    credit = debit
                else:
                    credit = await self._ensure(credit_user_id, asset_id)

                if debit.locked < value:
                    raise self._violation(
                        f"Settlement exceeds locked: {debit.locked} < {value}",
                        debit,
                    )

                await self._apply(debit, LedgerEntryType.SETTLE_DEBIT, value, ref)
                await self._apply(credit, LedgerEntryType.SETTLE_CREDIT, value, ref)

        logger.info(
            f"Settled {value} {asset_id}: {debit_user_id} → {credit_user_id}",
            extra={"ref_id": ref.id if ref else None},
        )
        return debit, credit

    async def credit(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        ref: Ref | None = None,
    ) -> Balance:
        """외부 입금 반영 (available 증가)"""
        value = positive_amount(amount)

        async with self.guard.hold((user_id, asset_id)):
            async with self.db.transaction():
                balance = await self._ensure(user_id, asset_id)
                await self._apply(balance, LedgerEntryType.DEPOSIT_CREDIT, value, ref)

        logger.info(
            f"Balance credited: {user_id}/{asset_id} {value}",
            extra={"ref_id": ref.id if ref else None},
        )
        return balance

    async def release(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        ref: Ref | None = None,
    ) -> Balance:
        """출금 확정 (locked 소멸, 자금이 시스템을 떠남)

        Raises:
            InvariantViolation: locked < amount
        """
        value = positive_amount(amount)

        async with self.guard.hold((user_id, asset_id)):
            async with self.db.transaction():
                balance = await self._ensure(user_id, asset_id)

                if balance.locked < value:
                    raise self._violation(
                        f"Release exceeds locked: {balance.locked} < {value}",
                        balance,
                    )

                await self._apply(balance, LedgerEntryType.WITHDRAWAL_RELEASE, value, ref)

        logger.info(
            f"Balance released: {user_id}/{asset_id} {value}",
            extra={"ref_id": ref.id if ref else None},
        )
        return balance

    # -------------------------------------------------------------------------
    # 내부 구현 (호출자가 잠금 + 트랜잭션 보유)
    # -------------------------------------------------------------------------

    async def _ensure(self, user_id: str, asset_id: str) -> Balance:
        """잔고 행이 없으면 0으로 생성 후 조회

        Raises:
            NotFound: 등록되지 않은 자산
        """
        row = await self.db.fetchone_dict(
            "SELECT * FROM balances WHERE user_id = ? AND asset_id = ?",
            (user_id, asset_id),
        )
        if row is not None:
            return Balance.from_row(row)

        exists = await self.db.fetchone(
            "SELECT 1 FROM assets WHERE asset_id = ?",
            (asset_id,),
        )
        if exists is None:
            raise NotFound(f"Asset not found: {asset_id}")

        now = now_iso()
        await self.db.execute(
            """
            INSERT OR IGNORE INTO balances (user_id, asset_id, available, locked, created_at, updated_at)
            VALUES (?, ?, '0', '0', ?, ?)
            """,
            (user_id, asset_id, now, now),
        )
        row = await self.db.fetchone_dict(
            "SELECT * FROM balances WHERE user_id = ? AND asset_id = ?",
            (user_id, asset_id),
        )
        assert row is not None
        return Balance.from_row(row)

    async def _apply(
        self,
        balance: Balance,
        entry_type: LedgerEntryType,
        amount: Decimal,
        ref: Ref | None,
    ) -> None:
        """잔고 변경 + 감사 기록 저장

        변경 결과가 음수가 되면 쓰기 전에 InvariantViolation.
        balance 객체는 변경 후 값으로 갱신됨.
        """
        d_available, d_locked = entry_delta(entry_type, amount)
        new_available = add_amount(balance.available, d_available)
        new_locked = add_amount(balance.locked, d_locked)

        if new_available < 0 or new_locked < 0:
            raise self._violation(
                f"{entry_type.value} would make balance negative: "
                f"available={new_available}, locked={new_locked}",
                balance,
            )

        now = now_iso()

        await self.db.execute(
            """
            UPDATE balances SET available = ?, locked = ?, updated_at = ?
            WHERE user_id = ? AND asset_id = ?
            """,
            (to_db(new_available), to_db(new_locked), now, balance.user_id, balance.asset_id),
        )

        await self.db.execute(
            """
            INSERT INTO ledger_entries (
                entry_id, ts, user_id, asset_id, entry_type, amount,
                available_after, locked_after, ref_kind, ref_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                new_id("le"),
                now,
                balance.user_id,
                balance.asset_id,
                entry_type.value,
                to_db(amount),
                to_db(new_available),
                to_db(new_locked),
                ref.kind if ref else None,
                ref.id if ref else None,
            ),
        )

        balance.available = new_available
        balance.locked = new_locked

    def _violation(self, message: str, balance: Balance) -> InvariantViolation:
        """InvariantViolation 생성 + ERROR 로그"""
        logger.error(
            f"Invariant violation: {message}",
            extra={
                "user_id": balance.user_id,
                "asset_id": balance.asset_id,
                "available": str(balance.available),
                "locked": str(balance.locked),
            },
        )
        return InvariantViolation(message)
