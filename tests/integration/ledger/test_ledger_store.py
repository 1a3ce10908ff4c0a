"""LedgerStore 통합 테스트"""

import asyncio
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import InsufficientFunds, InvalidAmount, InvariantViolation, NotFound
from core.ledger.store import LedgerStore
from core.ledger.types import LedgerEntryType
from core.types import Ref


async def _total(db: SQLiteAdapter, asset_id: str) -> Decimal:
    """자산 전체 보유량 (모든 사용자 available + locked)"""
    rows = await db.fetchall(
        "SELECT available, locked FROM balances WHERE asset_id = ?",
        (asset_id,),
    )
    return sum((Decimal(a) + Decimal(l) for a, l in rows), Decimal("0"))


class TestGetBalance:
    """잔고 조회"""

    async def test_creates_zero_row(self, ledger: LedgerStore, usdt: str) -> None:
        balance = await ledger.get_balance("alice", usdt)

        assert balance.available == 0
        assert balance.locked == 0
        assert len(await ledger.list_balances("alice")) == 1

    async def test_idempotent(self, ledger: LedgerStore, usdt: str) -> None:
        await ledger.get_balance("alice", usdt)
        await ledger.get_balance("alice", usdt)

        assert len(await ledger.list_balances("alice")) == 1

    async def test_unknown_asset(self, ledger: LedgerStore) -> None:
        with pytest.raises(NotFound):
            await ledger.get_balance("alice", "ast-nope")

    async def test_find_does_not_create(self, ledger: LedgerStore, usdt: str) -> None:
        balance = await ledger.find_balance("alice", usdt)

        assert balance.total == 0
        assert await ledger.list_balances("alice") == []


class TestLockUnlock:
    """잠금 / 해제"""

    async def test_lock(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "100")

        balance = await ledger.lock("alice", usdt, "40", Ref.order("ord-1"))

        assert balance.available == Decimal("60")
        assert balance.locked == Decimal("40")

    async def test_lock_insufficient(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "10")

        with pytest.raises(InsufficientFunds):
            await ledger.lock("alice", usdt, "10.01")

        balance = await ledger.get_balance("alice", usdt)
        assert balance.available == Decimal("10")
        assert balance.locked == 0

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    async def test_lock_invalid_amount(self, ledger: LedgerStore, usdt: str, amount) -> None:
        with pytest.raises(InvalidAmount):
            await ledger.lock("alice", usdt, amount)

        # 검증 실패는 잔고 행도 만들지 않음
        assert await ledger.list_balances("alice") == []

    async def test_unlock(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "40")

        balance = await ledger.unlock("alice", usdt, "15")

        assert balance.available == Decimal("75")
        assert balance.locked == Decimal("25")

    async def test_unlock_more_than_locked(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "5")

        with pytest.raises(InvariantViolation):
            await ledger.unlock("alice", usdt, "6")

        balance = await ledger.get_balance("alice", usdt)
        assert balance.locked == Decimal("5")


class TestSettle:
    """정산"""

    async def test_moves_locked_to_available(
        self,
        ledger: LedgerStore,
        db: SQLiteAdapter,
        usdt: str,
        fund,
    ) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "50")

        debit, credit = await ledger.settle("alice", "bob", usdt, "30", Ref.order("ord-1"))

        assert debit.locked == Decimal("20")
        assert debit.available == Decimal("50")
        assert credit.available == Decimal("30")
        assert await _total(db, usdt) == Decimal("100")

    async def test_exceeds_locked_applies_nothing(
        self,
        ledger: LedgerStore,
        usdt: str,
        fund,
    ) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "10")

        with pytest.raises(InvariantViolation):
            await ledger.settle("alice", "bob", usdt, "11")

        assert (await ledger.get_balance("alice", usdt)).locked == Decimal("10")
        assert (await ledger.find_balance("bob", usdt)).available == 0

    async def test_same_user(self, ledger: LedgerStore, usdt: str, fund) -> None:
        """자기 자신과의 정산: locked → available"""
        await fund("alice", usdt, "10")
        await ledger.lock("alice", usdt, "10")

        debit, credit = await ledger.settle("alice", "alice", usdt, "4")

        assert debit is credit
        assert debit.available == Decimal("4")
        assert debit.locked == Decimal("6")


class TestCreditRelease:
    """입금 반영 / 출금 확정"""

    async def test_credit(self, ledger: LedgerStore, usdt: str) -> None:
        balance = await ledger.credit("alice", usdt, "12.5")

        assert balance.available == Decimal("12.5")

    async def test_release(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "20")
        await ledger.lock("alice", usdt, "20")

        balance = await ledger.release("alice", usdt, "20")

        assert balance.total == 0

    async def test_release_more_than_locked(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "20")

        with pytest.raises(InvariantViolation):
            await ledger.release("alice", usdt, "1")


class TestAuditTrail:
    """감사 기록"""

    async def test_every_change_recorded(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "30", Ref.order("ord-1"))
        await ledger.unlock("alice", usdt, "10", Ref.order("ord-1"))

        entries = await ledger.list_entries(user_id="alice")

        # 최신순
        assert [e.entry_type for e in entries] == [
            LedgerEntryType.UNLOCK.value,
            LedgerEntryType.LOCK.value,
            LedgerEntryType.DEPOSIT_CREDIT.value,
        ]
        assert entries[0].ref_kind == "ORDER"
        assert entries[0].ref_id == "ord-1"
        assert entries[0].available_after == Decimal("80")
        assert entries[0].locked_after == Decimal("20")

    async def test_failed_change_not_recorded(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "5")

        with pytest.raises(InsufficientFunds):
            await ledger.lock("alice", usdt, "6")

        assert len(await ledger.list_entries(user_id="alice")) == 1

    async def test_audit_matches(self, ledger: LedgerStore, usdt: str, fund) -> None:
        await fund("alice", usdt, "100")
        await ledger.lock("alice", usdt, "60")
        await ledger.settle("alice", "bob", usdt, "25")
        await ledger.release("alice", usdt, "5")

        assert await ledger.audit("alice", usdt) is True
        assert await ledger.audit("bob", usdt) is True

    async def test_audit_detects_tampering(
        self,
        ledger: LedgerStore,
        db: SQLiteAdapter,
        usdt: str,
        fund,
    ) -> None:
        await fund("alice", usdt, "100")
        await db.execute(
            "UPDATE balances SET available = '1000' WHERE user_id = 'alice'"
        )
        await db.commit()

        assert await ledger.audit("alice", usdt) is False

    async def test_pagination(self, ledger: LedgerStore, usdt: str, fund) -> None:
        for _ in range(5):
            await fund("alice", usdt, "1")

        page = await ledger.list_entries(user_id="alice", limit=2, offset=2)

        assert len(page) == 2
        assert page[0].available_after == Decimal("3")


class TestConcurrency:
    """동시성"""

    async def test_concurrent_locks_never_overdraw(
        self,
        ledger: LedgerStore,
        usdt: str,
        fund,
    ) -> None:
        """잔고 100에 30씩 10번 동시 잠금 → 3번만 성공"""
        await fund("alice", usdt, "100")

        results = await asyncio.gather(
            *(ledger.lock("alice", usdt, "30") for _ in range(10)),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, InsufficientFunds)]
        assert len(succeeded) == 3
        assert len(failed) == 7

        balance = await ledger.get_balance("alice", usdt)
        assert balance.available == Decimal("10")
        assert balance.locked == Decimal("90")
        assert await ledger.audit("alice", usdt) is True

    async def test_concurrent_settlements_conserve(
        self,
        ledger: LedgerStore,
        db: SQLiteAdapter,
        usdt: str,
        fund,
    ) -> None:
        """양방향 동시 정산 후 총량 보존"""
        await fund("alice", usdt, "50")
        await fund("bob", usdt, "50")
        await ledger.lock("alice", usdt, "50")
        await ledger.lock("bob", usdt, "50")

        await asyncio.gather(
            *(ledger.settle("alice", "bob", usdt, "1") for _ in range(20)),
            *(ledger.settle("bob", "alice", usdt, "1") for _ in range(20)),
        )

        assert await _total(db, usdt) == Decimal("100")
        alice = await ledger.get_balance("alice", usdt)
        assert alice.available == Decimal("20")
        assert alice.locked == Decimal("30")
