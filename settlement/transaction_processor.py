"""
입출금 처리기

입금/출금 요청 생성, 관리자 승인/거부, 사용자 취소.

상태 전이:
- pending → completed: 승인 (입금: available 증가 / 출금: locked 소멸)
- pending → rejected: 거부 (출금: locked → available 복원)
- pending → cancelled: 사용자 취소 (출금: locked → available 복원)

출금 요청은 요청 시점에 금액을 잠가서 같은 잔고로 중복 출금 불가.
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Asset, Transaction
from core.domain.state_machines import TransactionStateMachine
from core.errors import AlreadyFinalized, NotFound
from core.ledger.store import LedgerStore
from core.storage.asset_store import AssetStore
from core.storage.transaction_store import TransactionStore
from core.types import Decision, Ref, TransactionKind, TransactionStatus
from core.utils.decimals import positive_amount
from core.utils.ids import new_id

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """입출금 처리기

    Args:
        db: SQLiteAdapter 인스턴스
        ledger: 잔고 원장 (잔고 변경은 전부 여기를 거침)
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore):
        self.db = db
        self.ledger = ledger
        self.assets = AssetStore(db)
        self.transactions = TransactionStore(db)

    async def _asset(self, asset_id: str) -> Asset:
        asset = await self.assets.get(asset_id)
        if asset is None:
            raise NotFound(f"Asset not found: {asset_id}")
        return asset

    # -------------------------------------------------------------------------
    # 요청
    # -------------------------------------------------------------------------

    async def request_deposit(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        wallet_address: str | None = None,
        transaction_hash: str | None = None,
    ) -> Transaction:
        """입금 요청 생성

        잔고는 건드리지 않음. 자금은 외부에서 들어오고,
        관리자 승인 시점에 available에 반영.
        transaction_hash는 입금 증빙으로 함께 저장.

        Raises:
            InvalidAmount: amount <= 0
            NotFound: 자산 없음
        """
        value = positive_amount(amount)
        asset = await self._asset(asset_id)

        transaction = await self.transactions.insert(
            user_id=user_id,
            asset_id=asset.asset_id,
            kind=TransactionKind.DEPOSIT,
            amount=value,
            wallet_address=wallet_address,
            transaction_hash=transaction_hash,
        )

        logger.info(
            f"Deposit requested: {transaction.transaction_id}",
            extra={"user_id": user_id, "asset": asset.symbol, "amount": str(value)},
        )
        return transaction

    async def request_withdrawal(
        self,
        user_id: str,
        asset_id: str,
        amount: Any,
        wallet_address: str | None = None,
    ) -> Transaction:
        """출금 요청 생성

        금액 잠금과 요청 저장을 하나의 트랜잭션으로 처리.

        Raises:
            InvalidAmount: amount <= 0
            NotFound: 자산 없음
            InsufficientFunds: available < amount
        """
        value = positive_amount(amount)
        asset = await self._asset(asset_id)
        transaction_id = new_id("tx")

        async with self.ledger.guard.hold((user_id, asset.asset_id)):
            async with self.db.transaction():
                await self.ledger.lock(
                    user_id,
                    asset.asset_id,
                    value,
                    Ref.transaction(transaction_id),
                )
                transaction = await self.transactions.insert(
                    user_id=user_id,
                    asset_id=asset.asset_id,
                    kind=TransactionKind.WITHDRAWAL,
                    amount=value,
                    wallet_address=wallet_address,
                    transaction_id=transaction_id,
                )

        logger.info(
            f"Withdrawal requested: {transaction_id}",
            extra={"user_id": user_id, "asset": asset.symbol, "amount": str(value)},
        )
        return transaction

    # -------------------------------------------------------------------------
    # 처리
    # -------------------------------------------------------------------------

    async def approve(
        self,
        admin_id: str,
        transaction_id: str,
        decision: Decision | str = Decision.APPROVE,
        transaction_hash: str | None = None,
    ) -> Transaction:
        """관리자 승인/거부

        Args:
            admin_id: 처리 관리자 ID (approved_by에 기록)
            transaction_id: 요청 ID
            decision: approve / reject
            transaction_hash: 출금 송금 해시 등 기록할 온체인 해시

        Raises:
            NotFound: 요청 없음
            AlreadyFinalized: pending이 아님
        """
        decision = Decision(decision)
        target = (
            TransactionStatus.COMPLETED
            if decision == Decision.APPROVE
            else TransactionStatus.REJECTED
        )

        transaction = await self._finalize(
            transaction_id,
            target,
            approved_by=admin_id,
            transaction_hash=transaction_hash,
        )

        logger.info(
            f"Transaction {transaction.status.value}: {transaction_id}",
            extra={
                "admin_id": admin_id,
                "kind": transaction.kind.value,
                "amount": str(transaction.amount),
            },
        )
        return transaction

    async def cancel(self, user_id: str, transaction_id: str) -> Transaction:
        """사용자 취소 (관리자 처리 전에만)

        Raises:
            NotFound: 요청 없음 또는 본인 요청 아님
            AlreadyFinalized: pending이 아님
        """
        transaction = await self.transactions.get(transaction_id)
        if transaction is None or transaction.user_id != user_id:
            raise NotFound(f"Transaction not found: {transaction_id}")

        transaction = await self._finalize(transaction_id, TransactionStatus.CANCELLED)

        logger.info(
            f"Transaction cancelled: {transaction_id}",
            extra={"user_id": user_id},
        )
        return transaction

    async def _finalize(
        self,
        transaction_id: str,
        target: TransactionStatus,
        approved_by: str | None = None,
        transaction_hash: str | None = None,
    ) -> Transaction:
        """pending → target 전이 + 잔고 반영 (단일 트랜잭션)"""
        transaction = await self.transactions.get(transaction_id)
        if transaction is None:
            raise NotFound(f"Transaction not found: {transaction_id}")

        machine = TransactionStateMachine(transaction.status)
        if not machine.can_transition(target):
            raise AlreadyFinalized(
                f"Transaction already {transaction.status.value}: {transaction_id}"
            )

        key = (transaction.user_id, transaction.asset_id)

        async with self.ledger.guard.hold(key):
            async with self.db.transaction():
                # 잠금 획득 후 재확인 (동시 처리 방지)
                current = await self.transactions.get(transaction_id)
                assert current is not None
                if not current.is_pending:
                    raise AlreadyFinalized(
                        f"Transaction already {current.status.value}: {transaction_id}"
                    )

                await self._apply_balance_effect(current, target)

                if not await self.transactions.finalize(
                    transaction_id, target, approved_by, transaction_hash
                ):
                    raise AlreadyFinalized(f"Transaction already finalized: {transaction_id}")

        machine.transition(target)

        finalized = await self.transactions.get(transaction_id)
        assert finalized is not None
        return finalized

    async def _apply_balance_effect(
        self,
        transaction: Transaction,
        target: TransactionStatus,
    ) -> None:
        """상태 전이에 따른 잔고 변경

        | 종류 | completed | rejected / cancelled |
        |------|-----------|----------------------|
        | deposit | credit | 없음 |
        | withdrawal | release (locked 소멸) | unlock |
        """
        ref = Ref.transaction(transaction.transaction_id)
        user_id = transaction.user_id
        asset_id = transaction.asset_id

        if transaction.kind == TransactionKind.DEPOSIT:
            if target == TransactionStatus.COMPLETED:
                await self.ledger.credit(user_id, asset_id, transaction.amount, ref)
            return

        if target == TransactionStatus.COMPLETED:
            await self.ledger.release(user_id, asset_id, transaction.amount, ref)
        else:
            await self.ledger.unlock(user_id, asset_id, transaction.amount, ref)

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get(self, transaction_id: str) -> Transaction:
        """요청 조회

        Raises:
            NotFound: 요청 없음
        """
        transaction = await self.transactions.get(transaction_id)
        if transaction is None:
            raise NotFound(f"Transaction not found: {transaction_id}")
        return transaction

    async def list_for_user(
        self,
        user_id: str,
        status: TransactionStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        """사용자 요청 목록 (최신순)"""
        return await self.transactions.list_transactions(
            user_id=user_id, status=status, limit=limit, offset=offset
        )

    async def list_pending(self, limit: int = 50, offset: int = 0) -> list[Transaction]:
        """관리자 처리 대기열 (최신순)"""
        return await self.transactions.list_transactions(
            status=TransactionStatus.PENDING, limit=limit, offset=offset
        )
