"""
TransactionStore - 입출금 저장소

transactions 테이블 CRUD 처리.
상태 변경은 pending 행에만 적용 (조건부 UPDATE).
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Transaction
from core.types import TransactionKind, TransactionStatus
from core.utils.decimals import to_db
from core.utils.ids import new_id
from core.utils.timezone import now_iso

logger = logging.getLogger(__name__)


class TransactionStore:
    """입출금 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(
        self,
        user_id: str,
        asset_id: str,
        kind: TransactionKind,
        amount: Decimal,
        wallet_address: str | None,
        transaction_id: str | None = None,
        transaction_hash: str | None = None,
    ) -> Transaction:
        """pending 상태로 새 요청 저장

        Args:
            transaction_id: 미리 발급한 ID (잠금 참조와 맞추기 위해)

        Returns:
            저장된 Transaction
        """
        transaction_id = transaction_id or new_id("tx")
        now = now_iso()

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO transactions (
                    transaction_id, user_id, asset_id, kind, amount, status,
                    wallet_address, transaction_hash, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction_id,
                    user_id,
                    asset_id,
                    kind.value,
                    to_db(amount),
                    TransactionStatus.PENDING.value,
                    wallet_address,
                    transaction_hash,
                    now,
                    now,
                ),
            )
            transaction = await self.get(transaction_id)

        assert transaction is not None
        return transaction

    async def get(self, transaction_id: str) -> Transaction | None:
        """요청 조회"""
        row = await self.db.fetchone_dict(
            "SELECT * FROM transactions WHERE transaction_id = ?",
            (transaction_id,),
        )
        return Transaction.from_row(row) if row else None

    async def finalize(
        self,
        transaction_id: str,
        status: TransactionStatus,
        approved_by: str | None = None,
        transaction_hash: str | None = None,
    ) -> bool:
        """pending → status 전이 (조건부)

        Args:
            transaction_id: 요청 ID
            status: 목표 상태 (completed / rejected / cancelled)
            approved_by: 처리한 관리자 (사용자 취소는 None)
            transaction_hash: 기록할 온체인 해시 (None이면 기존 값 유지)

        Returns:
            갱신 여부 (pending이 아니면 False)
        """
        now = now_iso()
        approved_at = now if approved_by else None

        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE transactions
                SET status = ?, approved_by = ?, approved_at = ?, updated_at = ?,
                    transaction_hash = COALESCE(?, transaction_hash)
                WHERE transaction_id = ? AND status = ?
                """,
                (
                    status.value,
                    approved_by,
                    approved_at,
                    now,
                    transaction_hash,
                    transaction_id,
                    TransactionStatus.PENDING.value,
                ),
            )

        return cursor.rowcount == 1

    async def list_transactions(
        self,
        user_id: str | None = None,
        status: TransactionStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        """요청 목록 (최신순)"""
        sql = "SELECT * FROM transactions WHERE 1=1"
        params: list[Any] = []

        if user_id:
            sql += " AND user_id = ?"
            params.append(user_id)
        if status:
            sql += " AND status = ?"
            params.append(status.value)

        sql += " ORDER BY created_at DESC, transaction_id LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = await self.db.fetchall_dict(sql, tuple(params))
        return [Transaction.from_row(row) for row in rows]
