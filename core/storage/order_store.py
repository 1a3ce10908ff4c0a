"""
OrderStore - 주문 저장소

orders 테이블 CRUD 처리.
status 컬럼은 없음: filled_amount / is_cancelled에서 파생.
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Order
from core.types import OrderKind, OrderSide, OrderStatus
from core.utils.decimals import to_db
from core.utils.ids import new_id
from core.utils.timezone import now_iso

logger = logging.getLogger(__name__)

# is_cancelled만으로 좁힐 수 있는 상태 (수량 비교는 Decimal로 수행)
_CANCELLED_FLAG: dict[OrderStatus, int] = {
    OrderStatus.CANCELLED: 1,
    OrderStatus.PARTIAL: 0,
    OrderStatus.OPEN: 0,
}


class OrderStore:
    """주문 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(
        self,
        user_id: str,
        base_asset_id: str,
        quote_asset_id: str,
        kind: OrderKind,
        side: OrderSide,
        amount: Decimal,
        locked_price: Decimal,
        locked_amount: Decimal,
        limit_price: Decimal | None = None,
        order_id: str | None = None,
    ) -> Order:
        """open 상태로 새 주문 저장"""
        order_id = order_id or new_id("ord")
        now = now_iso()

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO orders (
                    order_id, user_id, base_asset_id, quote_asset_id, kind, side,
                    amount, limit_price, locked_price, locked_amount, filled_amount,
                    released_amount, is_cancelled, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, '0', '0', 0, ?, ?)
                """,
                (
                    order_id,
                    user_id,
                    base_asset_id,
                    quote_asset_id,
                    kind.value,
                    side.value,
                    to_db(amount),
                    to_db(limit_price) if limit_price is not None else None,
                    to_db(locked_price),
                    to_db(locked_amount),
                    now,
                    now,
                ),
            )
            order = await self.get(order_id)

        assert order is not None
        return order

    async def get(self, order_id: str) -> Order | None:
        """주문 조회"""
        row = await self.db.fetchone_dict(
            "SELECT * FROM orders WHERE order_id = ?",
            (order_id,),
        )
        return Order.from_row(row) if row else None

    async def update_filled(
        self,
        order_id: str,
        expected_filled: Decimal,
        new_filled: Decimal,
        new_released: Decimal,
    ) -> bool:
        """체결 수량과 잠금 소진 누계 갱신 (expected_filled일 때만, 낙관적 검사)

        Returns:
            갱신 여부
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE orders
                SET filled_amount = ?, released_amount = ?, updated_at = ?
                WHERE order_id = ? AND filled_amount = ? AND is_cancelled = 0
                """,
                (
                    to_db(new_filled),
                    to_db(new_released),
                    now_iso(),
                    order_id,
                    to_db(expected_filled),
                ),
            )
        return cursor.rowcount == 1

    async def mark_cancelled(self, order_id: str, new_released: Decimal) -> bool:
        """취소 표시 (남은 잠금을 모두 해제한 누계와 함께)

        Returns:
            갱신 여부 (이미 취소된 경우 False)
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE orders SET is_cancelled = 1, released_amount = ?, updated_at = ?
                WHERE order_id = ? AND is_cancelled = 0
                """,
                (to_db(new_released), now_iso(), order_id),
            )
        return cursor.rowcount == 1

    async def list_orders(
        self,
        user_id: str | None = None,
        status: OrderStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """주문 목록 (최신순)

        상태는 Decimal 수량 비교로 파생되므로 상태 필터는 행을 읽은 뒤 적용.
        """
        sql = "SELECT * FROM orders WHERE 1=1"
        params: list[Any] = []

        if user_id:
            sql += " AND user_id = ?"
            params.append(user_id)
        if status in _CANCELLED_FLAG:
            sql += " AND is_cancelled = ?"
            params.append(_CANCELLED_FLAG[status])

        sql += " ORDER BY created_at DESC, order_id"

        if status is None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
            rows = await self.db.fetchall_dict(sql, tuple(params))
            return [Order.from_row(row) for row in rows]

        rows = await self.db.fetchall_dict(sql, tuple(params))
        orders = [Order.from_row(row) for row in rows]
        matched = [order for order in orders if order.status == status]
        return matched[offset:offset + limit]
