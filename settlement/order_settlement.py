"""
주문 정산

주문 접수 시 자금 잠금, 체결 시 양측 잔고 정산, 취소 시 미체결분 해제.
매칭 알고리즘(가격-시간 우선 등)은 포함하지 않음. 매처가 fill()을 호출.

잠금 규칙:
- 매수: quote 자산 amount * locked_price (18자리 올림) 잠금
- 매도: base 자산 amount 잠금
- 잠근 총액은 locked_amount, 소진 누계는 released_amount로 주문에 기록

체결 (수량 q, 가격 p):
- quote q * p (18자리 내림): 매수자 locked → 매도자 available
- base q: 매도자 locked → 매수자 available
- 매수 주문은 q * locked_price (내림)만큼 잠금을 소진하고 지급액과의 차액 해제
- 마지막 체결은 남은 잠금 전부를 소진 (반올림 잔여분 포함)
- 취소 시 locked_amount - released_amount 해제
"""

import logging
from decimal import ROUND_UP, Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Asset, Order
from core.domain.state_machines import OrderStateMachine
from core.errors import (
    AlreadyTerminal,
    InvalidAmount,
    InvalidPair,
    InvariantViolation,
    MissingPrice,
    NotFound,
    Overfill,
)
from core.ledger.store import LedgerStore
from core.storage.asset_store import AssetStore
from core.storage.order_store import OrderStore
from core.types import OrderKind, OrderSide, OrderStatus, Ref
from core.utils.decimals import add_amount, div_amount, mul_amount, positive_amount
from core.utils.ids import new_id

logger = logging.getLogger(__name__)


class OrderSettlement:
    """주문 정산 서비스

    Args:
        db: SQLiteAdapter 인스턴스
        ledger: 잔고 원장
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore):
        self.db = db
        self.ledger = ledger
        self.assets = AssetStore(db)
        self.orders = OrderStore(db)

    # -------------------------------------------------------------------------
    # 주문 접수
    # -------------------------------------------------------------------------

    async def place_order(
        self,
        user_id: str,
        base_asset_id: str,
        quote_asset_id: str,
        side: OrderSide | str,
        kind: OrderKind | str,
        amount: Any,
        limit_price: Any = None,
    ) -> Order:
        """주문 접수 + 자금 잠금

        Raises:
            InvalidPair: 자산 없음/비활성, base == quote, 기준가 없음
            InvalidAmount: amount <= 0 또는 limit_price <= 0
            MissingPrice: 지정가 주문에 limit_price 없음
            InsufficientFunds: 잠글 잔고 부족
        """
        side = OrderSide(side)
        kind = OrderKind(kind)

        base, quote = await self._pair(base_asset_id, quote_asset_id)
        quantity = positive_amount(amount)

        if kind == OrderKind.LIMIT:
            if limit_price is None:
                raise MissingPrice("Limit order requires limit_price")
            price = positive_amount(limit_price, field="limit_price")
            stored_limit: Decimal | None = price
        else:
            price = self._reference_price(base, quote)
            stored_limit = None

        order_id = new_id("ord")
        lock_asset_id = quote.asset_id if side == OrderSide.BUY else base.asset_id
        if side == OrderSide.BUY:
            lock_amount = mul_amount(quantity, price, rounding=ROUND_UP)
        else:
            lock_amount = quantity

        async with self.ledger.guard.hold((user_id, lock_asset_id)):
            async with self.db.transaction():
                await self.ledger.lock(user_id, lock_asset_id, lock_amount, Ref.order(order_id))
                order = await self.orders.insert(
                    user_id=user_id,
                    base_asset_id=base.asset_id,
                    quote_asset_id=quote.asset_id,
                    kind=kind,
                    side=side,
                    amount=quantity,
                    locked_price=price,
                    locked_amount=lock_amount,
                    limit_price=stored_limit,
                    order_id=order_id,
                )

        logger.info(
            f"Order placed: {order_id} {side.value} {quantity} {base.symbol}/{quote.symbol}",
            extra={
                "user_id": user_id,
                "kind": kind.value,
                "price": str(price),
                "locked": str(lock_amount),
            },
        )
        return order

    async def _pair(self, base_asset_id: str, quote_asset_id: str) -> tuple[Asset, Asset]:
        if base_asset_id == quote_asset_id:
            raise InvalidPair(f"Base and quote must differ: {base_asset_id}")

        base = await self.assets.get(base_asset_id)
        quote = await self.assets.get(quote_asset_id)

        if base is None or quote is None:
            raise InvalidPair(f"Unknown asset in pair: {base_asset_id}/{quote_asset_id}")
        if not base.is_active or not quote.is_active:
            raise InvalidPair(f"Inactive asset in pair: {base.symbol}/{quote.symbol}")

        return base, quote

    @staticmethod
    def _reference_price(base: Asset, quote: Asset) -> Decimal:
        """시장가 주문의 기준가 (quote 단위 base 가격, 18자리 반올림)"""
        if base.price <= 0 or quote.price <= 0:
            raise InvalidPair(f"No reference price for {base.symbol}/{quote.symbol}")
        price = div_amount(base.price, quote.price)
        if price <= 0:
            raise InvalidPair(f"Reference price rounds to zero: {base.symbol}/{quote.symbol}")
        return price

    # -------------------------------------------------------------------------
    # 체결
    # -------------------------------------------------------------------------

    async def fill(
        self,
        order_id: str,
        fill_amount: Any,
        exec_price: Any,
        counterparty_id: str | None = None,
        counter_order_id: str | None = None,
    ) -> Order:
        """체결 정산

        상대방은 counter_order_id(상대 주문) 또는 counterparty_id(상대 사용자) 중 하나로 지정.
        상대 주문을 주면 두 주문의 체결 수량이 함께 갱신됨.
        상대 사용자만 주면 그 사용자가 자기 쪽 자산을 미리 잠가 두어야 함.

        Args:
            order_id: 체결 대상 주문
            fill_amount: 체결 수량 (base)
            exec_price: 체결 가격 (quote/base)

        Returns:
            갱신된 주문

        Raises:
            NotFound: 주문 없음
            AlreadyTerminal: 이미 filled/cancelled
            InvalidAmount: 수량/가격 <= 0, 또는 지정가를 넘는 가격
            InvalidPair: 상대 주문의 거래쌍/방향 불일치
            Overfill: 잔여 수량 초과
            InvariantViolation: 상대방 잠금 잔고 부족
        """
        if counterparty_id is None and counter_order_id is None:
            raise ValueError("counterparty_id or counter_order_id is required")

        quantity = positive_amount(fill_amount, field="fill_amount")
        price = positive_amount(exec_price, field="exec_price")

        pay = mul_amount(quantity, price)
        if pay <= 0:
            raise InvalidAmount(f"Fill value {quantity} * {price} rounds to zero")

        order = await self._get(order_id)
        self._check_fillable(order, quantity, price)

        counter: Order | None = None
        if counter_order_id is not None:
            counter = await self._get(counter_order_id)
            self._check_counter(order, counter)
            self._check_fillable(counter, quantity, price)
            counterparty_id = counter.user_id

        assert counterparty_id is not None

        if order.side == OrderSide.BUY:
            buyer_id, seller_id = order.user_id, counterparty_id
        else:
            buyer_id, seller_id = counterparty_id, order.user_id

        base_id = order.base_asset_id
        quote_id = order.quote_asset_id
        keys = [
            (buyer_id, quote_id),
            (seller_id, quote_id),
            (buyer_id, base_id),
            (seller_id, base_id),
        ]

        async with self.ledger.guard.hold(*keys):
            async with self.db.transaction():
                # 잠금 획득 후 재확인 (동시 체결/취소 방지)
                order = await self._get(order_id)
                self._check_fillable(order, quantity, price)
                if counter is not None:
                    counter = await self._get(counter.order_id)
                    self._check_fillable(counter, quantity, price)

                ref = Ref.order(order.order_id)
                await self.ledger.settle(buyer_id, seller_id, quote_id, pay, ref)
                await self.ledger.settle(seller_id, buyer_id, base_id, quantity, ref)

                for filled_order in (order, counter):
                    if filled_order is None:
                        continue
                    await self._apply_fill(filled_order, quantity, pay)

        updated = await self._get(order_id)

        logger.info(
            f"Order filled: {order_id} {quantity} @ {price} → {updated.status.value}",
            extra={
                "counterparty_id": counterparty_id,
                "counter_order_id": counter_order_id,
                "filled_amount": str(updated.filled_amount),
            },
        )
        return updated

    @staticmethod
    def _check_fillable(order: Order, quantity: Decimal, price: Decimal) -> None:
        if order.is_terminal:
            raise AlreadyTerminal(f"Order already {order.status.value}: {order.order_id}")
        if quantity > order.remaining:
            raise Overfill(
                f"Fill {quantity} exceeds remaining {order.remaining}: {order.order_id}"
            )
        if order.side == OrderSide.BUY and price > order.locked_price:
            raise InvalidAmount(
                f"Exec price {price} above reserved price {order.locked_price}: {order.order_id}"
            )
        if (
            order.side == OrderSide.SELL
            and order.limit_price is not None
            and price < order.limit_price
        ):
            raise InvalidAmount(
                f"Exec price {price} below limit price {order.limit_price}: {order.order_id}"
            )

    @staticmethod
    def _check_counter(order: Order, counter: Order) -> None:
        if counter.order_id == order.order_id:
            raise InvalidPair("Order cannot fill against itself")
        if counter.side == order.side:
            raise InvalidPair("Counter order must be on the opposite side")
        if (
            counter.base_asset_id != order.base_asset_id
            or counter.quote_asset_id != order.quote_asset_id
        ):
            raise InvalidPair("Counter order must trade the same pair")

    async def _apply_fill(self, order: Order, quantity: Decimal, pay: Decimal) -> None:
        """주문 잠금 소진 + 남는 차액 해제 + 체결 수량 기록

        Args:
            quantity: 체결 수량 (base)
            pay: 매수자가 지급한 quote 금액
        """
        new_filled = add_amount(order.filled_amount, quantity)
        final = new_filled >= order.amount

        if final:
            consumed = order.reserve_left
        elif order.side == OrderSide.BUY:
            consumed = mul_amount(quantity, order.locked_price)
        else:
            consumed = quantity

        spent = pay if order.side == OrderSide.BUY else quantity
        excess = add_amount(consumed, spent.copy_negate())
        if excess < 0 or consumed > order.reserve_left:
            raise InvariantViolation(
                f"Order reserve exhausted: {order.order_id} "
                f"(left {order.reserve_left}, consumed {consumed}, spent {spent})"
            )
        if excess > 0:
            await self.ledger.unlock(
                order.user_id,
                order.lock_asset_id,
                excess,
                Ref.order(order.order_id),
            )

        machine = OrderStateMachine(order.status)
        machine.transition(OrderStatus.FILLED if final else OrderStatus.PARTIAL)

        if not await self.orders.update_filled(
            order.order_id,
            order.filled_amount,
            new_filled,
            add_amount(order.released_amount, consumed),
        ):
            raise InvariantViolation(f"Concurrent fill detected: {order.order_id}")

    # -------------------------------------------------------------------------
    # 취소
    # -------------------------------------------------------------------------

    async def cancel(self, order_id: str, user_id: str | None = None) -> Order:
        """주문 취소 + 미체결분 잠금 해제

        Args:
            order_id: 주문 ID
            user_id: 지정 시 본인 주문만 취소 가능

        Raises:
            NotFound: 주문 없음 또는 본인 주문 아님
            AlreadyTerminal: 이미 filled/cancelled
        """
        order = await self._get(order_id)
        if user_id is not None and order.user_id != user_id:
            raise NotFound(f"Order not found: {order_id}")
        if order.is_terminal:
            raise AlreadyTerminal(f"Order already {order.status.value}: {order_id}")

        async with self.ledger.guard.hold((order.user_id, order.lock_asset_id)):
            async with self.db.transaction():
                order = await self._get(order_id)
                if order.is_terminal:
                    raise AlreadyTerminal(f"Order already {order.status.value}: {order_id}")

                OrderStateMachine(order.status).transition(OrderStatus.CANCELLED)

                remainder = order.reserve_left
                if remainder > 0:
                    await self.ledger.unlock(
                        order.user_id,
                        order.lock_asset_id,
                        remainder,
                        Ref.order(order_id),
                    )

                if not await self.orders.mark_cancelled(order_id, order.locked_amount):
                    raise AlreadyTerminal(f"Order already cancelled: {order_id}")

        logger.info(
            f"Order cancelled: {order_id}",
            extra={"user_id": order.user_id, "released": str(remainder)},
        )
        return await self._get(order_id)

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def _get(self, order_id: str) -> Order:
        order = await self.orders.get(order_id)
        if order is None:
            raise NotFound(f"Order not found: {order_id}")
        return order

    async def get(self, order_id: str) -> Order:
        """주문 조회

        Raises:
            NotFound: 주문 없음
        """
        return await self._get(order_id)

    async def list_for_user(
        self,
        user_id: str,
        status: OrderStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """사용자 주문 목록 (최신순)"""
        return await self.orders.list_orders(
            user_id=user_id, status=status, limit=limit, offset=offset
        )
