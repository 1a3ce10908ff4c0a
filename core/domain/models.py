"""
도메인 모델

Asset, Balance, Transaction, Order, LedgerEntry.
DB 행(dict)에서 생성하는 from_row와 API 응답용 to_dict 제공.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.domain.state_machines import derive_order_status
from core.types import OrderKind, OrderSide, OrderStatus, TransactionKind, TransactionStatus
from core.utils.decimals import ZERO, add_amount, from_db
from core.utils.timezone import parse_ts


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


@dataclass
class Asset:
    """거래 가능 자산

    Attributes:
        asset_id: 자산 ID
        symbol: 심볼 (고유, 예: BTC)
        name: 이름
        price: 현재 가격 (USDT 기준, 음수 불가)
        price_change_24h: 24시간 변동률 (%)
        market_cap: 시가총액
        volume_24h: 24시간 거래량
        is_active: 거래 가능 여부
        is_custom: 자체 발행 토큰 여부 (MOON)
        logo_url: 로고 이미지 URL
    """

    asset_id: str
    symbol: str
    name: str
    price: Decimal
    price_change_24h: Decimal = ZERO
    market_cap: Decimal = ZERO
    volume_24h: Decimal = ZERO
    is_active: bool = True
    is_custom: bool = False
    logo_url: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Asset":
        """DB 행에서 생성"""
        return cls(
            asset_id=row["asset_id"],
            symbol=row["symbol"],
            name=row["name"],
            price=from_db(row["price"]),
            price_change_24h=from_db(row.get("price_change_24h")),
            market_cap=from_db(row.get("market_cap")),
            volume_24h=from_db(row.get("volume_24h")),
            is_active=bool(row.get("is_active", 1)),
            is_custom=bool(row.get("is_custom", 0)),
            logo_url=row.get("logo_url"),
            updated_at=parse_ts(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 dict (금액은 문자열)"""
        return {
            "asset_id": self.asset_id,
            "symbol": self.symbol,
            "name": self.name,
            "price": str(self.price),
            "price_change_24h": str(self.price_change_24h),
            "market_cap": str(self.market_cap),
            "volume_24h": str(self.volume_24h),
            "is_active": self.is_active,
            "is_custom": self.is_custom,
            "logo_url": self.logo_url,
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class Balance:
    """사용자 자산 잔고

    불변식: available >= 0, locked >= 0
    """

    user_id: str
    asset_id: str
    available: Decimal = ZERO
    locked: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        """총 보유량 (available + locked)"""
        return self.available + self.locked

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Balance":
        """DB 행에서 생성"""
        return cls(
            user_id=row["user_id"],
            asset_id=row["asset_id"],
            available=from_db(row["available"]),
            locked=from_db(row["locked"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "asset_id": self.asset_id,
            "available": str(self.available),
            "locked": str(self.locked),
            "total": str(self.total),
        }


@dataclass
class Transaction:
    """입출금 요청

    Attributes:
        transaction_id: 요청 ID
        user_id: 요청자
        asset_id: 자산 ID
        kind: deposit / withdrawal
        amount: 금액
        status: pending / completed / rejected / cancelled
        wallet_address: 지갑 주소
        transaction_hash: 온체인 트랜잭션 해시 (입금: 사용자 제출, 출금: 관리자 기록)
        approved_by: 처리한 관리자 ID
        approved_at: 처리 시각
    """

    transaction_id: str
    user_id: str
    asset_id: str
    kind: TransactionKind
    amount: Decimal
    status: TransactionStatus
    wallet_address: str | None = None
    transaction_hash: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Transaction":
        """DB 행에서 생성"""
        return cls(
            transaction_id=row["transaction_id"],
            user_id=row["user_id"],
            asset_id=row["asset_id"],
            kind=TransactionKind(row["kind"]),
            amount=from_db(row["amount"]),
            status=TransactionStatus(row["status"]),
            wallet_address=row.get("wallet_address"),
            transaction_hash=row.get("transaction_hash"),
            approved_by=row.get("approved_by"),
            approved_at=parse_ts(row.get("approved_at")),
            created_at=parse_ts(row.get("created_at")),
            updated_at=parse_ts(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "user_id": self.user_id,
            "asset_id": self.asset_id,
            "kind": self.kind.value,
            "amount": str(self.amount),
            "status": self.status.value,
            "wallet_address": self.wallet_address,
            "transaction_hash": self.transaction_hash,
            "approved_by": self.approved_by,
            "approved_at": _iso(self.approved_at),
            "created_at": _iso(self.created_at),
        }


@dataclass
class Order:
    """주문

    status는 저장하지 않고 filled_amount / amount / is_cancelled에서 파생.

    Attributes:
        locked_price: 매수 주문의 잠금 기준 가격
            (지정가 주문은 limit_price, 시장가 주문은 주문 시점 기준가)
        locked_amount: 주문 접수 시 실제로 잠근 총액 (매수: quote, 매도: base)
        released_amount: 잠근 총액 중 체결 지급 또는 해제로 소진된 누계
    """

    order_id: str
    user_id: str
    base_asset_id: str
    quote_asset_id: str
    kind: OrderKind
    side: OrderSide
    amount: Decimal
    locked_price: Decimal
    locked_amount: Decimal
    limit_price: Decimal | None = None
    filled_amount: Decimal = ZERO
    released_amount: Decimal = ZERO
    is_cancelled: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def status(self) -> OrderStatus:
        return derive_order_status(self.filled_amount, self.amount, self.is_cancelled)

    @property
    def remaining(self) -> Decimal:
        """미체결 수량"""
        return add_amount(self.amount, self.filled_amount.copy_negate())

    @property
    def is_terminal(self) -> bool:
        return self.status in (OrderStatus.FILLED, OrderStatus.CANCELLED)

    @property
    def lock_asset_id(self) -> str:
        """주문이 잠그는 자산 (매수: quote, 매도: base)"""
        if self.side == OrderSide.BUY:
            return self.quote_asset_id
        return self.base_asset_id

    @property
    def reserve_left(self) -> Decimal:
        """아직 소진되지 않은 잠금 잔액 (취소 시 해제 대상)"""
        return add_amount(self.locked_amount, self.released_amount.copy_negate())

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Order":
        """DB 행에서 생성"""
        limit_price = row.get("limit_price")
        return cls(
            order_id=row["order_id"],
            user_id=row["user_id"],
            base_asset_id=row["base_asset_id"],
            quote_asset_id=row["quote_asset_id"],
            kind=OrderKind(row["kind"]),
            side=OrderSide(row["side"]),
            amount=from_db(row["amount"]),
            locked_price=from_db(row["locked_price"]),
            locked_amount=from_db(row["locked_amount"]),
            limit_price=from_db(limit_price) if limit_price is not None else None,
            filled_amount=from_db(row.get("filled_amount")),
            released_amount=from_db(row.get("released_amount")),
            is_cancelled=bool(row.get("is_cancelled", 0)),
            created_at=parse_ts(row.get("created_at")),
            updated_at=parse_ts(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "base_asset_id": self.base_asset_id,
            "quote_asset_id": self.quote_asset_id,
            "kind": self.kind.value,
            "side": self.side.value,
            "amount": str(self.amount),
            "limit_price": str(self.limit_price) if self.limit_price is not None else None,
            "locked_price": str(self.locked_price),
            "locked_amount": str(self.locked_amount),
            "filled_amount": str(self.filled_amount),
            "released_amount": str(self.released_amount),
            "status": self.status.value,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class LedgerEntry:
    """원장 항목 (불변, append-only)

    잔고 행 1개에 대한 변경 1건과 변경 후 잔고를 기록.
    """

    seq: int
    entry_id: str
    ts: datetime
    user_id: str
    asset_id: str
    entry_type: str
    amount: Decimal
    available_after: Decimal
    locked_after: Decimal
    ref_kind: str | None = None
    ref_id: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LedgerEntry":
        """DB 행에서 생성"""
        return cls(
            seq=row["seq"],
            entry_id=row["entry_id"],
            ts=parse_ts(row["ts"]),  # type: ignore[arg-type]
            user_id=row["user_id"],
            asset_id=row["asset_id"],
            entry_type=row["entry_type"],
            amount=from_db(row["amount"]),
            available_after=from_db(row["available_after"]),
            locked_after=from_db(row["locked_after"]),
            ref_kind=row.get("ref_kind"),
            ref_id=row.get("ref_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "entry_id": self.entry_id,
            "ts": self.ts.isoformat(),
            "user_id": self.user_id,
            "asset_id": self.asset_id,
            "entry_type": self.entry_type,
            "amount": str(self.amount),
            "available_after": str(self.available_after),
            "locked_after": str(self.locked_after),
            "ref_kind": self.ref_kind,
            "ref_id": self.ref_id,
        }
