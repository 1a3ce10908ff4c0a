"""
요청 스키마 (Pydantic)

금액/가격은 문자열로 받아 서비스 계층에서 Decimal 검증 (InvalidAmount → 400).
"""

from pydantic import BaseModel, Field, model_validator

from core.constants import Defaults
from core.types import Decision, OrderKind, OrderSide


class TransferRequest(BaseModel):
    """입금/출금 요청"""

    asset: str = Field(..., description="자산 심볼 또는 ID")
    amount: str = Field(..., description="금액 (양수)")
    wallet_address: str | None = Field(default=None, description="지갑 주소")
    transaction_hash: str | None = Field(
        default=None, max_length=128, description="온체인 트랜잭션 해시 (입금 증빙)"
    )


class OrderCreateRequest(BaseModel):
    """주문 생성 요청"""

    base_asset: str = Field(..., description="거래 자산 심볼 또는 ID")
    quote_asset: str = Field(default=Defaults.QUOTE_ASSET, description="결제 자산 심볼 또는 ID")
    side: OrderSide = Field(..., description="buy / sell")
    kind: OrderKind = Field(default=OrderKind.LIMIT, description="market / limit")
    amount: str = Field(..., description="주문 수량 (base)")
    limit_price: str | None = Field(default=None, description="지정가 (limit 주문 필수)")


class DecisionRequest(BaseModel):
    """입출금 승인/거부 요청"""

    decision: Decision = Field(..., description="approve / reject")
    transaction_hash: str | None = Field(
        default=None, max_length=128, description="출금 송금 트랜잭션 해시"
    )


class PriceSetRequest(BaseModel):
    """가격 직접 설정"""

    price: str = Field(..., description="새 가격 (0 이상)")


class PriceChangeRequest(BaseModel):
    """퍼센트 가격 변동"""

    pct: str = Field(..., description="변동률 (%), 예: 5, -10")


class AssetLogoRequest(BaseModel):
    """로고 URL 변경"""

    logo_url: str | None = Field(
        ..., max_length=512, description="로고 이미지 URL (null이면 제거)"
    )


class AssetActiveRequest(BaseModel):
    """거래 가능 여부 변경"""

    is_active: bool = Field(..., description="false면 신규 주문 불가")


class FillRequest(BaseModel):
    """체결 보고 (매처 → 정산)"""

    fill_amount: str = Field(..., description="체결 수량 (base)")
    exec_price: str = Field(..., description="체결 가격 (quote/base)")
    counterparty_id: str | None = Field(default=None, description="상대 사용자 ID")
    counter_order_id: str | None = Field(default=None, description="상대 주문 ID")

    @model_validator(mode="after")
    def _require_counterparty(self) -> "FillRequest":
        if self.counterparty_id is None and self.counter_order_id is None:
            raise ValueError("counterparty_id or counter_order_id is required")
        return self
