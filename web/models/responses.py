"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액/가격은 모두 문자열 (Decimal 정밀도 유지).
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="운영 모드 (testnet/production)")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class ErrorResponse(BaseModel):
    """도메인 오류 응답"""

    error: str = Field(..., description="오류 코드 (예: InsufficientFunds)")
    detail: str = Field(..., description="오류 메시지")


class AssetResponse(BaseModel):
    """자산 응답"""

    asset_id: str = Field(..., description="자산 ID")
    symbol: str = Field(..., description="심볼")
    name: str = Field(..., description="이름")
    price: str = Field(..., description="현재 가격 (USDT)")
    price_change_24h: str = Field(..., description="24시간 변동률 (%)")
    market_cap: str = Field(..., description="시가총액")
    volume_24h: str = Field(..., description="24시간 거래량")
    is_active: bool = Field(..., description="거래 가능 여부")
    is_custom: bool = Field(..., description="자체 발행 토큰 여부")
    logo_url: str | None = Field(default=None, description="로고 이미지 URL")
    updated_at: str | None = Field(default=None, description="마지막 갱신 시간")


class BalanceResponse(BaseModel):
    """잔고 응답"""

    user_id: str = Field(..., description="사용자 ID")
    asset_id: str = Field(..., description="자산 ID")
    available: str = Field(..., description="사용 가능 잔고")
    locked: str = Field(..., description="잠긴 잔고")
    total: str = Field(..., description="총 잔고")


class HoldingResponse(BaseModel):
    """자산별 보유 평가"""

    asset_id: str
    symbol: str
    available: str
    locked: str
    total: str
    price: str
    value: str = Field(..., description="평가액 (total * price)")


class PortfolioResponse(BaseModel):
    """포트폴리오 응답"""

    user_id: str
    holdings: list[HoldingResponse] = Field(default_factory=list)
    total_value: str = Field(..., description="총 평가액 (USDT)")


class LedgerEntryResponse(BaseModel):
    """원장 항목 응답"""

    seq: int
    entry_id: str
    ts: str
    user_id: str
    asset_id: str
    entry_type: str
    amount: str
    available_after: str
    locked_after: str
    ref_kind: str | None = None
    ref_id: str | None = None


class LedgerListResponse(BaseModel):
    """원장 목록 응답"""

    entries: list[LedgerEntryResponse]
    limit: int
    offset: int


class TransactionResponse(BaseModel):
    """입출금 요청 응답"""

    transaction_id: str
    user_id: str
    asset_id: str
    kind: str = Field(..., description="deposit / withdrawal")
    amount: str
    status: str = Field(..., description="pending / completed / rejected / cancelled")
    wallet_address: str | None = None
    transaction_hash: str | None = Field(default=None, description="온체인 트랜잭션 해시")
    approved_by: str | None = None
    approved_at: str | None = None
    created_at: str | None = None


class TransactionListResponse(BaseModel):
    """입출금 목록 응답"""

    transactions: list[TransactionResponse]
    limit: int
    offset: int


class OrderResponse(BaseModel):
    """주문 응답"""

    order_id: str
    user_id: str
    base_asset_id: str
    quote_asset_id: str
    kind: str = Field(..., description="market / limit")
    side: str = Field(..., description="buy / sell")
    amount: str
    limit_price: str | None = None
    locked_price: str = Field(..., description="매수 잠금 기준가")
    locked_amount: str = Field(..., description="접수 시 잠근 총액")
    filled_amount: str
    status: str = Field(..., description="open / partial / filled / cancelled")
    created_at: str | None = None


class OrderListResponse(BaseModel):
    """주문 목록 응답"""

    orders: list[OrderResponse]
    limit: int
    offset: int
