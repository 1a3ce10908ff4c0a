"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AssetActiveRequest,
    AssetLogoRequest,
    DecisionRequest,
    FillRequest,
    OrderCreateRequest,
    PriceChangeRequest,
    PriceSetRequest,
    TransferRequest,
)
from web.models.responses import (
    AssetResponse,
    BalanceResponse,
    ErrorResponse,
    HealthResponse,
    HoldingResponse,
    LedgerEntryResponse,
    LedgerListResponse,
    OrderListResponse,
    OrderResponse,
    PortfolioResponse,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "TransferRequest",
    "OrderCreateRequest",
    "DecisionRequest",
    "PriceSetRequest",
    "PriceChangeRequest",
    "AssetActiveRequest",
    "AssetLogoRequest",
    "FillRequest",
    # Responses
    "HealthResponse",
    "ErrorResponse",
    "AssetResponse",
    "BalanceResponse",
    "HoldingResponse",
    "PortfolioResponse",
    "LedgerEntryResponse",
    "LedgerListResponse",
    "TransactionResponse",
    "TransactionListResponse",
    "OrderResponse",
    "OrderListResponse",
]
