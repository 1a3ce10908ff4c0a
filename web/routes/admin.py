"""
관리자 API 라우트

모든 엔드포인트는 role == admin 필요 (아니면 403).
"""

import logging

from fastapi import APIRouter, Depends, Query

from core.auth import Principal
from web.dependencies import get_services, require_admin
from web.models.requests import (
    AssetActiveRequest,
    AssetLogoRequest,
    DecisionRequest,
    FillRequest,
    PriceChangeRequest,
    PriceSetRequest,
)
from web.models.responses import AssetResponse, OrderResponse, TransactionResponse
from web.services.exchange import ExchangeServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/transactions/pending", response_model=list[TransactionResponse])
async def list_pending_transactions(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """처리 대기 입출금 목록"""
    transactions = await services.transactions.list_pending(limit=limit, offset=offset)
    return [t.to_dict() for t in transactions]


@router.post("/transactions/{transaction_id}/decision", response_model=TransactionResponse)
async def decide_transaction(
    transaction_id: str,
    body: DecisionRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """입출금 승인/거부"""
    transaction = await services.admin.decide(
        admin.user_id,
        transaction_id,
        body.decision,
        transaction_hash=body.transaction_hash,
    )
    return transaction.to_dict()


@router.put("/assets/{symbol}/price", response_model=AssetResponse)
async def set_price(
    symbol: str,
    body: PriceSetRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """가격 직접 설정"""
    asset = await services.admin.set_price(symbol, body.price)
    logger.info(f"Price set by {admin.user_id}: {asset.symbol} = {asset.price}")
    return asset.to_dict()


@router.post("/assets/{symbol}/price-change", response_model=AssetResponse)
async def change_price(
    symbol: str,
    body: PriceChangeRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """퍼센트 가격 변동"""
    asset = await services.admin.adjust_price(symbol, body.pct)
    logger.info(f"Price changed by {admin.user_id}: {asset.symbol} {body.pct}%")
    return asset.to_dict()


@router.put("/assets/{symbol}/active", response_model=AssetResponse)
async def set_active(
    symbol: str,
    body: AssetActiveRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """거래 가능 여부 변경"""
    asset = await services.admin.set_active(symbol, body.is_active)
    return asset.to_dict()


@router.put("/assets/{symbol}/logo", response_model=AssetResponse)
async def set_logo(
    symbol: str,
    body: AssetLogoRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """로고 URL 변경"""
    asset = await services.admin.set_logo(symbol, body.logo_url)
    return asset.to_dict()


@router.post("/orders/{order_id}/fill", response_model=OrderResponse)
async def fill_order(
    order_id: str,
    body: FillRequest,
    admin: Principal = Depends(require_admin),
    services: ExchangeServices = Depends(get_services),
):
    """체결 정산 (매처 보고)"""
    order = await services.orders.fill(
        order_id,
        body.fill_amount,
        body.exec_price,
        counterparty_id=body.counterparty_id,
        counter_order_id=body.counter_order_id,
    )
    return order.to_dict()
