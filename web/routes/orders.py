"""
주문 API 라우트

주문 접수, 본인 주문 목록, 취소.
체결 보고는 admin 라우트 (매처 전용).
"""

from fastapi import APIRouter, Depends, Query, status

from core.auth import Principal
from core.types import OrderStatus
from web.dependencies import get_principal, get_services
from web.models.requests import OrderCreateRequest
from web.models.responses import OrderListResponse, OrderResponse
from web.services.exchange import ExchangeServices

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    body: OrderCreateRequest,
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """주문 접수 (매수: quote 잠금 / 매도: base 잠금)"""
    order = await services.orders.place_order(
        principal.user_id,
        await services.asset_id(body.base_asset),
        await services.asset_id(body.quote_asset),
        side=body.side,
        kind=body.kind,
        amount=body.amount,
        limit_price=body.limit_price,
    )
    return order.to_dict()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """본인 주문 목록 (최신순)"""
    orders = await services.orders.list_for_user(
        principal.user_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return {
        "orders": [order.to_dict() for order in orders],
        "limit": limit,
        "offset": offset,
    }


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """주문 취소 (미체결분 잠금 해제)"""
    order = await services.orders.cancel(order_id, user_id=principal.user_id)
    return order.to_dict()
