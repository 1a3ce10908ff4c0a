"""
원장 API 라우트

본인 잔고 변경 감사 기록 (최신순)
"""

from fastapi import APIRouter, Depends, Query

from core.auth import Principal
from web.dependencies import get_principal, get_services
from web.models.responses import LedgerListResponse
from web.services.exchange import ExchangeServices

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("", response_model=LedgerListResponse)
async def list_entries(
    asset: str | None = Query(default=None, description="자산 심볼 또는 ID"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """원장 항목 조회"""
    asset_id = (await services.asset(asset)).asset_id if asset else None

    entries = await services.ledger.list_entries(
        user_id=principal.user_id,
        asset_id=asset_id,
        limit=limit,
        offset=offset,
    )
    return {
        "entries": [entry.to_dict() for entry in entries],
        "limit": limit,
        "offset": offset,
    }
