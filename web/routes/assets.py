"""
자산 API 라우트

거래 가능 자산 목록과 현재 가격 (인증 불필요)
"""

from fastapi import APIRouter, Depends, Query

from web.dependencies import get_services
from web.models.responses import AssetResponse
from web.services.exchange import ExchangeServices

router = APIRouter(prefix="/api/assets", tags=["Assets"])


@router.get("", response_model=list[AssetResponse])
async def list_assets(
    active_only: bool = Query(default=False),
    services: ExchangeServices = Depends(get_services),
):
    """자산 목록 (심볼순)"""
    assets = await services.assets.list_assets(active_only=active_only)
    return [asset.to_dict() for asset in assets]


@router.get("/{symbol}", response_model=AssetResponse)
async def get_asset(
    symbol: str,
    services: ExchangeServices = Depends(get_services),
):
    """심볼 또는 ID로 자산 조회"""
    asset = await services.asset(symbol)
    return asset.to_dict()
