"""
잔고 API 라우트

본인 잔고와 포트폴리오 평가
"""

from fastapi import APIRouter, Depends

from core.auth import Principal
from web.dependencies import get_principal, get_services
from web.models.responses import BalanceResponse, PortfolioResponse
from web.services.exchange import ExchangeServices

router = APIRouter(prefix="/api", tags=["Balances"])


@router.get("/balances", response_model=list[BalanceResponse])
async def list_balances(
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """본인 잔고 목록"""
    balances = await services.ledger.list_balances(principal.user_id)
    return [balance.to_dict() for balance in balances]


@router.get("/portfolio", response_model=PortfolioResponse)
async def get_portfolio(
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """포트폴리오 평가 (잔고 * 현재 가격)

    잔고가 0인 자산은 제외.
    """
    portfolio = await services.portfolio.valuate(principal.user_id)
    return portfolio.to_dict()
