"""
입출금 API 라우트

입금/출금 요청, 본인 요청 목록, 취소.
승인/거부는 admin 라우트.
"""

from fastapi import APIRouter, Depends, Query, status

from core.auth import Principal
from core.types import TransactionStatus
from web.dependencies import get_principal, get_services
from web.models.requests import TransferRequest
from web.models.responses import TransactionListResponse, TransactionResponse
from web.services.exchange import ExchangeServices

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.post(
    "/deposit",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_deposit(
    body: TransferRequest,
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """입금 요청 (관리자 승인 시 잔고 반영)"""
    asset = await services.asset(body.asset)
    transaction = await services.transactions.request_deposit(
        principal.user_id,
        asset.asset_id,
        body.amount,
        wallet_address=body.wallet_address,
        transaction_hash=body.transaction_hash,
    )
    return transaction.to_dict()


@router.post(
    "/withdrawal",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_withdrawal(
    body: TransferRequest,
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """출금 요청 (요청 시점에 금액 잠금)"""
    asset = await services.asset(body.asset)
    transaction = await services.transactions.request_withdrawal(
        principal.user_id,
        asset.asset_id,
        body.amount,
        wallet_address=body.wallet_address,
    )
    return transaction.to_dict()


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    status_filter: TransactionStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """본인 입출금 목록 (최신순)"""
    transactions = await services.transactions.list_for_user(
        principal.user_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return {
        "transactions": [t.to_dict() for t in transactions],
        "limit": limit,
        "offset": offset,
    }


@router.post("/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_transaction(
    transaction_id: str,
    principal: Principal = Depends(get_principal),
    services: ExchangeServices = Depends(get_services),
):
    """처리 전 요청 취소"""
    transaction = await services.transactions.cancel(principal.user_id, transaction_id)
    return transaction.to_dict()
