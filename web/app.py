"""
FastAPI 애플리케이션

라우터 등록, 도메인 예외 → HTTP 응답 변환, 앱 수명 관리.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.errors import (
    AlreadyFinalized,
    AlreadyTerminal,
    ExchangeError,
    InsufficientFunds,
    InvalidAmount,
    InvalidPair,
    InvariantViolation,
    MissingPrice,
    NotFound,
    Overfill,
    StorageUnavailable,
)
from web.routes import admin, assets, balances, health, ledger, orders, transactions
from web.services.exchange import ExchangeServices

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

# 도메인 예외 → HTTP 상태 코드
ERROR_STATUS: dict[type[ExchangeError], int] = {
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    InvalidPair: status.HTTP_400_BAD_REQUEST,
    MissingPrice: status.HTTP_400_BAD_REQUEST,
    Overfill: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    InsufficientFunds: status.HTTP_409_CONFLICT,
    AlreadyFinalized: status.HTTP_409_CONFLICT,
    AlreadyTerminal: status.HTTP_409_CONFLICT,
    InvariantViolation: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ExchangeError) -> int:
    """예외 타입에 해당하는 HTTP 상태 코드 (미등록 타입은 500)"""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]  # type: ignore[index]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    시작: DB 연결 + 스키마 초기화(자산 시드 포함) + 서비스 생성
    종료: DB 연결 종료
    """
    settings = get_settings()

    db = SQLiteAdapter(settings.db_path, timeout_sec=settings.storage_timeout_sec)
    await db.connect()
    await init_schema(db)

    app.state.services = ExchangeServices(db)
    logger.info(
        f"Web started: mode={settings.mode.value}",
        extra={"db_path": str(settings.db_path)},
    )

    try:
        yield
    finally:
        app.state.services = None
        await db.close()
        logger.info("Web: DB 연결 종료 완료")


async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    """도메인 예외 → {"error": code, "detail": message}"""
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(
            f"{exc.code}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
    else:
        logger.info(
            f"Request rejected ({status_code}) {exc.code}: {exc.message}",
            extra={"path": request.url.path},
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "detail": exc.message},
    )


def create_app() -> FastAPI:
    """FastAPI 앱 생성"""
    app = FastAPI(
        title="MoonEx API",
        description="거래소 잔고 원장 / 입출금 / 주문 정산 API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ExchangeError, exchange_error_handler)  # type: ignore[arg-type]

    # =========================================================================
    # API 라우터 등록
    # =========================================================================

    app.include_router(health.router)
    app.include_router(assets.router)
    app.include_router(balances.router)
    app.include_router(ledger.router)
    app.include_router(transactions.router)
    app.include_router(orders.router)
    app.include_router(admin.router)

    return app


app = create_app()
