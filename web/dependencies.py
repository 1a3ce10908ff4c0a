"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
- 설정, 서비스 묶음 (app.state)
- Bearer 토큰 인증 (get_principal), 관리자 권한 (require_admin)
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.auth import AuthError, Principal, decode_token
from core.config.loader import Settings, get_settings
from web.services.exchange import ExchangeServices

_bearer = HTTPBearer(auto_error=False)


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_services(request: Request) -> ExchangeServices:
    """lifespan에서 생성한 서비스 묶음 반환"""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services not initialized",
        )
    return services


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    """Bearer 토큰 검증 → 호출자

    Raises:
        HTTPException 401: 토큰 없음/무효/만료
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_token(credentials.credentials, settings.web_secret_key)
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """관리자 권한 확인

    Raises:
        HTTPException 403: role이 admin이 아님
    """
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return principal
