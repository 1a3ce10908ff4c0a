"""
인증 토큰

HS256 JWT 발급/검증 (PyJWT).
페이로드: sub(user_id), role(user/admin), iat, exp
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

import jwt

from core.constants import Defaults
from core.types import UserRole
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """토큰 검증 실패"""
    pass


@dataclass(frozen=True)
class Principal:
    """인증된 호출자"""

    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def issue_token(
    user_id: str,
    role: UserRole | str,
    secret_key: str,
    ttl_min: int = Defaults.TOKEN_TTL_MIN,
) -> str:
    """접근 토큰 발급

    Args:
        user_id: 사용자 ID (sub)
        role: user / admin
        secret_key: 서명 키
        ttl_min: 유효 시간 (분)

    Returns:
        JWT 문자열
    """
    now = now_utc()
    payload = {
        "sub": user_id,
        "role": UserRole(role).value,
        "iat": now,
        "exp": now + timedelta(minutes=ttl_min),
    }
    return jwt.encode(payload, secret_key, algorithm=Defaults.TOKEN_ALGORITHM)


def decode_token(token: str, secret_key: str) -> Principal:
    """토큰 검증

    Raises:
        AuthError: 서명 불일치, 만료, 필수 클레임 누락, 알 수 없는 role
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[Defaults.TOKEN_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {e}") from e

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError as e:
        raise AuthError(f"Unknown role: {payload.get('role')}") from e

    return Principal(user_id=str(payload["sub"]), role=role)
