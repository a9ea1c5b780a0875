import logging
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict

from ..users import service as user_service
from ..users.models import User

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings

logger = logging.getLogger(__name__)


def _issue(payload: Dict, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {**payload, "iat": int(now.timestamp()), "exp": now + expires_in}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


async def create_access_token(user: User) -> str:
    """
    사용자 객체를 기반으로 Access Token을 생성합니다.
    토큰에 역할(roles)과 타입(type) 정보를 추가합니다.
    """
    return _issue(
        {
            "sub": user.username,
            "roles": user.get_roles(),
            "type": "access",
        },
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

async def create_refresh_token(user: User) -> str:
    return _issue(
        {"sub": user.username, "type": "refresh"},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

async def _decode_token(token: str) -> Optional[Dict]:
    """
    토큰을 디코딩하고 기본적인 유효성을 검사하는 내부 헬퍼 함수.
    (서명, 만료 시간 등)
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

def _issued_before_password_change(payload: Dict, user: User) -> bool:
    changed = user.password_change_date
    if changed is None:
        return False
    if changed.tzinfo is None:
        # SQLite는 timezone 정보를 보존하지 않음
        changed = changed.replace(tzinfo=timezone.utc)
    issued_at = payload.get("iat")
    # iat는 초 단위이므로 같은 초에 발급된 토큰은 유효
    return issued_at is None or issued_at < int(changed.timestamp())

async def _user_from_payload(payload: Optional[Dict], token_type: str, db: AsyncSession) -> Optional[User]:
    if payload is None or payload.get("type") != token_type:
        return None
    username = payload.get("sub")
    if username is None:
        return None
    user = await user_service.get_user_by_username(username, db)
    if user is None:
        return None
    if _issued_before_password_change(payload, user):
        logger.info(f"Rejected {token_type} token issued before password change for user id={user.id}")
        return None
    return user

async def get_user_from_access_token(token: str, db: AsyncSession) -> Optional[User]:
    """
    Access Token을 검증하고 해당 사용자를 반환합니다.
    비밀번호 재설정 이전에 발급된 토큰은 무효입니다.
    """
    payload = await _decode_token(token)
    return await _user_from_payload(payload, "access", db)


async def get_user_from_refresh_token(token: str, db: AsyncSession) -> User:
    """
    Refresh Token을 검증하고 해당 사용자를 반환합니다.
    이 함수는 /auth/refresh 엔드포인트에서 사용됩니다.
    """
    payload = await _decode_token(token)
    user = await _user_from_payload(payload, "refresh", db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    return user

async def authenticate_user(
    db: AsyncSession, username: str, password: str
) -> Optional[User]:
    """
    username과 비밀번호로 인증을 시도합니다.
    성공 시 User 객체를, 실패 시 None을 반환합니다.
    """
    user = await user_service.get_user_by_username(username, db)

    if not user or not await user_service.verify_password(password, user.password):
        logger.warning(f"Failed login attempt for username={username!r}")
        return None
    return user
