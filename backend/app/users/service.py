import logging
from datetime import datetime, timezone
from typing import List, Optional, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status

from passlib.context import CryptContext

from ..config import settings
from .models import User as UserModel, DEFAULT_ROLES
from .schema import UserCreate, UserUpdate, UserResetPassword

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


async def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


async def _commit_unique(db: AsyncSession) -> None:
    # 사전 중복 검사 이후 동시 요청이 끼어든 경우 DB unique 제약이 최종 방어선
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Unique constraint violation while saving user")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username or email already registered")


async def create_user(
    db: AsyncSession,
    user_data: UserCreate,
    roles: Optional[Iterable[str]] = None,
) -> UserModel:
    """회원가입. verified_password는 검증에만 쓰이고 저장되지 않습니다."""
    db_user = UserModel(
        username=user_data.username,
        name=user_data.name,
        email=user_data.email,
        password=hash_password(user_data.password),
        roles=list(roles) if roles is not None else list(DEFAULT_ROLES),
    )
    db.add(db_user)
    await _commit_unique(db)
    await db.refresh(db_user)
    logger.info(f"Registered user id={db_user.id} username={db_user.username!r}")
    return db_user


async def get_users(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[UserModel]:
    """모든 사용자 목록을 페이지네이션하여 조회합니다."""
    result = await db.execute(
        select(UserModel)
        .order_by(UserModel.id)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


async def update_user(db: AsyncSession, db_user: UserModel, user_in: UserUpdate) -> UserModel:
    """사용자 정보를 수정합니다. 명시적으로 전달된 필드만 업데이트합니다."""
    update_data = user_in.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(db_user, field, value)

    await _commit_unique(db)
    await db.refresh(db_user)
    logger.info(f"Updated user id={db_user.id} fields={sorted(update_data)}")
    return db_user


async def reset_password(db: AsyncSession, db_user: UserModel, payload: UserResetPassword) -> UserModel:
    """
    새 비밀번호를 해시하여 저장하고 password_change_date를 갱신합니다.
    old_password 확인은 validation 단계에서 끝난 상태여야 합니다.
    """
    db_user.password = hash_password(payload.new_password)
    db_user.password_change_date = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Password reset for user id={db_user.id}")
    return db_user


async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_username(username: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.username == username))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()
