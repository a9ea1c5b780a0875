from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ..database import SessionDep
from ..users.models import User as UserModel, ROLE_ADMIN

from .groups import POST, PUT, PUT_RESET_PASSWORD, GET_BLOG_POST_WITH_AUTHOR, normalize, read_groups
from .validation import validate_user_payload
from . import service as user_service
from ..auth.dependencies import CurrentUser, require_role, require_same_user
from ..auth.service import create_access_token
from ..blog.schemas import BlogPostOut

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(user_id: int, db) -> UserModel:
    user = await user_service.get_user_by_id(user_id, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("/", status_code=status.HTTP_201_CREATED)
async def register_user(db: SessionDep, data: dict[str, Any] = Body(...)):
    payload = await validate_user_payload(db, POST, data)
    user = await user_service.create_user(db, payload)
    # 가입 직후 응답은 본인 조회와 같은 뷰
    return normalize(user, read_groups(user, viewer=user))


@router.get("/")
async def list_users(
    db: SessionDep,
    skip: int = 0,
    limit: int = 100,
    admin: UserModel = Depends(require_role(ROLE_ADMIN)),
):
    users = await user_service.get_users(db, skip=skip, limit=limit)
    return [normalize(user, read_groups(user, viewer=admin)) for user in users]


@router.get("/{user_id}")
async def get_user(user_id: int, db: SessionDep, current_user: UserModel = CurrentUser):
    user = await _get_user_or_404(user_id, db)
    return normalize(user, read_groups(user, viewer=current_user))


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    db: SessionDep,
    data: dict[str, Any] = Body(...),
    current_user: UserModel = CurrentUser,
):
    user = await _get_user_or_404(user_id, db)
    require_same_user(user, current_user)
    payload = await validate_user_payload(db, PUT, data, user=user)
    user = await user_service.update_user(db, db_user=user, user_in=payload)
    return normalize(user, read_groups(user, viewer=current_user))


@router.put("/{user_id}/reset-password")
async def reset_password(
    user_id: int,
    db: SessionDep,
    data: dict[str, Any] = Body(...),
    current_user: UserModel = CurrentUser,
):
    """
    비밀번호 재설정. 기존 access token은 무효화되고 새 token을 돌려줍니다.
    """
    user = await _get_user_or_404(user_id, db)
    require_same_user(user, current_user)
    payload = await validate_user_payload(db, PUT_RESET_PASSWORD, data, user=user)
    user = await user_service.reset_password(db, user, payload)
    return {"token": await create_access_token(user=user)}


@router.get("/{user_id}/posts", response_model=list[BlogPostOut])
async def list_user_posts(user_id: int, db: SessionDep):
    user = await _get_user_or_404(user_id, db)
    return [BlogPostOut.from_post(post, GET_BLOG_POST_WITH_AUTHOR) for post in user.posts]
