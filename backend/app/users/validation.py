"""
Operation별 검증 그룹.

스키마 검증(형식, 길이, 비밀번호 확인)과 DB가 필요한 검증(중복, 현재 비밀번호 확인)을
한 번에 수행하고, 실패 항목을 모두 모아 필드 단위 422 에러로 돌려줍니다.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from . import service as user_service
from .groups import POST, PUT, PUT_RESET_PASSWORD
from .models import User as UserModel
from .schema import UserCreate, UserUpdate, UserResetPassword
from ..models import CustomModel

logger = logging.getLogger(__name__)

PAYLOAD_SCHEMAS: dict[str, type[CustomModel]] = {
    POST: UserCreate,
    PUT: UserUpdate,
    PUT_RESET_PASSWORD: UserResetPassword,
}

USERNAME_TAKEN_MESSAGE = "That username is already in use."
EMAIL_TAKEN_MESSAGE = "That email address is already taken."
OLD_PASSWORD_MESSAGE = "This value should be the user's current password."


def field_error(field: str, msg: str, error_type: str = "value_error") -> dict[str, Any]:
    return {"loc": ["body", field], "msg": msg, "type": error_type}


def _schema_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": ["body", *err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


async def _unique_errors(
    db: AsyncSession,
    data: dict[str, Any],
    *,
    check_username: bool,
    exclude_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    errors = []
    username = data.get("username")
    if check_username and isinstance(username, str) and username:
        existing = await user_service.get_user_by_username(username, db)
        if existing and existing.id != exclude_id:
            errors.append(field_error("username", USERNAME_TAKEN_MESSAGE, "unique"))
    email = data.get("email")
    if isinstance(email, str) and email:
        existing = await user_service.get_user_by_email(email, db)
        if existing and existing.id != exclude_id:
            errors.append(field_error("email", EMAIL_TAKEN_MESSAGE, "unique"))
    return errors


async def _old_password_errors(user: Optional[UserModel], data: dict[str, Any]) -> list[dict[str, Any]]:
    old_password = data.get("old_password")
    # 비어있는 경우는 스키마 검증에서 not_blank로 잡힘
    if not isinstance(old_password, str) or not old_password.strip():
        return []
    if user is None or not await user_service.verify_password(old_password, user.password):
        return [field_error("old_password", OLD_PASSWORD_MESSAGE, "user_password")]
    return []


async def validate_user_payload(
    db: AsyncSession,
    operation: str,
    data: Any,
    *,
    user: Optional[UserModel] = None,
) -> CustomModel:
    """
    operation 이름에 해당하는 스키마와 추가 검증을 적용합니다.

    - post: 스키마 + username/email 중복
    - put: 스키마 + 다른 사용자와의 email 중복
    - put-reset-password: 스키마 + old_password가 현재 비밀번호와 일치하는지

    하나라도 실패하면 모든 에러를 담아 HTTPException(422)을 발생시킵니다.
    """
    schema = PAYLOAD_SCHEMAS.get(operation)
    if schema is None:
        raise ValueError(f"No validation group for operation {operation!r}")

    errors: list[dict[str, Any]] = []
    payload = None
    try:
        payload = schema.model_validate(data)
    except ValidationError as exc:
        errors.extend(_schema_errors(exc))

    if isinstance(data, dict):
        # 저장되는 값(EmailStr 정규화 결과)으로 중복을 확인하고, 스키마 실패 시에만 원본 값 사용
        lookup = {**data, **payload.model_dump(exclude_unset=True)} if payload is not None else data
        if operation == POST:
            errors.extend(await _unique_errors(db, lookup, check_username=True))
        elif operation == PUT:
            errors.extend(await _unique_errors(
                db, lookup, check_username=False, exclude_id=user.id if user else None
            ))
        elif operation == PUT_RESET_PASSWORD:
            errors.extend(await _old_password_errors(user, data))

    if errors:
        logger.info(f"Validation failed for operation={operation!r}: {[e['loc'][-1] for e in errors]}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    return payload
