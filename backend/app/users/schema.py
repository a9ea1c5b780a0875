import re
from pydantic import EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from typing import Optional

from ..models import CustomModel

USERNAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?!.*\s).{7,}$")

BLANK_MESSAGE = "This value should not be blank."
USERNAME_MESSAGE = "Username must start with a letter and only contain letters, numbers, underscores, and hyphens."
PASSWORD_MESSAGE = (
    "Password must be at least 7 characters long and contain at least one digit, "
    "one upper case character, and one lower case letter."
)
MISMATCH_MESSAGE = "Passwords do not match."


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise PydanticCustomError("not_blank", BLANK_MESSAGE)
    return value


def _check_password(value: str) -> str:
    _not_blank(value)
    if not PASSWORD_PATTERN.match(value):
        raise PydanticCustomError("password_strength", PASSWORD_MESSAGE)
    return value


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not 6 <= len(value) <= 255:
        raise PydanticCustomError("email_length", "Email must be between 6 and 255 characters long.")
    return value


def _check_confirmation(value: str, info: ValidationInfo, field: str) -> str:
    _not_blank(value)
    # 원본 필드가 이미 실패했다면 비교 대상이 없음
    if field in info.data and info.data[field] != value:
        raise PydanticCustomError("passwords_mismatch", MISMATCH_MESSAGE)
    return value


class UserCreate(CustomModel):
    """회원가입 (post) 입력"""
    username: str = Field(..., min_length=3, max_length=180, json_schema_extra={"example": "alice"})
    password: str = Field(..., json_schema_extra={"example": "Secret12"})
    verified_password: str = Field(..., json_schema_extra={"example": "Secret12"})
    name: str = Field(..., min_length=5, max_length=255, json_schema_extra={"example": "Alice Liddell"})
    email: EmailStr = Field(..., json_schema_extra={"example": "alice@example.com"})

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        _not_blank(v)
        if not USERNAME_PATTERN.match(v):
            raise PydanticCustomError("username_format", USERNAME_MESSAGE)
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("verified_password")
    @classmethod
    def _verified_password(cls, v: str, info: ValidationInfo) -> str:
        return _check_confirmation(v, info, "password")

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)


class UserUpdate(CustomModel):
    """프로필 수정 (put) 입력. 값이 주어진 필드만 반영됩니다."""
    name: Optional[str] = Field(None, min_length=5, max_length=255, json_schema_extra={"example": "Alice P. Liddell"})
    email: Optional[EmailStr] = Field(None, json_schema_extra={"example": "alice.liddell@example.com"})

    @field_validator("name", "email", mode="before")
    @classmethod
    def _explicit_null(cls, v):
        # 필드 생략은 허용하지만 명시적인 null은 NOT NULL 컬럼을 비우려는 시도
        if v is None:
            raise PydanticCustomError("not_blank", BLANK_MESSAGE)
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _not_blank(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class UserResetPassword(CustomModel):
    """비밀번호 재설정 (put-reset-password) 입력. 영속화되지 않는 일회성 payload."""
    new_password: str = Field(..., json_schema_extra={"example": "NewSecret34"})
    new_verified_password: str = Field(..., json_schema_extra={"example": "NewSecret34"})
    old_password: str = Field(..., json_schema_extra={"example": "Secret12"})

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("new_verified_password")
    @classmethod
    def _new_verified_password(cls, v: str, info: ValidationInfo) -> str:
        return _check_confirmation(v, info, "new_password")

    @field_validator("old_password")
    @classmethod
    def _old_password(cls, v: str) -> str:
        return _not_blank(v)
