"""
User 필드별 직렬화 그룹 정의.

각 operation(읽기/쓰기)에서 어떤 필드가 노출되거나 입력 가능한지를
한 곳의 테이블(FIELD_GROUPS)로 관리합니다.

- normalization (서버 -> 클라이언트): get, get-owner, get-admin,
  get-comment-with-author, get-blog-post-with-author
- denormalization (클라이언트 -> 서버): post, put, put-reset-password
"""
from typing import Any, Iterable, Optional

from ..auth.roles import is_granted
from .models import User, ROLE_ADMIN

GET = "get"
GET_OWNER = "get-owner"
GET_ADMIN = "get-admin"
GET_COMMENT_WITH_AUTHOR = "get-comment-with-author"
GET_BLOG_POST_WITH_AUTHOR = "get-blog-post-with-author"

POST = "post"
PUT = "put"
PUT_RESET_PASSWORD = "put-reset-password"

WRITE_OPERATIONS = (POST, PUT, PUT_RESET_PASSWORD)

# 필드 선언 순서가 곧 응답 JSON의 키 순서입니다.
FIELD_GROUPS: dict[str, frozenset[str]] = {
    "id": frozenset({GET}),
    "username": frozenset({GET, POST, GET_COMMENT_WITH_AUTHOR, GET_BLOG_POST_WITH_AUTHOR}),
    "roles": frozenset({GET_ADMIN, GET_OWNER}),
    "password": frozenset({POST}),
    "verified_password": frozenset({POST}),
    "new_password": frozenset({PUT_RESET_PASSWORD}),
    "new_verified_password": frozenset({PUT_RESET_PASSWORD}),
    "old_password": frozenset({PUT_RESET_PASSWORD}),
    "name": frozenset({GET, POST, PUT, GET_COMMENT_WITH_AUTHOR, GET_BLOG_POST_WITH_AUTHOR}),
    "email": frozenset({POST, PUT, GET_ADMIN, GET_OWNER}),
    "comments": frozenset({GET}),
    "posts": frozenset({GET}),
}

# 응답에는 절대 포함되지 않는 필드
WRITE_ONLY_FIELDS = frozenset({
    "password",
    "verified_password",
    "new_password",
    "new_verified_password",
    "old_password",
})


def fields_for(groups: Iterable[str]) -> list[str]:
    wanted = set(groups)
    return [field for field, field_groups in FIELD_GROUPS.items() if field_groups & wanted]


def writable_fields(operation: str) -> set[str]:
    """쓰기 operation에서 클라이언트가 보낼 수 있는 필드 목록."""
    if operation not in WRITE_OPERATIONS:
        raise ValueError(f"Unknown write operation: {operation!r}")
    return set(fields_for([operation]))


def readable_fields(groups: Iterable[str]) -> list[str]:
    return [field for field in fields_for(groups) if field not in WRITE_ONLY_FIELDS]


def read_groups(user: User, viewer: Optional[User]) -> list[str]:
    """조회자(viewer)에 따라 적용할 normalization 그룹을 결정합니다."""
    groups = [GET]
    if viewer is not None and viewer.id is not None and viewer.id == user.id:
        groups.append(GET_OWNER)
    if is_granted(viewer, ROLE_ADMIN):
        groups.append(GET_ADMIN)
    return groups


def _render(user: User, field: str) -> Any:
    if field == "roles":
        return user.get_roles()
    if field in ("comments", "posts"):
        return [item.id for item in getattr(user, field)]
    return getattr(user, field)


def normalize(user: User, groups: Iterable[str]) -> dict[str, Any]:
    """User를 주어진 그룹에 해당하는 필드만 담은 dict로 변환합니다."""
    return {field: _render(user, field) for field in readable_fields(groups)}
