from typing import Optional

from ..users.models import (
    User,
    ROLE_COMMENTATOR,
    ROLE_WRITER,
    ROLE_EDITOR,
    ROLE_ADMIN,
    ROLE_SUPER_ADMIN,
)

# 상위 역할은 하위 역할의 권한을 모두 포함합니다.
ROLE_HIERARCHY: dict[str, tuple[str, ...]] = {
    ROLE_WRITER: (ROLE_COMMENTATOR,),
    ROLE_EDITOR: (ROLE_WRITER,),
    ROLE_ADMIN: (ROLE_EDITOR,),
    ROLE_SUPER_ADMIN: (ROLE_ADMIN,),
}


def reachable_roles(roles) -> set[str]:
    reachable: set[str] = set()
    pending = list(roles)
    while pending:
        role = pending.pop()
        if role in reachable:
            continue
        reachable.add(role)
        pending.extend(ROLE_HIERARCHY.get(role, ()))
    return reachable


def is_granted(user: Optional[User], role: str) -> bool:
    if user is None:
        return False
    return role in reachable_roles(user.get_roles())
