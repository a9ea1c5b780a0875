from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from ..database import SessionDep

from ..users.models import User
from ..auth import service as auth_service
from .roles import is_granted

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

async def get_current_user_from_access_token(
    db: SessionDep,
    token: str = Depends(oauth2_scheme), 
) -> User:
    user = await auth_service.get_user_from_access_token(token=token, db=db)
    
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

CurrentUser = Depends(get_current_user_from_access_token)

def require_role(role: str):
    """
    현재 사용자가 주어진 역할(계층 포함)을 가지고 있는지 확인하는 의존성을 만듭니다.
    권한이 없으면 403 Forbidden 에러를 발생시킵니다.
    """
    def _check(current_user: User = CurrentUser) -> User:
        if not is_granted(current_user, role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role} privileges required",
            )
        return current_user
    return _check

def require_same_user(target: User, current_user: User) -> None:
    """object == user 조건: 본인만 수정할 수 있습니다."""
    if target.id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
