from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from ..database import SessionDep
from .service import authenticate_user, create_access_token, create_refresh_token, get_user_from_refresh_token

from .schema import TokenRefreshRequest, TokenPair, AccessToken

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=TokenPair)
async def login(
    db: SessionDep,
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    user = await authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenPair(
        access_token=await create_access_token(user=user),
        refresh_token=await create_refresh_token(user=user),
    )

@router.post("/refresh", response_model=AccessToken)
async def refresh_access_token(
    request: TokenRefreshRequest,
    db: SessionDep
):
    user = await get_user_from_refresh_token(request.refresh_token, db)
    return AccessToken(access_token=await create_access_token(user=user))
