from ..models import CustomModel

class TokenRefreshRequest(CustomModel):
    refresh_token: str

class TokenPair(CustomModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class AccessToken(CustomModel):
    access_token: str
    token_type: str = "bearer"
