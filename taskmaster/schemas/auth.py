#taskmaster/schemas/auth.py
from pydantic import BaseModel, Field
from typing import Optional

from taskmaster.schemas.user import UserRead

class Token(BaseModel):
    """
    Token — access-токен для авторизации.
    """
    access_token: str = Field(..., examples=["eyJhbGciOi..."], description="JWT access token")
    token_type: str = Field("bearer", examples=["bearer"], description="Тип токена (bearer)")
    expires_in: Optional[int] = Field(None, description="Время жизни токена (секунды)", examples=[604800])

class TokenPayload(BaseModel):
    """
    TokenPayload — claims access-токена.
    """
    sub: Optional[str] = Field(None, description="ID пользователя", examples=["1"])
    exp: Optional[int] = Field(None, description="Expiration UNIX timestamp", examples=[1717000000])
    type: Optional[str] = Field(None, examples=["access"])

class LoginResponse(Token):
    """
    LoginResponse — ответ на успешный вход/регистрацию: токен + пользователь.
    """
    message: Optional[str] = None
    user: UserRead
