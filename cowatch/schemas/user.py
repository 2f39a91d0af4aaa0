from datetime import datetime
from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class TokenPayload(BaseModel):
    sub: str  # username
    exp: int
    type: str = "access"


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RequestContext(BaseModel):
    """Caller identity resolved from the bearer token, passed explicitly to services."""
    username: str
