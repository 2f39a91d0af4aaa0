from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from cowatch.config import get_settings
from cowatch.errors import DataConsistencyError
from cowatch.models.user import User
from cowatch.repositories import user_repository
from cowatch.schemas.user import RequestContext, TokenPayload

settings = get_settings()
security = HTTPBearer(auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)

def create_access_token(username: str) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {
        "sub": username,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)

def decode_token(token: str) -> TokenPayload | None:
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        if payload.get("type") != "access":
            return None
        return TokenPayload(
            sub=payload["sub"],
            exp=payload["exp"],
        )
    except (JWTError, KeyError):
        return None

def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> RequestContext:
    """Authenticated caller or 401. Does not touch the database."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(username=payload.sub)


def require_user(db: Session, ctx: RequestContext) -> User:
    """User row behind an authenticated caller. A valid token without a row is a data problem, not a 404."""
    user = user_repository.get_user_by_username(db, ctx.username)
    if not user:
        raise DataConsistencyError(f"No user record for authenticated principal {ctx.username!r}")
    return user
