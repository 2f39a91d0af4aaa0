from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from cowatch.auth import create_access_token, get_request_context, require_user
from cowatch.database import get_db
from cowatch.errors import DataConsistencyError, UserRegistrationError
from cowatch.schemas.user import LoginRequest, RegisterRequest, RequestContext, TokenResponse, UserResponse
from cowatch.services import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with username, email and password."""
    try:
        user = user_service.register_user(db, body.username, body.email, body.password)
    except UserRegistrationError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.message})
    return user


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Login with username and password."""
    user = user_service.authenticate(db, body.username, body.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return TokenResponse(access_token=create_access_token(user.username))


@router.get("/me", response_model=UserResponse)
def get_me(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    try:
        return require_user(db, ctx)
    except DataConsistencyError as e:
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": e.message})
