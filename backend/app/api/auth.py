from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.errors import AuthError, NotFoundError, ValidationError
from app.models import User
from app.auth.password import password_manager
from app.auth.jwt_manager import jwt_manager
from app.auth.middleware import get_current_user, CurrentUser
from app.schemas.spots import WireModel
from app.services.activity import log_activity
from datetime import datetime, timezone

router = APIRouter(prefix="/auth", tags=["authentication"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(WireModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=2, max_length=255)


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role
    }


def _issue_token(user: User, request: Request) -> str:
    token, _ = jwt_manager.create_access_token(
        user.id,
        user.email,
        user.role,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )
    return token


@router.post("/register")
async def register(body: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Create a regular user account and log it in."""
    email = body.email.lower()
    
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise ValidationError("Email already registered")
    
    user = User(
        email=email,
        hashed_password=password_manager.hash_password(body.password),
        full_name=body.full_name.strip(),
        role="user",
        is_active=True
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise ValidationError("Email already registered")
    db.refresh(user)
    
    token = _issue_token(user, request)
    log_activity(user.id, "register", "user", user.id, {"email": email}, request)
    
    return {"token": token, "user": _user_payload(user)}


@router.post("/login")
async def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate user and return a bearer token."""
    email = body.email.lower()
    
    # Find user
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise AuthError("Invalid credentials", status_code=401)
    
    if not user.is_active:
        raise AuthError("Account deactivated", status_code=401)
    
    # Verify password
    if not password_manager.verify_password(body.password, user.hashed_password):
        raise AuthError("Invalid credentials", status_code=401)
    
    # Check if password needs rehashing
    if password_manager.needs_rehash(user.hashed_password):
        user.hashed_password = password_manager.hash_password(body.password)
    
    # Update last login
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    
    token = _issue_token(user, request)
    log_activity(user.id, "login", "user", user.id, {"email": email}, request)
    
    return {"token": token, "user": _user_payload(user)}


@router.post("/logout")
async def logout(request: Request, current_user: CurrentUser = Depends(get_current_user)):
    """Revoke the session behind the presented token; other devices stay signed in."""
    jwt_manager.revoke_token(current_user.jti)
    log_activity(current_user.user_id, "logout", "user", current_user.user_id, {}, request)
    
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user_info(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current user information."""
    user = db.query(User).filter(User.id == current_user.user_id).first()
    if not user:
        raise NotFoundError("User not found")
    
    return {
        "user": {
            **_user_payload(user),
            "createdAt": user.created_at,
            "lastLoginAt": user.last_login_at
        }
    }
