from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Literal

from app.core.database import get_db
from app.core.errors import NotFoundError, ValidationError
from app.auth.jwt_manager import jwt_manager
from app.auth.middleware import require_admin, CurrentUser
from app.models import User
from app.services.activity import log_activity

router = APIRouter(prefix="/users", tags=["users"])


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "admin"]


@router.get("")
async def get_users(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """List all users (admin only)."""
    users = db.query(User).order_by(User.id).all()
    
    return {
        "users": [
            {
                "id": user.id,
                "email": user.email,
                "fullName": user.full_name,
                "role": user.role,
                "isActive": user.is_active,
                "createdAt": user.created_at,
                "lastLoginAt": user.last_login_at
            }
            for user in users
        ]
    }


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Change a user's role (admin only)."""
    if user_id == current_user.user_id and body.role != "admin":
        raise ValidationError("Cannot remove your own admin role")
    
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    
    user.role = body.role
    db.commit()
    
    # The role is embedded in issued tokens
    jwt_manager.revoke_all_user_tokens(user_id)
    log_activity(current_user.user_id, "update_role", "user", user_id, {"role": body.role}, request)
    
    return {"message": "User role updated successfully"}
