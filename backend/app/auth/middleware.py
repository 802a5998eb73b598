from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.auth.jwt_manager import jwt_manager
from app.core.errors import AuthError

# Security scheme for FastAPI; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


class CurrentUser:
    """Context class to hold current user information."""
    def __init__(self, user_id: int, email: str, role: str, jti: str):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.jti = jti
    
    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _user_from_token(token: str) -> CurrentUser:
    payload = jwt_manager.verify_access_token(token)
    if not payload:
        raise AuthError("Invalid or expired token", status_code=403)
    
    return CurrentUser(
        user_id=int(payload["sub"]),
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
        jti=payload["jti"]
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """Dependency to get the current authenticated user."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required", status_code=401)
    
    return _user_from_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """Like get_current_user, but public routes treat a missing or stale token as anonymous."""
    if credentials is None or not credentials.credentials:
        return None
    
    try:
        return _user_from_token(credentials.credentials)
    except AuthError:
        return None


def require_role(required_role: str):
    """Factory function to create a role requirement dependency."""
    async def role_dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != required_role:
            raise AuthError(f"{required_role.capitalize()} access required", status_code=403)
        return current_user
    return role_dependency


require_admin = require_role("admin")
