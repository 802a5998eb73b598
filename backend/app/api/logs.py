from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.auth.middleware import require_admin, CurrentUser
from app.models import ActivityLog, User

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
async def get_activity_logs(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Most recent activity first (admin only)."""
    rows = db.query(ActivityLog, User.email, User.full_name).outerjoin(
        User, ActivityLog.user_id == User.id
    ).order_by(
        ActivityLog.created_at.desc(), ActivityLog.id.desc()
    ).limit(limit).offset(offset).all()
    
    return {
        "logs": [
            {
                "id": log.id,
                "userId": log.user_id,
                "email": email,
                "fullName": full_name,
                "action": log.action,
                "entityType": log.entity_type,
                "entityId": log.entity_id,
                "details": log.details or {},
                "ipAddress": log.ip_address,
                "createdAt": log.created_at
            }
            for log, email, full_name in rows
        ]
    }
