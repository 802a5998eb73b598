import logging
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(
    user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Any = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> None:
    """Record an audit entry in its own session. Never raises."""
    db = SessionLocal()
    try:
        db.add(ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details or {},
            ip_address=request.client.host if request and request.client else None,
            user_agent=(request.headers.get("user-agent") or "")[:512] if request else None,
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Activity logging failed for %s %s", action, entity_type, exc_info=True)
    finally:
        db.close()
