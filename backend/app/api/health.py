import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.models import Category, Spot

router = APIRouter()

STARTED_AT = time.monotonic()
VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_database() -> Dict[str, Any]:
    """Round-trip the database and count what a visitor would see."""
    started = time.perf_counter()
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1")).scalar()
        active_spots = db.query(Spot).filter(Spot.is_active == True).count()
        active_categories = db.query(Category).filter(Category.is_active == True).count()
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
    finally:
        db.close()

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "active_spots": active_spots,
        "active_categories": active_categories,
    }


@router.get("/healthz")
async def health_check():
    """Readiness: 200 when the database answers, 503 otherwise."""
    database = check_database()
    body = {
        "status": database["status"],
        "version": VERSION,
        "uptime_seconds": round(time.monotonic() - STARTED_AT, 1),
        "timestamp": _now(),
        "checks": {"database": database},
    }
    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content=body)
    return body


@router.get("/health")
async def simple_health_check():
    """Liveness only; no dependencies are touched."""
    return {"status": "ok", "timestamp": _now()}
