import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import auth, categories, favorites, geocoding, health, logs, spots, users
from app.auth.jwt_manager import jwt_manager
from app.core.config import settings
from app.core.database import Base, engine
from app.core.errors import AppError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_ROUTERS = (auth, spots, categories, favorites, users, logs, geocoding)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Spot Map API starting (%s)", settings.environment)
    Base.metadata.create_all(bind=engine)

    removed = jwt_manager.cleanup_expired_tokens()
    if removed:
        logger.info("Removed %d expired sessions", removed)

    yield
    logger.info("Spot Map API stopped")


app = FastAPI(
    title="Spot Map API",
    description="Points of interest directory with map-based browsing",
    version=health.VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """Tag each request with an id, time it and stamp the response headers."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        extra={"request_id": request_id},
    )
    response.headers["X-Request-ID"] = request_id
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, error, headers=None, **extra) -> JSONResponse:
    body = {"error": error, **extra}
    body["status_code"] = status_code
    body["request_id"] = getattr(request.state, "request_id", "unknown")
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.detail)
    return _error_response(request, exc.status_code, exc.detail, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with the list of problems."""
    problems = [
        {"field": ".".join(str(part) for part in err.get("loc", [])), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return _error_response(request, 400, "Invalid request", errors=problems)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        extra={"request_id": getattr(request.state, "request_id", "unknown")},
    )
    return _error_response(request, 500, "Internal server error")


# Health probes answer both at the root and under the API prefix
app.include_router(health.router, tags=["health"])
app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
for module in API_ROUTERS:
    app.include_router(module.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"service": "Spot Map API", "version": health.VERSION, "docs": "/docs", "api": settings.api_prefix}
