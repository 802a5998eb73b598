from typing import Optional, Dict


class AppError(Exception):
    """Base class for errors rendered as JSON responses."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(self.detail)


class ValidationError(AppError):
    """Malformed or missing input."""
    status_code = 400
    default_detail = "Invalid request"


class AuthError(AppError):
    """Missing (401) or invalid/expired/insufficient (403) credentials."""
    status_code = 401
    default_detail = "Access token required"


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class PersistenceError(AppError):
    status_code = 500
    default_detail = "Database operation failed"


class UpstreamError(AppError):
    """Geocoding or other external service failure."""
    status_code = 502
    default_detail = "Upstream service unavailable"
