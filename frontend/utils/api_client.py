import json
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import requests

from config import (
    API_BASE_URL, API_TIMEOUT, RETRY_ATTEMPTS, RETRY_DELAY,
    CACHE_NAMESPACE, CACHE_TTL_SPOTS, CACHE_TTL_CATEGORIES, CACHE_TTL_USERS,
)
from utils.cache import ClientCache
from utils.retry import call_with_retry

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class SessionExpiredError(APIError):
    """The stored token was rejected; the user has to log in again."""


# Backend error text for a token that is malformed, expired or revoked (sent with 403)
REJECTED_TOKEN_ERROR = "Invalid or expired token"


class APIClient:
    """Client for communicating with the backend API."""

    def __init__(self, base_url: str = API_BASE_URL, timeout: float = API_TIMEOUT,
                 retry_attempts: int = RETRY_ATTEMPTS, retry_delay: float = RETRY_DELAY,
                 cache: Optional[ClientCache] = None, session: Optional[requests.Session] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.cache = cache if cache is not None else ClientCache(CACHE_NAMESPACE)
        self.session = session or requests.Session()
        self._sleep = sleep

        # Set default headers
        self.session.headers.update({
            "Content-Type": "application/json"
        })

    # ----- auth header -----

    def set_auth_token(self, token: str):
        """Set the authorization token for API requests."""
        self.session.headers.update({
            "Authorization": f"Bearer {token}"
        })

    def clear_auth_token(self):
        """Clear the authorization token."""
        if "Authorization" in self.session.headers:
            del self.session.headers["Authorization"]

    @property
    def has_token(self) -> bool:
        return "Authorization" in self.session.headers

    # ----- transport -----

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        def send():
            return self.session.request(method, url, timeout=self.timeout, **kwargs)

        retry_kwargs = {"sleep": self._sleep} if self._sleep else {}
        try:
            response = call_with_retry(send, self.retry_attempts, self.retry_delay, **retry_kwargs)
        except (requests.Timeout, requests.ConnectionError) as e:
            raise APIError(f"Backend unreachable: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Dict[str, Any]:
        """Return JSON data or raise APIError."""
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            data = {"error": "Invalid JSON response"}

        rejected = response.status_code == 401 or (
            response.status_code == 403
            and isinstance(data, dict)
            and data.get("error") == REJECTED_TOKEN_ERROR
        )
        if rejected and self.has_token:
            self.clear_auth_token()
            self.cache.clear()
            raise SessionExpiredError("Session expired. Please log in again.", response.status_code, data)

        if response.status_code >= 400:
            error_msg = data.get("error", f"HTTP {response.status_code}") if isinstance(data, dict) else f"HTTP {response.status_code}"
            raise APIError(str(error_msg), response.status_code, data if isinstance(data, dict) else None)

        return data

    def _invalidate_spots(self, spot_id: Optional[int] = None):
        if spot_id is not None:
            self.cache.remove(f"spot_{spot_id}")
        self.cache.remove_prefix("spots_")

    # ----- auth -----

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate and store the bearer token."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.set_auth_token(data["token"])
        self.cache.clear()
        return data

    def register(self, email: str, password: str, full_name: str) -> Dict[str, Any]:
        data = self._request(
            "POST", "/auth/register",
            json={"email": email, "password": password, "fullName": full_name}
        )
        self.set_auth_token(data["token"])
        self.cache.clear()
        return data

    def logout(self):
        """Revoke sessions server-side; the local token is dropped either way."""
        try:
            if self.has_token:
                self._request("POST", "/auth/logout")
        finally:
            self.clear_auth_token()
            self.cache.clear()

    def get_user_info(self) -> Dict[str, Any]:
        """Get current user information."""
        return self._request("GET", "/auth/me")["user"]

    # ----- spots -----

    @staticmethod
    def spot_query(filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        filters = filters or {}
        params: Dict[str, Any] = {}
        if filters.get("category") and filters["category"] != "all":
            params["category"] = filters["category"]
        if filters.get("search"):
            params["search"] = filters["search"]
        if filters.get("lat") is not None and filters.get("lng") is not None and filters.get("radius"):
            params["lat"] = filters["lat"]
            params["lng"] = filters["lng"]
            params["radius"] = filters["radius"]
        if filters.get("favorites_only"):
            params["favoritesOnly"] = "true"
        return params

    def get_spots(self, filters: Optional[Dict[str, Any]] = None, use_cache: bool = True) -> List[Dict[str, Any]]:
        """List spots matching the server-side filters."""
        params = self.spot_query(filters)

        def fetch():
            return self._request("GET", "/spots", params=params)["spots"]

        if not use_cache or params.get("favoritesOnly"):
            return fetch()

        key = f"spots_{urlencode(sorted(params.items())) or 'all'}"
        return self.cache.with_cache(key, fetch, CACHE_TTL_SPOTS)

    def get_spot(self, spot_id: int, use_cache: bool = True) -> Dict[str, Any]:
        def fetch():
            return self._request("GET", f"/spots/{spot_id}")["spot"]

        if not use_cache:
            return fetch()
        return self.cache.with_cache(f"spot_{spot_id}", fetch, CACHE_TTL_SPOTS)

    def create_spot(self, spot_data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a spot (admin)."""
        data = self._request("POST", "/spots", json=spot_data)
        self._invalidate_spots()
        return data

    def update_spot(self, spot_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("PUT", f"/spots/{spot_id}", json=updates)
        self._invalidate_spots(spot_id)
        return data

    def delete_spot(self, spot_id: int) -> Dict[str, Any]:
        """Soft delete a spot (admin)."""
        data = self._request("DELETE", f"/spots/{spot_id}")
        self._invalidate_spots(spot_id)
        return data

    def batch_create_spots(self, spots: List[Dict[str, Any]],
                           on_progress: Optional[Callable[[float, int, int], None]] = None) -> Dict[str, list]:
        """Create spots one by one, collecting failures instead of stopping."""
        results: Dict[str, list] = {"success": [], "failed": []}
        total = len(spots)

        for i, spot in enumerate(spots, start=1):
            try:
                results["success"].append(self.create_spot(spot))
            except APIError as e:
                results["failed"].append({"spot": spot, "error": e.message})

            if on_progress:
                on_progress(i / total * 100, i, total)

        return results

    # ----- categories -----

    def get_categories(self, use_cache: bool = True) -> List[Dict[str, Any]]:
        def fetch():
            return self._request("GET", "/categories")["categories"]

        if not use_cache:
            return fetch()
        return self.cache.with_cache("categories", fetch, CACHE_TTL_CATEGORIES)

    # ----- favorites -----

    def get_favorites(self) -> List[int]:
        return self._request("GET", "/favorites")["spotIds"]

    def add_favorite(self, spot_id: int) -> Dict[str, Any]:
        data = self._request("POST", f"/favorites/{spot_id}")
        self._invalidate_spots(spot_id)
        return data

    def remove_favorite(self, spot_id: int) -> Dict[str, Any]:
        data = self._request("DELETE", f"/favorites/{spot_id}")
        self._invalidate_spots(spot_id)
        return data

    # ----- admin -----

    def get_users(self, use_cache: bool = True) -> List[Dict[str, Any]]:
        def fetch():
            return self._request("GET", "/users")["users"]

        if not use_cache:
            return fetch()
        return self.cache.with_cache("users", fetch, CACHE_TTL_USERS)

    def update_user_role(self, user_id: int, role: str) -> Dict[str, Any]:
        data = self._request("PUT", f"/users/{user_id}/role", json={"role": role})
        self.cache.remove("users")
        return data

    def get_activity_logs(self, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        return self._request("GET", "/logs", params={"limit": limit, "offset": offset})["logs"]

    # ----- geocoding -----

    def geocode(self, address: str) -> Dict[str, Any]:
        return self._request("GET", "/geocode", params={"address": address})

    def reverse_geocode(self, lat: float, lng: float) -> Dict[str, Any]:
        return self._request("GET", "/geocode/reverse", params={"lat": lat, "lng": lng})

    # ----- health -----

    def get_health(self) -> Dict[str, Any]:
        """Get API health status."""
        return self._request("GET", "/health")

