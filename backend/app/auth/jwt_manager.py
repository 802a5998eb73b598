import hashlib
import secrets
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.models import UserSession

TOKEN_TYPE = "access"


def _fingerprint(jti: str) -> str:
    return hashlib.sha256(jti.encode()).hexdigest()


@contextmanager
def _db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class JWTManager:
    """Issues HS256 bearer tokens, each backed by a revocable session row.

    The token itself only proves the signature and expiry; a request is
    authenticated when the session named by its ``jti`` is still live.
    """

    def __init__(self, secret_key: str, algorithm: str, ttl: timedelta):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = ttl

    def create_access_token(self, user_id: int, email: str, role: str,
                            ip_address: Optional[str] = None,
                            user_agent: Optional[str] = None) -> Tuple[str, str]:
        """Returns (token, jti)."""
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + self.ttl
        jti = secrets.token_urlsafe(32)

        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "jti": jti,
            "iat": issued_at,
            "exp": expires_at,
            "type": TOKEN_TYPE,
        }
        token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

        with _db() as db:
            db.add(UserSession(
                user_id=user_id,
                jti=jti,
                hashed_token=_fingerprint(jti),
                expires_at=expires_at,
                ip_address=ip_address,
                user_agent=user_agent[:512] if user_agent else None,
            ))
            db.commit()

        return token, jti

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        if claims.get("type") != TOKEN_TYPE or not claims.get("sub") or not claims.get("jti"):
            return None
        return claims

    def verify_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Claims of a well-signed token whose session is still live, else None."""
        claims = self.decode_token(token)
        if claims is None:
            return None

        with _db() as db:
            live = db.query(UserSession.id).filter(
                UserSession.hashed_token == _fingerprint(claims["jti"]),
                UserSession.is_revoked == False,
            ).first()

        return claims if live else None

    def revoke_token(self, jti: str) -> bool:
        with _db() as db:
            count = db.query(UserSession).filter(
                UserSession.hashed_token == _fingerprint(jti),
                UserSession.is_revoked == False,
            ).update({"is_revoked": True})
            db.commit()
        return count > 0

    def revoke_all_user_tokens(self, user_id: int) -> int:
        with _db() as db:
            count = db.query(UserSession).filter(
                UserSession.user_id == user_id,
                UserSession.is_revoked == False,
            ).update({"is_revoked": True})
            db.commit()
        return count

    def cleanup_expired_tokens(self) -> int:
        with _db() as db:
            count = db.query(UserSession).filter(
                UserSession.expires_at < datetime.now(timezone.utc)
            ).delete()
            db.commit()
        return count


jwt_manager = JWTManager(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    ttl=timedelta(hours=settings.jwt_expire_hours),
)
