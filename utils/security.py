"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT, one secret per token kind
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import VerificationError, InvalidHashError

from utils.errors import UnauthorizedError

ACCESS = "access"
REFRESH = "refresh"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token provided"


class TokenExpiredError(UnauthorizedError):
    default_message = "Token has expired"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands timestamps back naive; treat those as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


class PasswordHasher:
    """Salted one-way password hashing with a configurable argon2 cost."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536):
        self._ph = Argon2Hasher(time_cost=time_cost, memory_cost=memory_cost)

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Fails closed: a mismatch or an unreadable digest is just False."""
        if not password_hash:
            return False
        try:
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False


class TokenIssuer:
    """
    Issues and verifies access and refresh JWTs.

    Each kind has its own secret and lifetime. Refresh tokens are persisted
    by the caller with expires_at = issued_at + refresh_ttl, which is the
    same instant as the signed exp claim.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
    ):
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenIssuer":
        return cls(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=config["JWT_ACCESS_EXPIRES"],
            refresh_ttl=config["JWT_REFRESH_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def _encode(self, kind: str, claims: Dict[str, Any], issued_at: datetime, ttl: timedelta) -> str:
        payload = {
            **claims,
            "type": kind,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)

    def issue_access_token(self, user_id: str, email: str, role: str,
                           issued_at: Optional[datetime] = None) -> str:
        claims = {"sub": str(user_id), "email": email, "role": role}
        return self._encode(ACCESS, claims, issued_at or utcnow(), self.access_ttl)

    def issue_refresh_token(self, user_id: str, issued_at: Optional[datetime] = None) -> str:
        return self._encode(REFRESH, {"sub": str(user_id)}, issued_at or utcnow(), self.refresh_ttl)

    def refresh_expiry(self, issued_at: datetime) -> datetime:
        # second precision, matching the exp claim
        return issued_at.replace(microsecond=0) + self.refresh_ttl

    def verify(self, token: str, kind: str = ACCESS) -> Dict[str, Any]:
        """
        Decode and validate a JWT of the given kind.
        Raises TokenExpiredError or InvalidTokenError.
        """
        if kind not in self._secrets:
            raise ValueError(f"unknown token kind: {kind}")
        try:
            decoded = jwt.decode(token, self._secrets[kind], algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError:
            raise InvalidTokenError()

        if decoded.get("type") != kind or not decoded.get("sub"):
            raise InvalidTokenError()
        return decoded
