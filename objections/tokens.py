"""
Access tokens (HS256 JWT) for farmers and admins.

Claims:
- sub: farmer id as a string, or "admin"
- role: "farmer" or "admin"
- iat / exp: issue and expiry times
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from database.models import is_row_id
from objections.errors import AuthenticationFailed
from objections.roles import ROLE_ADMIN, ROLE_FARMER

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Claims:
    """Verified identity of a caller."""
    subject: str
    role: str

    @property
    def farmer_id(self) -> Optional[int]:
        if self.role != ROLE_FARMER:
            return None
        return int(self.subject)


class TokenService:
    """Signs and verifies access tokens with a shared secret."""

    def __init__(self, secret: str, ttl_minutes: int = 60):
        if not secret:
            raise ValueError("JWT secret not configured")
        self._secret = secret
        self.ttl = timedelta(minutes=ttl_minutes)

    def issue(self, subject, role: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(subject),
            "role": role,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def issue_for_farmer(self, farmer_id: int) -> str:
        return self.issue(farmer_id, ROLE_FARMER)

    def issue_for_admin(self) -> str:
        return self.issue(ROLE_ADMIN, ROLE_ADMIN)

    def verify(self, token: str) -> Claims:
        """
        Decode and verify a token.

        Raises:
            AuthenticationFailed: If the token is missing, malformed, expired
                or signed with another key
        """
        if not token:
            raise AuthenticationFailed("Missing token")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected token: {e}")
            raise AuthenticationFailed("Invalid or expired token") from e

        role = payload["role"]
        if role not in (ROLE_FARMER, ROLE_ADMIN):
            raise AuthenticationFailed("Unknown role")
        if role == ROLE_FARMER and not (str(payload["sub"]).isdecimal() and is_row_id(int(payload["sub"]))):
            raise AuthenticationFailed("Invalid subject")
        return Claims(subject=str(payload["sub"]), role=role)
