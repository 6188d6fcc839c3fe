"""
Password hashing and password-reset secrets.

Reset requests carry two secrets:
- reset_token: 64 hex chars, returned to the client that started the reset
- verification_code: 6 digits, delivered out of band (SMS, or the log in dev)
"""

import secrets
import bcrypt
from datetime import datetime, timedelta
from typing import Optional

from database.models import utcnow
from objections.errors import ValidationError

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72
RESET_WINDOW_HOURS = 2


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password with bcrypt.

    Raises:
        ValidationError: If password is empty or longer than 72 bytes
    """
    if not password:
        raise ValidationError("Password is required")
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password or not password_hash:
        return False
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def generate_reset_token() -> str:
    """32 random bytes as hex."""
    return secrets.token_hex(32)


def generate_verification_code() -> str:
    """Random 6-digit code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def get_reset_expiration(hours: int = RESET_WINDOW_HOURS, now: Optional[datetime] = None) -> datetime:
    """
    Calculate reset request expiration time.

    Args:
        hours: Hours until expiration (default: 2)
        now: Reference time (default: current UTC time)

    Returns:
        Expiration datetime
    """
    return (now or utcnow()) + timedelta(hours=hours)


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """True once expires_at has been reached."""
    return (now or utcnow()) >= expires_at
