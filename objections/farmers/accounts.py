"""
Farmer accounts: registration, login and password reset.

Password reset flow:
1. request_password_reset(national_id, phone) -> new request, code sent out of band
2. verify_code(national_id, code) -> reset_token
3. reset_password(national_id, reset_token, new_password)

Only one live reset request exists per farmer; a new request replaces the old
one and a successful reset deletes it.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from database.connection import Storage
from database.crud import (
    create_farmer,
    delete_password_resets,
    get_farmer_by_national_id,
    get_farmer_by_national_id_and_phone,
    get_reset_by_code,
    get_reset_by_token,
    replace_password_reset,
    update_farmer_password,
)
from database.models import Farmer, PasswordReset
from objections.credentials import (
    RESET_WINDOW_HOURS,
    generate_reset_token,
    generate_verification_code,
    get_reset_expiration,
    hash_password,
    is_expired,
    verify_password,
)
from objections.errors import AuthenticationFailed, Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

CodeSender = Callable[[Farmer, str], None]


def log_verification_code(farmer: Farmer, code: str) -> None:
    """Development code sender: writes the code to the log."""
    logger.info(f"Verification code for {farmer.national_id}: {code}")


def _require(fields: dict) -> dict:
    cleaned = {}
    for name, value in fields.items():
        value = (value or "").strip()
        if not value:
            raise ValidationError(f"{name} is required")
        cleaned[name] = value
    return cleaned


class FarmerAccounts:
    """Farmer identity and credential operations."""

    def __init__(self, storage: Storage, bcrypt_rounds: int = 12,
                 reset_window_hours: int = RESET_WINDOW_HOURS,
                 code_sender: Optional[CodeSender] = None):
        self.storage = storage
        self.bcrypt_rounds = bcrypt_rounds
        self.reset_window_hours = reset_window_hours
        self.code_sender = code_sender or log_verification_code

    def register(self, first_name: str, last_name: str, phone: str,
                 national_id: str, password: str) -> Farmer:
        """
        Register a farmer.

        Raises:
            ValidationError: Missing field or unusable password
            Conflict: national_id already registered
        """
        data = _require({
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "national_id": national_id,
        })
        data["password_hash"] = hash_password(password, rounds=self.bcrypt_rounds)

        try:
            with self.storage.session() as db:
                if get_farmer_by_national_id(db, data["national_id"]) is not None:
                    raise Conflict("National ID already registered")
                farmer = create_farmer(db, data)
        except IntegrityError as e:
            raise Conflict("National ID already registered") from e

        logger.info(f"Registered farmer {farmer.id}")
        return farmer

    def authenticate(self, national_id: str, password: str) -> Farmer:
        """
        Check farmer credentials.

        Raises:
            AuthenticationFailed: Unknown national_id or wrong password
        """
        with self.storage.session() as db:
            farmer = get_farmer_by_national_id(db, (national_id or "").strip())

        if farmer is None or not verify_password(password, farmer.password_hash):
            raise AuthenticationFailed("Invalid credentials")
        return farmer

    def request_password_reset(self, national_id: str, phone: str) -> PasswordReset:
        """
        Start a password reset.

        Raises:
            NotFound: No farmer with this national_id and phone
            Conflict: A concurrent request for the same farmer won
        """
        data = _require({"national_id": national_id, "phone": phone})

        try:
            with self.storage.session() as db:
                farmer = get_farmer_by_national_id_and_phone(db, data["national_id"], data["phone"])
                if farmer is None:
                    raise NotFound("Farmer not found")

                reset = replace_password_reset(db, {
                    "farmer_id": farmer.id,
                    "national_id": farmer.national_id,
                    "reset_token": generate_reset_token(),
                    "verification_code": generate_verification_code(),
                    "expires_at": get_reset_expiration(self.reset_window_hours),
                })
        except IntegrityError as e:
            raise Conflict("Password reset already in progress, try again") from e

        self.code_sender(farmer, reset.verification_code)
        logger.info(f"Password reset requested for farmer {farmer.id}")
        return reset

    def verify_code(self, national_id: str, verification_code: str) -> str:
        """
        Exchange a verification code for the reset token.

        Raises:
            ValidationError: No live request matches
        """
        with self.storage.session() as db:
            reset = get_reset_by_code(
                db, (national_id or "").strip(), (verification_code or "").strip()
            )
        if reset is None or is_expired(reset.expires_at):
            raise ValidationError("Invalid or expired code")
        return reset.reset_token

    def reset_password(self, national_id: str, reset_token: str, password: str) -> None:
        """
        Set a new password using a live reset token.

        Raises:
            ValidationError: No live request matches, or unusable password
        """
        password_hash = hash_password(password, rounds=self.bcrypt_rounds)

        with self.storage.session() as db:
            reset = get_reset_by_token(
                db, (national_id or "").strip(), (reset_token or "").strip()
            )
            if reset is None or is_expired(reset.expires_at):
                raise ValidationError("Invalid or expired token")
            update_farmer_password(db, reset.farmer_id, password_hash)
            delete_password_resets(db, reset.farmer_id)
            farmer_id = reset.farmer_id

        logger.info(f"Password reset completed for farmer {farmer_id}")
