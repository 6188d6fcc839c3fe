"""
CRUD operations for farmers and password resets
"""

from sqlalchemy.orm import Session
from database.models import Farmer, PasswordReset
from typing import Optional


def create_farmer(db: Session, farmer_data: dict) -> Farmer:
    """Create new farmer (password must already be hashed)."""
    farmer = Farmer(**farmer_data)
    db.add(farmer)
    db.flush()
    return farmer


def get_farmer_by_id(db: Session, farmer_id: int) -> Optional[Farmer]:
    """Query farmer by primary key."""
    return db.query(Farmer).filter(Farmer.id == farmer_id).first()


def get_farmer_by_national_id(db: Session, national_id: str) -> Optional[Farmer]:
    """Query farmer by national ID."""
    return db.query(Farmer).filter(Farmer.national_id == national_id).first()


def get_farmer_by_national_id_and_phone(db: Session, national_id: str, phone: str) -> Optional[Farmer]:
    """Query farmer by national ID and phone (forgot-password lookup)."""
    return db.query(Farmer)\
        .filter(Farmer.national_id == national_id, Farmer.phone == phone)\
        .first()


def update_farmer_password(db: Session, farmer_id: int, password_hash: str) -> None:
    """Replace a farmer's password hash."""
    db.query(Farmer)\
        .filter(Farmer.id == farmer_id)\
        .update({Farmer.password_hash: password_hash}, synchronize_session=False)


def replace_password_reset(db: Session, reset_data: dict) -> PasswordReset:
    """Delete any reset request for the farmer and store a new one."""
    delete_password_resets(db, reset_data["farmer_id"])
    reset = PasswordReset(**reset_data)
    db.add(reset)
    db.flush()
    return reset


def delete_password_resets(db: Session, farmer_id: int) -> int:
    """Delete all reset requests for a farmer."""
    deleted = db.query(PasswordReset)\
        .filter(PasswordReset.farmer_id == farmer_id)\
        .delete(synchronize_session=False)
    db.flush()
    return deleted


def get_reset_by_code(db: Session, national_id: str, verification_code: str) -> Optional[PasswordReset]:
    """Find a reset request by verification code (expired or not)."""
    return db.query(PasswordReset)\
        .filter(
            PasswordReset.national_id == national_id,
            PasswordReset.verification_code == verification_code,
        )\
        .first()


def get_reset_by_token(db: Session, national_id: str, reset_token: str) -> Optional[PasswordReset]:
    """Find a reset request by reset token (expired or not)."""
    return db.query(PasswordReset)\
        .filter(
            PasswordReset.national_id == national_id,
            PasswordReset.reset_token == reset_token,
        )\
        .first()
