"""
SQLAlchemy models for the objection service
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Objection statuses
STATUS_PENDING = "pending"
STATUS_REVIEWED = "reviewed"
STATUS_RESOLVED = "resolved"

ACTIVE_STATUSES = (STATUS_PENDING, STATUS_REVIEWED)

_ACTIVE_STATUS_SQL = "status IN ('pending', 'reviewed')"

# Largest id a BIGINT / SQLite INTEGER column can hold
MAX_ROW_ID = 2 ** 63 - 1


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_row_id(value) -> bool:
    """True if value can be looked up as a primary key."""
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_ROW_ID


class Farmer(Base):
    """Registered farmer who can file objections"""
    __tablename__ = "farmers"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False, index=True)
    last_name = Column(String(100), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    national_id = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    objections = relationship("Objection", back_populates="farmer")
    password_resets = relationship("PasswordReset", back_populates="farmer")


class Objection(Base):
    """Farmer dispute about a transaction, triaged by admins"""
    __tablename__ = "objections"

    id = Column(Integer, primary_key=True)
    farmer_id = Column(Integer, ForeignKey("farmers.id"), nullable=False, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)  # OBJ-1234
    transaction_number = Column(String(100), nullable=False, index=True)
    status = Column(String(20), default=STATUS_PENDING, nullable=False, index=True)  # pending, reviewed, resolved

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False, index=True)

    farmer = relationship("Farmer", back_populates="objections")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'reviewed', 'resolved')",
            name="ck_objections_status",
        ),
        # One active objection per farmer, enforced by the database
        Index(
            "uq_objections_active_farmer",
            "farmer_id",
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_SQL),
            sqlite_where=text(_ACTIVE_STATUS_SQL),
        ),
    )


class PasswordReset(Base):
    """Pending password reset (one live request per farmer)"""
    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True)
    farmer_id = Column(Integer, ForeignKey("farmers.id"), unique=True, nullable=False, index=True)
    national_id = Column(String(50), nullable=False, index=True)  # Denormalized for lookups
    reset_token = Column(String(64), nullable=False)
    verification_code = Column(String(6), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    farmer = relationship("Farmer", back_populates="password_resets")
