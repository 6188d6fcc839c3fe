"""
Shared fixtures: in-memory SQLite storage, core components, HTTP client.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from database.bootstrap import create_schema
from database.connection import Storage
from database.models import Farmer, Objection, STATUS_PENDING
from objections.admin.queries import AdminQueryEngine
from objections.config import Settings
from objections.credentials import hash_password
from objections.farmers.accounts import FarmerAccounts
from objections.lifecycle import ObjectionLifecycle
from objections.service.api import create_app
from objections.tokens import TokenService

TEST_JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
TEST_ADMIN_USERNAME = "admin"
TEST_ADMIN_PASSWORD = "admin-pass"
TEST_BCRYPT_ROUNDS = 4  # bcrypt minimum, keeps tests fast

BASE_TIME = datetime(2025, 1, 1, 8, 0, 0)


@pytest.fixture
def storage():
    storage = Storage("sqlite://")
    create_schema(storage)
    yield storage
    storage.dispose()


@pytest.fixture
def lifecycle(storage):
    return ObjectionLifecycle(storage)


@pytest.fixture
def queries(storage):
    return AdminQueryEngine(storage)


@pytest.fixture
def sent_codes():
    """Verification codes captured instead of being logged."""
    return []


@pytest.fixture
def accounts(storage, sent_codes):
    return FarmerAccounts(
        storage,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        code_sender=lambda farmer, code: sent_codes.append((farmer.national_id, code)),
    )


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret=TEST_JWT_SECRET,
        admin_username=TEST_ADMIN_USERNAME,
        admin_password=TEST_ADMIN_PASSWORD,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
    )


@pytest.fixture
def tokens():
    return TokenService(TEST_JWT_SECRET)


@pytest.fixture
def client(settings, storage, sent_codes):
    app = create_app(
        settings,
        storage,
        code_sender=lambda farmer, code: sent_codes.append((farmer.national_id, code)),
    )
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers(tokens):
    return {"Authorization": f"Bearer {tokens.issue_for_admin()}"}


def farmer_headers(tokens, farmer_id):
    return {"Authorization": f"Bearer {tokens.issue_for_farmer(farmer_id)}"}


@pytest.fixture
def make_farmer(storage):
    """Insert a farmer directly; returns its id."""
    counter = {"n": 0}

    def _make_farmer(first_name="Abebe", last_name="Kebede", phone="+251911234567",
                     national_id=None, password="secret-pass"):
        counter["n"] += 1
        with storage.session() as db:
            farmer = Farmer(
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                national_id=national_id or f"NID-{counter['n']:04d}",
                password_hash=hash_password(password, rounds=TEST_BCRYPT_ROUNDS),
            )
            db.add(farmer)
            db.flush()
            return farmer.id

    return _make_farmer


@pytest.fixture
def make_objection(storage):
    """Insert an objection directly with controlled timestamps; returns its id."""
    counter = {"n": 0}

    def _make_objection(farmer_id, status=STATUS_PENDING, code=None, transaction_number=None,
                        minutes=None, updated_minutes=None):
        counter["n"] += 1
        n = counter["n"]
        created_at = BASE_TIME + timedelta(minutes=n if minutes is None else minutes)
        updated_at = created_at if updated_minutes is None else BASE_TIME + timedelta(minutes=updated_minutes)
        with storage.session() as db:
            objection = Objection(
                farmer_id=farmer_id,
                code=code or f"OBJ-{1000 + n}",
                transaction_number=transaction_number or f"TX-{n:05d}",
                status=status,
                created_at=created_at,
                updated_at=updated_at,
            )
            db.add(objection)
            db.flush()
            return objection.id

    return _make_objection
