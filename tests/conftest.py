import os

# Set testing environment before the application reads its settings
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")

from datetime import datetime
import pytest
from fastapi.testclient import TestClient

from medledger import models  # noqa: F401
from medledger.core.database import Base, SessionLocal, engine, get_redis
from medledger.core.security import create_access_token
from medledger.main import app
from medledger.services.funds_ledger import FundsLedger
from medledger.services.sequences import seed_sequences

PATIENT = "patient-p"
DOCTOR = "doctor-d"
OTHER_DOCTOR = "doctor-x"
STRANGER = "stranger-s"

SCHEDULED_AT = datetime(2026, 11, 2, 9, 30)

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_sequences(db)
    finally:
        db.close()
    get_redis().published.clear()
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def published():
    """Messages pushed to the notification channel during the test."""
    return get_redis().published

@pytest.fixture
def funded(db):
    """Give the patient 1000 units to spend on fees."""
    FundsLedger(db).credit(PATIENT, 1000)
    db.commit()
    return 1000

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def auth_headers():
    """Build bearer headers for a participant id."""
    def _headers(participant_id):
        token = create_access_token(participant_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
