"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema created per test
- Users (reviewer, client owner, unrelated client) with JWT cookies
- HTTPX AsyncClient per user with the CSRF header
- A factory for analysis requests already moved to a given status
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Generator

# Must be set before the app (and its settings / limiter) are imported
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["PAYMENT_TEST_MODE"] = "False"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pattern_analysis.core.deps import COOKIE_NAME, get_db
from pattern_analysis.core.security import create_session_token
from pattern_analysis.db.base import Base
from pattern_analysis.db.enums import (
    AnalysisFor,
    LifecycleEvent,
    PriorityDomain,
    RequestStatus,
    Role,
)
from pattern_analysis.db.models import AnalysisRequest, User
from pattern_analysis.main import app
from pattern_analysis.schemas.analysis_request import AnalysisRequestCreate
from pattern_analysis.services import analysis_request_service, request_status_service


# =============================================================================
# Database Fixtures
# =============================================================================

test_engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    App code commits freely; isolation comes from dropping every table
    afterwards.
    """
    Base.metadata.create_all(test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(test_engine)


def _make_user(db: Session, role: Role, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{name}-{uuid.uuid4().hex[:8]}@test.com",
        display_name=name.title(),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def reviewer(db: Session) -> User:
    return _make_user(db, Role.REVIEWER, "reviewer")


@pytest.fixture(scope="function")
def owner(db: Session) -> User:
    """Client who owns the requests created by request_factory."""
    return _make_user(db, Role.CLIENT, "owner")


@pytest.fixture(scope="function")
def other_client(db: Session) -> User:
    return _make_user(db, Role.CLIENT, "stranger")


# =============================================================================
# Request Fixtures
# =============================================================================

def intake_payload(**overrides) -> dict:
    payload = {
        "analysis_for": AnalysisFor.MYSELF.value,
        "priority_domain": PriorityDomain.RELATIONSHIPS.value,
        "complaint_1": "Sinto que não sou ouvida",
        "complaint_2": "Evito conflitos",
        "had_surgery": False,
        "had_trauma": True,
        "trauma_details": "Acidente de carro",
        "used_device": False,
        "front_body_photo": "uploads/front.jpg",
        "back_body_photo": "uploads/back.jpg",
        "serious_face_photo": "uploads/serious.jpg",
        "smiling_face_photo": "uploads/smiling.jpg",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def intake_data() -> dict:
    """JSON body for POST /analysis-requests."""
    return intake_payload()


_EVENTS_TO_REACH = {
    RequestStatus.AWAITING_PAYMENT: [],
    RequestStatus.AWAITING_REVIEW: [LifecycleEvent.CONFIRM_PAYMENT],
    RequestStatus.IN_REVIEW: [LifecycleEvent.CONFIRM_PAYMENT, LifecycleEvent.START_REVIEW],
    RequestStatus.CANCELLED: [LifecycleEvent.CANCEL],
}


@pytest.fixture(scope="function")
def request_factory(db: Session, owner: User, reviewer: User) -> Callable[..., AnalysisRequest]:
    """Create a request for `owner` and walk it to `status`."""

    def factory(
        status: RequestStatus = RequestStatus.AWAITING_PAYMENT,
        **intake_overrides,
    ) -> AnalysisRequest:
        data = AnalysisRequestCreate(**intake_payload(**intake_overrides))
        request = analysis_request_service.create_request(db, owner.id, data)
        for event in _EVENTS_TO_REACH[status]:
            request = request_status_service.transition_request_status(
                db, request.id, event, reviewer.id
            )
        return request

    return factory


# =============================================================================
# Auth / Client Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str
    cookie_name: str = COOKIE_NAME


def _auth_for(user: User) -> TestAuth:
    token = create_session_token(
        user_id=user.id,
        role=user.role,
        token_version=user.token_version,
    )
    return TestAuth(user=user, token=token)


def _override_db(db: Session) -> None:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db


def _client(auth: TestAuth | None = None) -> AsyncClient:
    kwargs = {}
    if auth:
        kwargs["cookies"] = {auth.cookie_name: auth.token}
        kwargs["headers"] = {"X-Requested-With": "XMLHttpRequest"}  # CSRF header
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", **kwargs)


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client (webhooks, health)."""
    _override_db(db)
    async with _client() as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def reviewer_client(db: Session, reviewer: User) -> AsyncGenerator[AsyncClient, None]:
    _override_db(db)
    async with _client(_auth_for(reviewer)) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def owner_client(db: Session, owner: User) -> AsyncGenerator[AsyncClient, None]:
    _override_db(db)
    async with _client(_auth_for(owner)) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def stranger_client(db: Session, other_client: User) -> AsyncGenerator[AsyncClient, None]:
    _override_db(db)
    async with _client(_auth_for(other_client)) as c:
        yield c
    app.dependency_overrides.clear()
