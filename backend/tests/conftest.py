from __future__ import annotations

import os

# Set test environment BEFORE importing sampatti modules.
# sampatti.db creates the engine at module level using get_settings().db_url,
# so we must override the env vars before any sampatti imports.
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-integration-tests-only")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-for-integration-tests")
# Cheap Argon2 parameters keep the suite fast
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from sampatti.db import get_session
from sampatti.dependencies import get_advisory_reporter
from sampatti.main import app as fastapi_app
from sampatti.models.holding import Asset, Document
from sampatti.models.nominee import AccessTier, Nominee, NomineeStatus
from sampatti.models.user import User
from sampatti.services.advisory import RecordingAdvisoryReporter
from sampatti.services.credentials import CredentialCodec
from sampatti.services.nominee_registry import NomineeRegistry
from sampatti.utils.crypto import SecretVerifier

TEST_PASSWORD = "correct-horse-battery"


# ── Database fixtures ─────────────────────────────────────────────────


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine for testing.

    Uses StaticPool so every connection shares the same in-memory database.
    Recreates tables per test for full isolation.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a fresh session per test."""
    with Session(engine) as session:
        yield session


# ── Service fixtures ──────────────────────────────────────────────────


@pytest.fixture(name="verifier")
def verifier_fixture() -> SecretVerifier:
    return SecretVerifier(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture(name="codec")
def codec_fixture() -> CredentialCodec:
    return CredentialCodec(
        access_secret=os.environ["JWT_SECRET"],
        refresh_secret=os.environ["JWT_REFRESH_SECRET"],
    )


@pytest.fixture(name="advisory")
def advisory_fixture() -> RecordingAdvisoryReporter:
    return RecordingAdvisoryReporter()


@pytest.fixture(name="registry")
def registry_fixture(verifier, advisory) -> NomineeRegistry:
    return NomineeRegistry(verifier=verifier, advisory=advisory)


# ── Data helpers ──────────────────────────────────────────────────────


def make_user(session: Session, verifier: SecretVerifier, email: str, name: str = "Owner") -> User:
    user = User(name=name, email=email, password_hash=verifier.hash(TEST_PASSWORD))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_nominee(
    session: Session,
    owner: User,
    email: str,
    access_level: AccessTier = AccessTier.LIMITED,
    status: NomineeStatus = NomineeStatus.PENDING,
) -> Nominee:
    nominee = Nominee(
        user_id=owner.id,
        name=email.split("@")[0].title(),
        email=email,
        access_level=access_level,
        status=status,
    )
    session.add(nominee)
    session.commit()
    session.refresh(nominee)
    return nominee


@pytest.fixture(name="owner")
def owner_fixture(session, verifier) -> User:
    return make_user(session, verifier, "owner@example.com", name="Asha")


@pytest.fixture(name="other_owner")
def other_owner_fixture(session, verifier) -> User:
    return make_user(session, verifier, "other@example.com", name="Ravi")


@pytest.fixture(name="holdings")
def holdings_fixture(session, owner):
    """Two assets and two documents for *owner*; only one document is flagged."""
    session.add(Asset(user_id=owner.id, asset_name="Savings", asset_type="bank"))
    session.add(Asset(user_id=owner.id, asset_name="Index fund", asset_type="mutual_fund"))
    shared = Document(user_id=owner.id, title="Will", accessible_to_nominees=True)
    private = Document(user_id=owner.id, title="Tax return")
    session.add(shared)
    session.add(private)
    session.commit()
    session.refresh(shared)
    session.refresh(private)
    return {"shared": shared, "private": private}


# ── HTTP client fixtures ──────────────────────────────────────────────


@pytest.fixture(name="client")
def client_fixture(session, advisory):
    """FastAPI TestClient with overridden DB session and a recording advisory reporter."""

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    fastapi_app.dependency_overrides[get_advisory_reporter] = lambda: advisory
    with TestClient(fastapi_app) as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(name="owner_headers")
def owner_headers_fixture(owner, codec) -> dict[str, str]:
    return {"Authorization": f"Bearer {codec.issue_owner_access_token(owner.id)}"}


@pytest.fixture(name="other_owner_headers")
def other_owner_headers_fixture(other_owner, codec) -> dict[str, str]:
    return {"Authorization": f"Bearer {codec.issue_owner_access_token(other_owner.id)}"}


def nominee_headers(codec: CredentialCodec, nominee: Nominee) -> dict[str, str]:
    token = codec.issue_nominee_token(nominee.id, nominee.user_id, nominee.access_level)
    return {"Authorization": f"Bearer {token}"}
