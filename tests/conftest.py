"""
Shared pytest fixtures.

The Vercel API is faked with httpx.MockTransport and the database is an
in-memory SQLite shared across threads, so nothing here touches the network
or the filesystem.
"""

import os
import uuid
from datetime import datetime, timedelta
from typing import Any, List, Optional

# Set configuration BEFORE any keygate imports so Settings validates cleanly
os.environ.setdefault("ENCRYPTION_KEY", "YWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWE=")
os.environ.setdefault("SQLITE_DB_PATH", ":memory:")
os.environ.setdefault("AI_GATEWAY_MANAGED_KEYS_ENABLED", "true")

import httpx
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from keygate import models  # noqa: F401
from keygate.ai_gateway.client import VercelClient
from keygate.ai_gateway.provisioner import CredentialProvisioner
from keygate.ai_gateway.service import ConsentService
from keygate.ai_gateway.teams import TeamResolver
from keygate.auth import crud_user
from keygate.auth.models import VERCEL_PROVIDER_ID, Account, AuthSession, User
from keygate.auth.schemas import AccountCreate, UserCreate
from keygate.integrations.codec import SecureConfigCodec

VERCEL_ACCESS_TOKEN = "test_vercel_access_token_not_real"


class FakeVercelApi:
    """
    In-process stand-in for api.vercel.com.

    Each endpoint answers with the (status, body) pair configured on the
    instance; set a value to an exception to simulate a transport failure.
    """

    def __init__(self):
        self.teams: Any = (200, {"teams": [{"id": "team_1", "limited": False}]})
        self.userinfo: Any = (200, {"sub": "user_sub_1", "email": "dev@example.com"})
        self.create_key: Any = (
            200,
            {"apiKeyString": "ak_test_not_real", "apiKey": {"id": "key_1"}},
        )
        self.delete_key: Any = (200, {})
        self.requests: List[httpx.Request] = []

    def calls(self, method: str, path_prefix: str) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and r.url.path.startswith(path_prefix)
        ]

    def _respond(self, request: httpx.Request, configured: Any) -> httpx.Response:
        if isinstance(configured, Exception):
            raise configured
        status, body = configured
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path == "/v2/teams":
            return self._respond(request, self.teams)
        if request.method == "GET" and path == "/login/oauth/userinfo":
            return self._respond(request, self.userinfo)
        if request.method == "POST" and path == "/v1/api-keys":
            return self._respond(request, self.create_key)
        if request.method == "DELETE" and path.startswith("/v1/api-keys/"):
            return self._respond(request, self.delete_key)
        return httpx.Response(404, json={"error": {"code": "not_found"}})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _make_user(session: Session, *, is_anonymous: bool = False, email: Optional[str] = None) -> User:
    return crud_user.user.create(
        session, obj_in=UserCreate(is_anonymous=is_anonymous, email=email)
    )


@pytest.fixture
def user(session) -> User:
    return _make_user(session, email="dev@example.com")


@pytest.fixture
def make_user(session):
    def factory(**kwargs) -> User:
        return _make_user(session, **kwargs)

    return factory


@pytest.fixture
def vercel_account(session, user) -> Account:
    return crud_user.account.create(
        session,
        obj_in=AccountCreate(
            user_id=user.id,
            provider_id=VERCEL_PROVIDER_ID,
            account_id="user_sub_1",
            access_token=VERCEL_ACCESS_TOKEN,
        ),
    )


@pytest.fixture
def auth_token(session, user) -> str:
    token = f"session-{uuid.uuid4()}"
    session.add(
        AuthSession(
            token=token,
            user_id=user.id,
            expires_at=datetime.utcnow() + timedelta(hours=1),
        )
    )
    session.commit()
    return token


@pytest.fixture
def fake_vercel() -> FakeVercelApi:
    return FakeVercelApi()


@pytest.fixture
def vercel_client(fake_vercel) -> VercelClient:
    return VercelClient(
        base_url="https://api.vercel.test",
        timeout=httpx.Timeout(2.0),
        transport=httpx.MockTransport(fake_vercel.handle),
    )


@pytest.fixture
def codec() -> SecureConfigCodec:
    return SecureConfigCodec()


@pytest.fixture
def consent_service(vercel_client, codec) -> ConsentService:
    return ConsentService(
        managed_keys_enabled=True,
        team_resolver=TeamResolver(vercel_client),
        provisioner=CredentialProvisioner(vercel_client),
        codec=codec,
    )
