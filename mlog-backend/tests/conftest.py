# File: tests/conftest.py

"""
Shared fixtures: an in-memory SQLite database per test, a service wired
to it, and a TestClient over a freshly built application.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.security import BcryptPasswordHasher, JwtTokenIssuer
from app.db.init_db import init_db
from app.db.session import build_engine, build_session_factory
from app.main import create_application
from app.repositories.user_repo import SqlAlchemyUserRepository
from app.services.auth_service import AuthService

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def hasher():
    # Minimum work factor keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def token_issuer():
    return JwtTokenIssuer(TEST_SECRET)


@pytest.fixture
def repo(db):
    return SqlAlchemyUserRepository(db)


@pytest.fixture
def service(repo, hasher, token_issuer):
    return AuthService(repo, hasher, token_issuer)


@pytest.fixture
def app():
    settings = Settings(
        database_url="sqlite://",
        secret_key=TEST_SECRET,
        bcrypt_rounds=4,
    )
    application = create_application(settings)
    init_db(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)
