"""Pytest configuration and fixtures."""

import base64
import json
import os
import time
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import MagicMock, patch

import jwt
import pytest
from fastapi.testclient import TestClient

TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests-0123456789"
TEST_JWK = json.dumps(
    {
        "kty": "oct",
        "alg": "HS256",
        "k": base64.urlsafe_b64encode(TEST_JWT_SECRET.encode()).rstrip(b"=").decode(),
    }
)

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SIGNING_KEY_JWK", TEST_JWK)

QUERY_METHODS = ("select", "eq", "gte", "ilike", "order", "limit", "insert", "upsert", "update")


def create_test_token(
    sub: str = "550e8400-e29b-41d4-a716-446655440000",
    email: str | None = "student@student.iqra.edu.pk",
    role: str | None = "authenticated",
    full_name: str | None = "Test Student",
    exp_offset: int = 3600,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """Create a Supabase-style test JWT.

    Args:
        sub: Subject (user ID).
        email: User email.
        role: User role.
        full_name: Name stored in user_metadata.
        exp_offset: Seconds from now for expiration (negative for expired).
        secret: Secret used to sign the token.

    Returns:
        str: Encoded JWT token.
    """
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": sub,
        "email": email,
        "role": role,
        "exp": now + exp_offset,
        "iat": now,
        "aud": "authenticated",
        "iss": "https://test-project.supabase.co/auth/v1",
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def make_query_builder(*results: Any) -> MagicMock:
    """Build a mock PostgREST query builder.

    Every filter/modifier returns the builder itself, and successive
    ``execute()`` calls return responses carrying ``results`` in order.
    """
    builder = MagicMock()
    for name in QUERY_METHODS:
        getattr(builder, name).return_value = builder
    builder.execute.side_effect = [MagicMock(data=data) for data in results]
    return builder


@pytest.fixture
def query_builder() -> Callable[..., MagicMock]:
    """Factory for mock query builders."""
    return make_query_builder


@pytest.fixture
def token_factory() -> Callable[..., str]:
    """Factory for signed test tokens."""
    return create_test_token


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    get_settings.cache_clear()


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client handed to the app at startup.

    The same mock is returned for per-request clients acting as the
    caller, so route tests can script one query builder.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with (
        patch("src.main.get_supabase_client", return_value=mock_client),
        patch("src.api.deps.create_user_client", return_value=mock_client),
    ):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        mock_supabase_client: Mocked Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
