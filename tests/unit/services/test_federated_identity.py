"""
Unit tests for federated identity verification.
"""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from workforce_auth.core.config import settings
from workforce_auth.exceptions import InvalidCredentialsError
from workforce_auth.services.federated_identity import (
    FederatedIdentityVerifier,
    extract_identity,
)


def _token(secret=None, expires_in=timedelta(minutes=5), **claims):
    payload = {
        "sub": "gh-1001",
        "email": "bob@acme.io",
        "aud": "authenticated",
        "exp": datetime.now(UTC) + expires_in,
        "app_metadata": {"provider": "github"},
        "user_metadata": {"user_name": "bobdev"},
    }
    payload.update(claims)
    return jwt.encode(payload, secret or settings.federated_jwt_secret, algorithm="HS256")


class TestVerify:
    """Test FederatedIdentityVerifier.verify."""

    def test_valid_token(self):
        identity = FederatedIdentityVerifier().verify(_token())

        assert identity.provider == "github"
        assert identity.subject == "gh-1001"
        assert identity.email == "bob@acme.io"
        assert identity.provider_username == "bobdev"

    @pytest.mark.parametrize(
        "token_kwargs",
        [
            {"secret": "another-secret-that-is-long-enough-000"},
            {"expires_in": timedelta(seconds=-30)},
            {"aud": "someone-else"},
        ],
    )
    def test_rejected_tokens(self, token_kwargs):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            FederatedIdentityVerifier().verify(_token(**token_kwargs))
        assert exc_info.value.reason == "provider_error"

    def test_garbage_token(self):
        with pytest.raises(InvalidCredentialsError):
            FederatedIdentityVerifier().verify("not-a-jwt")


class TestExtractIdentity:
    """Test claim extraction."""

    def test_missing_email(self):
        with pytest.raises(InvalidCredentialsError):
            extract_identity({"sub": "gh-1"})

    def test_default_provider_and_no_username(self):
        identity = extract_identity({"sub": "gh-1", "email": "a@acme.io"})

        assert identity.provider == settings.federated_default_provider
        assert identity.provider_username is None

    def test_username_from_top_level_claim(self):
        identity = extract_identity(
            {"sub": "gh-1", "email": "a@acme.io", "preferred_username": "alice"}
        )

        assert identity.provider_username == "alice"
