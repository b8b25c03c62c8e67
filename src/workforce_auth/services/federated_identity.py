"""
Federated identity verification.

The external identity provider (OAuth sign-in, e.g. GitHub through a hosted
auth service) issues a signed access token after the user signs in. This
module verifies that token and extracts the identity claims the
authenticator needs: provider, subject, email and provider username.
"""

import logging
from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from workforce_auth.core.config import settings
from workforce_auth.exceptions import InvalidCredentialsError
from workforce_auth.models.enums import FailureReason

logger = logging.getLogger(__name__)

# Metadata keys that may carry the provider login handle
_USERNAME_CLAIMS = ("user_name", "preferred_username", "login")


@dataclass(frozen=True)
class FederatedIdentity:
    """Identity asserted by the provider after signature verification."""

    provider: str
    subject: str
    email: str
    provider_username: str | None = None


def extract_identity(claims: dict[str, Any]) -> FederatedIdentity:
    """
    Build a FederatedIdentity from verified token claims.

    Args:
        claims: Decoded JWT claims

    Returns:
        FederatedIdentity

    Raises:
        InvalidCredentialsError: (reason provider_error) if subject or email is missing
    """
    subject = claims.get("sub")
    email = claims.get("email")
    if not subject or not email:
        raise InvalidCredentialsError(reason=FailureReason.PROVIDER_ERROR.value)

    app_metadata = claims.get("app_metadata") or {}
    user_metadata = claims.get("user_metadata") or {}
    provider = app_metadata.get("provider") or settings.federated_default_provider

    provider_username = None
    for key in _USERNAME_CLAIMS:
        value = user_metadata.get(key) or claims.get(key)
        if value:
            provider_username = str(value)
            break

    return FederatedIdentity(
        provider=str(provider),
        subject=str(subject),
        email=str(email),
        provider_username=provider_username,
    )


class FederatedIdentityVerifier:
    """Verifies identity provider tokens with the configured shared secret."""

    def __init__(
        self,
        secret: str | None = None,
        algorithms: list[str] | None = None,
        audience: str | None = None,
    ):
        self.secret = secret or settings.federated_jwt_secret
        self.algorithms = algorithms or settings.federated_jwt_algorithm_list
        self.audience = audience if audience is not None else settings.federated_jwt_audience

    def verify(self, token: str) -> FederatedIdentity:
        """
        Verify a provider token and extract the identity.

        Args:
            token: Provider-issued JWT

        Returns:
            FederatedIdentity

        Raises:
            InvalidCredentialsError: (reason provider_error) if the token is
                invalid, expired, or lacks identity claims
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.warning(f"Federated token rejected: {e}")
            raise InvalidCredentialsError(reason=FailureReason.PROVIDER_ERROR.value) from e

        return extract_identity(claims)
