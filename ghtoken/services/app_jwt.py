"""
GitHub App JWT construction.

See https://docs.github.com/en/apps/creating-github-apps/authenticating-with-a-github-app/generating-a-json-web-token-jwt-for-a-github-app
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ghtoken.core.errors import SigningError
from ghtoken.models.token import AppIdentity

# Backdated to absorb clock drift between us and GitHub.
CLOCK_SKEW = timedelta(seconds=60)
# GitHub rejects app JWTs living longer than ten minutes.
JWT_LIFETIME = timedelta(minutes=9)


def load_private_key(pem: str) -> rsa.RSAPrivateKey:
    """Parse an unencrypted PEM private key, accepting RSA keys only."""
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"failed to parse app private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError("app private key must be an RSA key")
    return key


def create_app_jwt(identity: AppIdentity, *, now: Optional[datetime] = None) -> str:
    """Return an RS256 JWT asserting the app identity."""
    issued_at = (now or datetime.now(timezone.utc)) - CLOCK_SKEW
    expires_at = issued_at + JWT_LIFETIME
    claims = {
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
        "iss": str(identity.app_id),
    }
    private_key = load_private_key(identity.private_key)
    try:
        return jwt.encode(claims, private_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"failed to sign app JWT: {exc}") from exc


__all__ = ["CLOCK_SKEW", "JWT_LIFETIME", "create_app_jwt", "load_private_key"]
