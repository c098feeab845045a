"""Service layer for token issuing."""

from .app_jwt import create_app_jwt
from .cache_cipher import CacheCipher
from .freshness import FreshnessDecision, credential_fingerprint, decide
from .installation_tokens import InstallationTokenService

__all__ = [
    "CacheCipher",
    "FreshnessDecision",
    "InstallationTokenService",
    "create_app_jwt",
    "credential_fingerprint",
    "decide",
]
