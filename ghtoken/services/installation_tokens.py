"""
Issue installation access tokens, reusing the cached one while it is fresh.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from ghtoken.models.token import AppIdentity
from ghtoken.services.app_jwt import create_app_jwt
from ghtoken.services.freshness import decide

if TYPE_CHECKING:
    from ghtoken.clients.file_cache import TokenFileCache
    from ghtoken.clients.github_app import GitHubAppClient

logger = logging.getLogger(__name__)


def _short(fingerprint: str) -> str:
    return fingerprint[:12] if fingerprint else "<none>"


class InstallationTokenService:
    """Read the cache, decide, and refresh through GitHub when needed."""

    def __init__(
        self,
        *,
        cache: TokenFileCache,
        github_client: GitHubAppClient,
        signer: Callable[[AppIdentity], str] = create_app_jwt,
    ) -> None:
        self._cache = cache
        self._github = github_client
        self._sign = signer

    async def get_token(self, identity: AppIdentity, *, force_refresh: bool = False) -> str:
        """Return a usable installation token for ``identity``."""
        record = self._cache.read()
        fingerprint = self._cache.fingerprint(identity.private_key)
        if record.fingerprint != fingerprint:
            logger.debug(
                "Credential fingerprint changed: %s -> %s",
                _short(record.fingerprint),
                _short(fingerprint),
            )

        decision = decide(record, fingerprint=fingerprint, force_refresh=force_refresh)
        if not decision.refresh:
            logger.info("Using existing token")
            return record.token

        logger.debug("Refresh required: %s", ", ".join(decision.reasons))
        logger.info("Fetching new token")
        app_jwt = self._sign(identity)
        token = await self._github.create_installation_token(
            app_jwt=app_jwt, installation_id=identity.installation_id
        )

        self._cache.write_token(token)
        if fingerprint != record.fingerprint:
            self._cache.write_fingerprint(fingerprint)
        return token.token


__all__ = ["InstallationTokenService"]
