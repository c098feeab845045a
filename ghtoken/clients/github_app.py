"""
GitHub App REST client.

Exchanges an app JWT for an installation access token.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

import httpx
from pydantic import ValidationError

from ghtoken.core.config import DEFAULT_BASE_URL
from ghtoken.core.errors import FetchError
from ghtoken.models.token import AccessToken

logger = logging.getLogger(__name__)


class GitHubAppClient:
    """Call the installation token endpoint, one request per call and no retries."""

    API_VERSION = "2022-11-28"
    USER_AGENT = "github-token"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = http_client

    def installation_token_url(self, installation_id: int) -> str:
        return f"{self._base_url}/app/installations/{installation_id}/access_tokens"

    async def create_installation_token(
        self, *, app_jwt: str, installation_id: int
    ) -> AccessToken:
        """
        Request a new installation access token.

        Format: https://docs.github.com/en/rest/apps/apps#create-an-installation-access-token-for-an-app
        """
        url = self.installation_token_url(installation_id)
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {app_jwt}",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": self.USER_AGENT,
        }
        logger.info("Requesting installation access token from %s", url)

        try:
            if self._http is not None:
                response = await self._http.post(url, headers=headers, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, headers=headers)
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"token request to {url} timed out after {self._timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"token request to {url} failed: {exc}") from exc

        if response.status_code != HTTPStatus.CREATED:
            raise FetchError(
                f"token request to {url} returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(
                "token response is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        try:
            token = AccessToken.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(
                "incomplete token payload returned from GitHub",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if token.expires_at <= datetime.now(timezone.utc):
            raise FetchError(
                f"GitHub returned a token that already expired at {token.expires_at.isoformat()}",
                status_code=response.status_code,
            )
        logger.debug("Received installation token expiring at %s", token.expires_at.isoformat())
        return token


__all__ = ["GitHubAppClient"]
