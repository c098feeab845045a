"""
Domain models for GitHub App identities and cached installation tokens.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AppIdentity(BaseModel):
    """Credentials of one GitHub App installation, fixed for an invocation."""

    model_config = ConfigDict(frozen=True)

    app_id: int = Field(..., gt=0)
    installation_id: int = Field(..., gt=0)
    private_key: str = Field(..., min_length=1, repr=False)


class AccessToken(BaseModel):
    """Installation access token as returned by the GitHub API."""

    token: str = Field(..., min_length=1, repr=False)
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _normalize_expiry(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class CacheRecord(BaseModel):
    """Raw contents of the cache slots; an empty string means absent."""

    token: str = Field("", repr=False)
    expires_at: str = ""
    fingerprint: str = ""


__all__ = ["AccessToken", "AppIdentity", "CacheRecord"]
