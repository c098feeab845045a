"""
Reuse-or-refresh decision for the cached installation token.

A cached token is reused only when it exists, was obtained with the current
private key, carries a readable expiry that lies beyond the refresh margin,
and the caller did not ask for a forced refresh.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from ghtoken.core.errors import CacheCorruptionError
from ghtoken.models.token import CacheRecord

REFRESH_MARGIN = timedelta(minutes=5)
ENCRYPTED_MARKER = "+fernet"

REASON_MISSING_TOKEN = "missing-token"
REASON_MISSING_EXPIRY = "missing-expiry"
REASON_EXPIRING = "expiring"
REASON_CREDENTIALS_CHANGED = "credentials-changed"
REASON_FORCED = "forced"


@dataclass(frozen=True)
class FreshnessDecision:
    refresh: bool
    reasons: Tuple[str, ...] = ()


def credential_fingerprint(private_key: str, *, encrypted: bool = False) -> str:
    """Hex SHA-256 of the key text; detects key rotation without storing the key.

    Caches holding an encrypted token carry a marker suffix, so switching the
    cache secret on or off looks like a credential change and forces a refresh.
    """
    digest = hashlib.sha256(private_key.encode("utf-8")).hexdigest()
    return digest + ENCRYPTED_MARKER if encrypted else digest


def format_expiry(expires_at: datetime) -> str:
    return expires_at.astimezone(timezone.utc).isoformat()


def parse_expiry(value: str) -> datetime:
    """Parse a cached ISO-8601 expiry; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise CacheCorruptionError(
            f"cached token expiry {value!r} is not a valid timestamp"
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expiring(
    expires_at: datetime,
    *,
    now: Optional[datetime] = None,
    margin: timedelta = REFRESH_MARGIN,
) -> bool:
    now = now or datetime.now(timezone.utc)
    return now + margin > expires_at


def decide(
    record: CacheRecord,
    *,
    fingerprint: str,
    force_refresh: bool = False,
    now: Optional[datetime] = None,
) -> FreshnessDecision:
    """Decide whether the cached token can be reused.

    The expiry slot is parsed whenever a cached token exists, so a corrupted
    expiry raises ``CacheCorruptionError`` even if another rule would refresh
    anyway. Without a cached token the expiry slot is not consulted.
    """
    reasons: List[str] = []
    if not record.token:
        reasons.append(REASON_MISSING_TOKEN)
    elif not record.expires_at:
        reasons.append(REASON_MISSING_EXPIRY)
    elif is_expiring(parse_expiry(record.expires_at), now=now):
        reasons.append(REASON_EXPIRING)
    if record.fingerprint != fingerprint:
        reasons.append(REASON_CREDENTIALS_CHANGED)
    if force_refresh:
        reasons.append(REASON_FORCED)
    return FreshnessDecision(refresh=bool(reasons), reasons=tuple(reasons))


__all__ = [
    "ENCRYPTED_MARKER",
    "FreshnessDecision",
    "REFRESH_MARGIN",
    "credential_fingerprint",
    "decide",
    "format_expiry",
    "is_expiring",
    "parse_expiry",
]
