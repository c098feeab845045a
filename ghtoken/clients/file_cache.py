"""
Filesystem cache for the last issued installation token.

Three plain-text slots live in one directory: the token, its expiry and the
fingerprint of the private key that obtained it. There is no locking, so
concurrent invocations sharing a directory may interleave; the last writer
wins.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ghtoken.core.config import DEFAULT_CACHE_DIR
from ghtoken.core.errors import CacheIOError
from ghtoken.models.token import AccessToken, CacheRecord
from ghtoken.services.cache_cipher import CacheCipher
from ghtoken.services.freshness import (
    ENCRYPTED_MARKER,
    credential_fingerprint,
    format_expiry,
)

logger = logging.getLogger(__name__)

TOKEN_FILE = "token.txt"
EXPIRY_FILE = "token-expiry.txt"
FINGERPRINT_FILE = "hash.txt"


class TokenFileCache:
    """Read and overwrite the cache slots."""

    def __init__(
        self,
        cache_dir: Union[str, Path] = DEFAULT_CACHE_DIR,
        *,
        cipher: Optional[CacheCipher] = None,
    ) -> None:
        self._dir = Path(cache_dir).expanduser()
        self._cipher = cipher

    def read(self) -> CacheRecord:
        """Load all slots; missing or empty slots come back as ``""``.

        The token is decrypted only when the stored fingerprint says it was
        written encrypted. Any other combination leaves the slot as is; its
        fingerprint then cannot match and the caller refreshes.
        """
        token = self._read_slot(TOKEN_FILE)
        fingerprint = self._read_slot(FINGERPRINT_FILE)
        if token and self._cipher is not None and fingerprint.endswith(ENCRYPTED_MARKER):
            token = self._cipher.decrypt(token)
        return CacheRecord(
            token=token,
            expires_at=self._read_slot(EXPIRY_FILE),
            fingerprint=fingerprint,
        )

    def fingerprint(self, private_key: str) -> str:
        """Fingerprint of ``private_key`` as this cache would store it."""
        return credential_fingerprint(private_key, encrypted=self._cipher is not None)

    def write_token(self, token: AccessToken) -> None:
        value = token.token
        if self._cipher is not None:
            value = self._cipher.encrypt(value)
        # Token first: a failed expiry write leaves the older, earlier expiry.
        self._write_slot(TOKEN_FILE, value)
        self._write_slot(EXPIRY_FILE, format_expiry(token.expires_at))

    def write_fingerprint(self, fingerprint: str) -> None:
        self._write_slot(FINGERPRINT_FILE, fingerprint)

    def _read_slot(self, name: str) -> str:
        path = self._dir / name
        try:
            return path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""
        except OSError as exc:
            raise CacheIOError(f"failed to read cache file {path}: {exc}") from exc

    def _write_slot(self, name: str, value: str) -> None:
        path = self._dir / name
        try:
            self._dir.mkdir(mode=0o755, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{name}.", suffix=".tmp")
        except OSError as exc:
            raise CacheIOError(f"failed to prepare cache file {path}: {exc}") from exc

        # mkstemp creates the file with 0600, which os.replace carries over.
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise CacheIOError(f"failed to write cache file {path}: {exc}") from exc
        logger.debug("Wrote cache slot %s", path)


__all__ = ["EXPIRY_FILE", "FINGERPRINT_FILE", "TOKEN_FILE", "TokenFileCache"]
