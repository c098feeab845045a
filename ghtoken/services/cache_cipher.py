"""Symmetric encryption for the cached token slot."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from ghtoken.core.errors import CacheCorruptionError


class CacheCipher:
    """Encrypt and decrypt the cached token with a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Cache encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a cached token; a foreign or damaged value is cache corruption."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise CacheCorruptionError(
                "cached token could not be decrypted; was the cache secret changed?"
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["CacheCipher"]
