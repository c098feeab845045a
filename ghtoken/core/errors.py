"""
Error taxonomy for the token issuing flow.

Library code raises these; only the command-line entrypoints translate them
into process exit codes.
"""

from __future__ import annotations

from typing import Optional


class GitHubTokenError(Exception):
    """Base class for every failure that aborts an invocation."""

    exit_code = 1


class ConfigError(GitHubTokenError):
    """Raised when the app identity or the configuration file is unusable."""

    exit_code = 2


class SigningError(GitHubTokenError):
    """Raised when the private key cannot be used to sign the app JWT."""

    exit_code = 3


class FetchError(GitHubTokenError):
    """Raised when the installation token exchange fails."""

    exit_code = 4

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class CacheIOError(GitHubTokenError):
    """Raised when a cache slot cannot be read or written."""

    exit_code = 5


class CacheCorruptionError(GitHubTokenError):
    """Raised when a cache slot holds content that cannot be interpreted."""

    exit_code = 6


__all__ = [
    "CacheCorruptionError",
    "CacheIOError",
    "ConfigError",
    "FetchError",
    "GitHubTokenError",
    "SigningError",
]
