"""Expose constructed client wrappers."""

from .file_cache import TokenFileCache
from .github_app import GitHubAppClient

__all__ = [
    "GitHubAppClient",
    "TokenFileCache",
]
