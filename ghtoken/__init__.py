"""Issue and cache GitHub App installation access tokens."""

__version__ = "0.1.0"
