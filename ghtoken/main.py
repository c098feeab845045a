"""
Command-line entrypoint: print a GitHub App installation access token.

Usage::

    github-token --app-id 1234 --app-installation-id 5678 \
        --app-private-key-path ~/keys/app.pem

The token is printed on stdout; logs and errors go to stderr. Each failure
kind maps to its own exit code (see ``ghtoken.core.errors``).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ghtoken import __version__
from ghtoken.clients import GitHubAppClient, TokenFileCache
from ghtoken.core.config import AppSettings, load_settings, resolve_config_file
from ghtoken.core.errors import GitHubTokenError
from ghtoken.core.logging import configure_logging
from ghtoken.models.token import AppIdentity
from ghtoken.services import CacheCipher, InstallationTokenService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED_ERROR = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-token",
        description="Get a GitHub token for a GitHub App installation.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file (default: ~/.github-token.yaml when present).",
    )
    parser.add_argument("--app-id", type=int, help="GitHub App ID.")
    parser.add_argument(
        "--app-installation-id", type=int, help="GitHub App installation ID."
    )
    parser.add_argument("--app-private-key", help="GitHub App private key (PEM).")
    parser.add_argument(
        "--app-private-key-path",
        type=Path,
        help="File holding the GitHub App private key.",
    )
    parser.add_argument(
        "--base-url",
        help="GitHub REST API root (default: https://api.github.com).",
    )
    parser.add_argument("--cache-dir", type=Path, help="Token cache directory.")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds allowed for the token request (default: 10).",
    )
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        default=None,
        help="Ignore the cached token and always fetch a new one.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Log the refresh decision and HTTP exchange to stderr.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "app_id": args.app_id,
        "installation_id": args.app_installation_id,
        "private_key": args.app_private_key,
        "private_key_path": args.app_private_key_path,
        "base_url": args.base_url,
        "cache_dir": args.cache_dir,
        "timeout": args.timeout,
        "force_refresh": args.force_refresh,
        "debug": args.debug,
    }


async def issue_token(settings: AppSettings, identity: AppIdentity) -> str:
    """Wire the cache, client and service from settings and fetch a token."""
    cipher = CacheCipher(secret=settings.cache_secret) if settings.cache_secret else None
    service = InstallationTokenService(
        cache=TokenFileCache(settings.cache_dir, cipher=cipher),
        github_client=GitHubAppClient(base_url=settings.base_url, timeout=settings.timeout),
    )
    return await service.get_token(identity, force_refresh=settings.force_refresh)


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config_file = resolve_config_file(args.config)
        if config_file is not None:
            print(f"Using config file: {config_file}", file=sys.stderr)
        settings = load_settings(config_file, **_overrides(args))
        configure_logging("DEBUG" if settings.debug else settings.log_level)
        identity = settings.identity()
        token = asyncio.run(issue_token(settings, identity))
    except GitHubTokenError as exc:
        logger.debug("Invocation failed", exc_info=True)
        print(f"github-token: {exc}", file=sys.stderr)
        return exc.exit_code
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("Unexpected failure", exc_info=True)
        print(f"github-token: unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR

    print(token)
    return EXIT_OK


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
