"""Utility for verifying that the token configuration is intact.

It loads ``AppSettings`` from the provided ``.env`` file (plus the process
environment and the YAML config file) and builds the app identity, so a
missing app ID, installation ID or private key is reported before a pipeline
calls ``github-token``.

Example usage::

    python -m scripts.check_env check --env-file /etc/github-token/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from ghtoken.core.config import load_settings, resolve_config_file
from ghtoken.core.errors import ConfigError

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5


def _validate_settings(env_file: Path, config_file: Optional[Path]) -> None:
    """Ensure an app identity can be built from the supplied configuration."""
    settings = load_settings(resolve_config_file(config_file), env_file=env_file)
    identity = settings.identity()
    print(
        f"Configuration OK: app {identity.app_id}, "
        f"installation {identity.installation_id}, cache {settings.cache_dir}"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate github-token settings.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Validate that settings load and an app identity can be built.",
    )
    check_parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the working directory).",
    )
    check_parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file (default: ~/.github-token.yaml when present).",
    )

    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        _validate_settings(env_file, args.config)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ConfigError as exc:
        print(f"Settings validation failed: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
