"""
Application configuration models and helpers.

Settings are collected from command-line overrides, the environment, a local
``.env`` file and an optional YAML config file (``~/.github-token.yaml`` by
default), in that order of precedence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Type

import yaml
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    YamlConfigSettingsSource,
)

from ghtoken.core.errors import ConfigError
from ghtoken.models.token import AppIdentity

DEFAULT_CONFIG_FILENAME = ".github-token.yaml"
DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_CACHE_DIR = Path("/tmp/githubtoken")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppSettings(BaseSettings):
    """Root settings object for a token invocation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment names come first so they win over config-file keys.
    app_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("GITHUB_APP_ID", "app-id"),
    )
    installation_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices(
            "GITHUB_APP_INSTALLATION_ID", "app-installation-id"
        ),
    )
    private_key: Optional[str] = Field(
        None,
        repr=False,
        validation_alias=AliasChoices("GITHUB_APP_PRIVATE_KEY", "app-private-key"),
    )
    private_key_path: Optional[Path] = Field(
        None,
        validation_alias=AliasChoices(
            "GITHUB_APP_PRIVATE_KEY_PATH", "app-private-key-path"
        ),
        description="PEM file read when no inline private key is configured.",
    )
    base_url: str = Field(
        DEFAULT_BASE_URL,
        validation_alias=AliasChoices("GITHUB_API_URL", "base-url"),
        description="REST API root; override for GitHub Enterprise Server.",
    )
    cache_dir: Path = Field(
        DEFAULT_CACHE_DIR,
        validation_alias=AliasChoices("GITHUB_TOKEN_CACHE_DIR", "cache-dir"),
    )
    timeout: float = Field(
        10.0,
        gt=0,
        validation_alias=AliasChoices("GITHUB_TOKEN_TIMEOUT", "request-timeout"),
        description="Seconds allowed for the token exchange request.",
    )
    cache_secret: Optional[str] = Field(
        None,
        repr=False,
        validation_alias=AliasChoices("GITHUB_TOKEN_CACHE_SECRET", "cache-secret"),
        description="Encrypts the cached token at rest when set.",
    )
    log_level: str = Field(
        "WARNING",
        validation_alias=AliasChoices("GITHUB_TOKEN_LOG_LEVEL", "log-level"),
    )
    force_refresh: bool = Field(
        False,
        validation_alias=AliasChoices("GITHUB_TOKEN_FORCE_REFRESH", "force-refresh"),
    )
    debug: bool = Field(
        False,
        validation_alias=AliasChoices("GITHUB_TOKEN_DEBUG", "debug-logging"),
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources = [init_settings, env_settings, dotenv_settings]
        if settings_cls.model_config.get("yaml_file"):
            sources.append(YamlConfigSettingsSource(settings_cls))
        sources.append(file_secret_settings)
        return tuple(sources)

    def resolve_private_key(self) -> Optional[str]:
        """Return the PEM text from the inline setting or the key file."""
        key = self.private_key
        if not key and self.private_key_path is not None:
            try:
                key = self.private_key_path.expanduser().read_text(encoding="utf-8")
            except OSError as exc:
                raise ConfigError(
                    f"failed to read private key file {self.private_key_path}: {exc}"
                ) from exc
        if not key:
            return None
        # Keys passed through single-line env vars often carry escaped newlines.
        if "\\n" in key and "\n" not in key:
            key = key.replace("\\n", "\n")
        return key.strip() + "\n"

    def identity(self) -> AppIdentity:
        """Build the app identity or report every missing field at once."""
        private_key = self.resolve_private_key()
        missing = []
        if not self.app_id:
            missing.append("app-id")
        if not self.installation_id:
            missing.append("app-installation-id")
        if not private_key:
            missing.append("app-private-key")
        if missing:
            raise ConfigError(f"missing required settings: {', '.join(missing)}")
        try:
            return AppIdentity(
                app_id=self.app_id,
                installation_id=self.installation_id,
                private_key=private_key,
            )
        except ValidationError as exc:
            raise ConfigError(f"invalid app identity: {exc}") from exc


def default_config_file() -> Path:
    return Path.home() / DEFAULT_CONFIG_FILENAME


def resolve_config_file(config_file: Optional[Path] = None) -> Optional[Path]:
    """Pick the YAML config to load.

    An explicitly requested file must exist; the default one is optional.
    """
    if config_file is not None:
        config_file = config_file.expanduser()
        if not config_file.is_file():
            raise ConfigError(f"config file {config_file} does not exist")
        return config_file
    candidate = default_config_file()
    return candidate if candidate.is_file() else None


def _settings_class(config_file: Optional[Path]) -> Type[AppSettings]:
    if config_file is None:
        return AppSettings

    class FileAppSettings(AppSettings):
        model_config = SettingsConfigDict(yaml_file=config_file)

    return FileAppSettings


def _override_key(field_name: str) -> str:
    """Key an override under the environment alias so it shadows that source."""
    alias = AppSettings.model_fields[field_name].validation_alias
    if isinstance(alias, AliasChoices):
        return str(alias.choices[0])
    return field_name


def load_settings(
    config_file: Optional[Path] = None,
    *,
    env_file: Optional[Path] = None,
    **overrides: Any,
) -> AppSettings:
    """Load settings, mapping validation failures to ``ConfigError``.

    ``None`` overrides are dropped so unset command-line flags do not mask
    values from the environment or the config file.
    """
    init_kwargs = {
        _override_key(key): value
        for key, value in overrides.items()
        if value is not None
    }
    if env_file is not None:
        init_kwargs["_env_file"] = env_file
    settings_cls = _settings_class(config_file)
    try:
        return settings_cls(**init_kwargs)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    except (yaml.YAMLError, SettingsError) as exc:
        raise ConfigError(f"failed to load settings: {exc}") from exc


__all__ = [
    "AppSettings",
    "DEFAULT_BASE_URL",
    "DEFAULT_CACHE_DIR",
    "default_config_file",
    "load_settings",
    "resolve_config_file",
]
