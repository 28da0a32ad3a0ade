"""Runtime settings using pydantic-settings.

Defaults are overridden by an optional YAML file and then by ``JOBGUARD_*``
environment variables.  The YAML file is read from ``$JOBGUARD_CONFIG`` or,
when that is unset, ``~/.jobguard/config.yaml`` if it exists.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from jobguard.errors import ConfigError

_DEFAULT_CONFIG_PATH = Path.home() / ".jobguard" / "config.yaml"


class Settings(BaseSettings):
    """Settings for stores, verification codes, moderation and dispatch."""

    model_config = SettingsConfigDict(
        env_prefix="JOBGUARD_",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: str = Field(default=str(Path.home() / ".jobguard"), description="Root of the JSON stores")

    # Verification codes
    code_length: int = Field(default=6, description="Digits per verification code")
    code_ttl_minutes: int = Field(default=10, description="Minutes a code stays valid")

    # Moderation
    flag_threshold: int = Field(default=3, description="Reports that move an active job to flagged")

    # Notification gateways (demo mode when both URLs are empty)
    email_gateway_url: str = Field(default="", description="HTTP endpoint for email delivery")
    sms_gateway_url: str = Field(default="", description="HTTP endpoint for SMS delivery")
    gateway_token: str = Field(default="", description="Bearer token sent to the gateways")
    sender_name: str = Field(default="Job Portal", description="Name used in outgoing messages")
    dispatch_timeout: float = Field(default=10.0, description="Gateway request timeout in seconds")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats keyword values, which carry the YAML file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("code_length")
    @classmethod
    def _check_code_length(cls, v: int) -> int:
        if v < 4:
            raise ValueError("code_length must be at least 4")
        return v

    @field_validator("code_ttl_minutes", "flag_threshold")
    @classmethod
    def _check_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def is_demo_mode(self) -> bool:
        """True when no gateway is configured and codes are only logged."""
        return not (self.email_gateway_url or self.sms_gateway_url)


def _read_yaml(path: Path) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """Build ``Settings`` from the YAML file (if any) and the environment.

    Raises ``ConfigError`` when a value fails validation.
    """
    config_path = Path(path) if path else None
    if config_path is None and os.environ.get("JOBGUARD_CONFIG"):
        config_path = Path(os.environ["JOBGUARD_CONFIG"])
    if config_path is None and _DEFAULT_CONFIG_PATH.exists():
        config_path = _DEFAULT_CONFIG_PATH

    values = _read_yaml(config_path) if config_path is not None else {}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return load_settings()
