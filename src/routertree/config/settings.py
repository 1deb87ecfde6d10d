"""Configuration management built on top of the policy primitives."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .overrides import deep_merge, env_overrides, set_path
from .policies import Policies, load_policies

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def _read_layer(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _settings_env_layer() -> Dict[str, Any]:
    """Collect ``ROUTERTREE_SETTINGS__PATHS__LOGS_DIR=...`` style overrides."""

    layer: Dict[str, Any] = {}
    for path, value in env_overrides("ROUTERTREE_SETTINGS__"):
        set_path(layer, path, value)
    return layer


class PathsConfig(BaseModel):
    """Filesystem locations used by the command-line tooling."""

    logs_dir: Path = Field(default=PROJECT_ROOT / "logs")

    @field_validator("logs_dir")
    @classmethod
    def _anchor_relative(cls, value: Path) -> Path:
        return value if value.is_absolute() else PROJECT_ROOT / value


class Settings(BaseSettings):
    """Primary configuration object.

    Precedence (highest first): explicit kwargs, environment variables prefixed
    with ``ROUTERTREE_`` (handled by :class:`BaseSettings`), nested overrides via
    ``ROUTERTREE_SETTINGS__`` variables, environment-specific YAML (e.g.
    ``production.yaml``), the default YAML file, and finally the class defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTERTREE_",
        validate_assignment=True,
        extra="ignore",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Active runtime environment",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    log_level: str = Field(default="INFO")
    policies: Policies

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @model_validator(mode="before")
    @classmethod
    def _bootstrap_from_files(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        """Load YAML files and merge with provided overrides."""

        config_dir = Path(values.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = values.get("environment") or os.getenv("ROUTERTREE_ENV", "development")
        combined: Dict[str, Any] = {}
        for layer in (
            _read_layer(config_dir / "default.yaml"),
            _read_layer(config_dir / f"{environment}.yaml"),
            _settings_env_layer(),
        ):
            combined = deep_merge(combined, layer)
        combined = deep_merge(combined, {k: v for k, v in values.items() if v is not None})
        combined.setdefault("environment", environment)

        policies_data = combined.pop("policies", None)
        if isinstance(policies_data, Policies):
            combined["policies"] = policies_data
            return combined
        combined["policies"] = load_policies(policies_data or {})
        return combined

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path:
        return self.paths.logs_dir / "routertree.log"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a singleton settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "PathsConfig"]
