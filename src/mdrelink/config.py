"""Configuration loading and validation for mdrelink."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from mdrelink.core.errors import ConfigError
from mdrelink.core.models import DEFAULT_EXTENSIONS, LinkStyle, SlugPolicy

DEFAULT_CONFIG_NAME = ".mdrelink.yaml"
DEFAULT_INCLUDE = "**/*.{md,mdx}"


def _normalize_extensions(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]


class OverrideConfig(BaseModel):
    """Options applied to documents matching ``paths``, on top of the defaults."""

    paths: list[str] = Field(description="Globs relative to the project root")
    exclude: list[str] | None = None
    link_style: LinkStyle | None = None
    extensions: list[str] | None = None
    slugs: SlugPolicy | None = None

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: list[str]) -> list[str]:
        """Require at least one glob."""
        if not v:
            raise ValueError("Override must list at least one path glob.")
        return v

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_extensions(v)


class MdrelinkConfig(BaseModel):
    """Top-level mdrelink configuration."""

    include: str = Field(default=DEFAULT_INCLUDE, description="Glob of tracked documents")
    exclude: list[str] = Field(default_factory=lambda: ["**/node_modules/**", "**/.git/**"])
    link_style: LinkStyle = Field(default=LinkStyle.RELATIVE, description="relative or absolute")
    extensions: list[str] = Field(default_factory=lambda: sorted(DEFAULT_EXTENSIONS))
    slugs: SlugPolicy = Field(default_factory=SlugPolicy)
    overrides: list[OverrideConfig] = Field(default_factory=list)
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Require at least one tracked extension."""
        if not v:
            raise ValueError("At least one tracked extension is required.")
        return _normalize_extensions(v) or []


def load_config(path: str | None = None, root: str | Path = ".") -> MdrelinkConfig:
    """Load and validate configuration from a YAML file.

    Environment variable overrides:
        MDRELINK_LINK_STYLE: overrides link_style
        MDRELINK_EXCLUDE: comma-separated globs, replaces exclude

    Args:
        path: Path to config file. Defaults to ``<root>/.mdrelink.yaml``,
            which may be absent.
        root: Project root used to find the default file.

    Returns:
        Validated MdrelinkConfig.

    Raises:
        ConfigError: If an explicit config file is missing, or any file is
            unreadable or invalid.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = Path(root).expanduser() / DEFAULT_CONFIG_NAME

    data: object = {}
    if config_path.exists():
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}") from e

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}") from e

        if data is None:
            data = {}

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a YAML mapping")

    env_style = os.environ.get("MDRELINK_LINK_STYLE")
    if env_style:
        data["link_style"] = env_style

    env_exclude = os.environ.get("MDRELINK_EXCLUDE")
    if env_exclude:
        data["exclude"] = [g.strip() for g in env_exclude.split(",") if g.strip()]

    try:
        return MdrelinkConfig(**data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
