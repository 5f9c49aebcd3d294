"""
Configuration loader — settings from CLI flags, environment and ospkg.yml.

Precedence, highest first:
    CLI flag  >  OSPKG_* env var  >  ospkg.yml  >  defaults

The YAML file is optional.  It can also extend the platform table
(extra overrides, prereqs, search directories, packager mappings) for
distros the defaults don't cover.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError

from ospkg.core.config.platforms import PlatformTable, build_table
from ospkg.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "ospkg.yml"

# Environment variable → settings field
_ENV_VARS: dict[str, str] = {
    "OSPKG_DEBUG": "debug",
    "OSPKG_QUIET": "quiet",
    "OSPKG_TIMEOUT": "timeout",
    "OSPKG_LOG_LEVEL": "log_level",
    "OSPKG_LOG_FILE": "log_file",
}

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


class Settings(BaseModel):
    """Run settings.  Immutable once the run starts."""

    debug: bool = False
    quiet: bool = False
    timeout: float | None = None    # seconds; None = wait forever
    log_level: str = "WARNING"
    log_file: str | None = None
    config_path: Path | None = None

    # platform table additions
    packager: dict[str, str] = Field(default_factory=dict)
    aliases: dict[str, list[str] | str] = Field(default_factory=dict)
    common_ids: list[str] = Field(default_factory=list)
    overrides: dict[str, dict[str, str]] = Field(default_factory=dict)
    prereqs: dict[str, list[str] | str] = Field(default_factory=dict)
    cmd_path: dict[str, list[str] | str] = Field(default_factory=dict)

    def platform_table(self) -> PlatformTable:
        """Build the frozen platform table for this run."""
        return build_table(
            packager=self.packager,
            aliases=self.aliases,  # type: ignore[arg-type]
            common_ids=self.common_ids,
            overrides=self.overrides,
            prereqs=self.prereqs,  # type: ignore[arg-type]
            cmd_path=self.cmd_path,  # type: ignore[arg-type]
        )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


def truthy(value: str | None) -> bool:
    """Interpret an environment flag (unset, "", "0", "false" → False)."""
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_STRINGS


def load_config_file(path: Path) -> dict[str, Any]:
    """Read and parse a YAML config file.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def env_settings(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect settings from OSPKG_* environment variables."""
    env = os.environ if environ is None else environ
    found: dict[str, Any] = {}
    for var, field in _ENV_VARS.items():
        if var not in env:
            continue
        value = env[var]
        if field in ("debug", "quiet"):
            found[field] = truthy(value)
        elif field == "timeout":
            found[field] = value or None
        else:
            found[field] = value
    return found


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **cli_overrides: Any,
) -> Settings:
    """Assemble run settings.

    Args:
        config_path: Explicit ospkg.yml path.  Falls back to $OSPKG_CONFIG.
        environ: Environment to read (default: the process environment).
        cli_overrides: Values from command-line flags.  None means "not given".

    Raises:
        ConfigError: If the file or any value is invalid.
    """
    env = os.environ if environ is None else environ
    if config_path is None and env.get("OSPKG_CONFIG"):
        config_path = Path(env["OSPKG_CONFIG"])

    data: dict[str, Any] = {}
    if config_path is not None:
        data.update(load_config_file(config_path))
        data["config_path"] = config_path

    data.update(env_settings(env))
    data.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.debug("Settings: debug=%s quiet=%s timeout=%s", settings.debug, settings.quiet, settings.timeout)
    return settings
