"""
Configuration for DV6.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/dv6/config.toml) if exists
3. Environment variables (DV6_*) override file
4. Explicit Config objects passed to parse() override everything
"""

from __future__ import annotations

import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)

FLAG_WARN_POLICIES = ("unknown", "known")


@dataclass
class FlagsConfig:
    """Known flag vocabulary and which side of it produces a warning."""
    known: list[str] = field(
        default_factory=lambda: ["SPL", "JOKE", "MEDICAL", "PHARM", "MISS", "DQN"]
    )
    # "unknown": warn on flags outside `known`; "known": warn on flags inside it
    warn_when: str = "unknown"

    def __post_init__(self):
        if self.warn_when not in FLAG_WARN_POLICIES:
            raise ConfigError(
                f"flags.warn_when must be one of {FLAG_WARN_POLICIES}, got {self.warn_when!r}"
            )


@dataclass
class AuthorConfig:
    """Validation settings for author history lines."""
    operations: list[str] = field(default_factory=lambda: ["A", "R", "I"])
    max_fields: int = 4


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class Config:
    """Root config with all settings."""
    flags: FlagsConfig = field(default_factory=FlagsConfig)
    author: AuthorConfig = field(default_factory=AuthorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "dv6" / "config.toml"
    return Path.home() / ".config" / "dv6" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            config = Config()

    # env var overrides
    config = _apply_env(config)

    return config


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "flags" in data:
        f = data["flags"]
        if "known" in f:
            config.flags.known = [str(flag) for flag in f["known"]]
        if "warn_when" in f:
            config.flags = FlagsConfig(known=config.flags.known, warn_when=str(f["warn_when"]))

    if "author" in data:
        a = data["author"]
        if "operations" in a:
            config.author.operations = [str(op) for op in a["operations"]]
        if "max_fields" in a:
            config.author.max_fields = int(a["max_fields"])

    if "logging" in data:
        lg = data["logging"]
        if "level" in lg:
            config.logging.level = str(lg["level"]).upper()

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, type]] = {
        "DV6_KNOWN_FLAGS": ("flags", "known", list),
        "DV6_FLAG_WARN_WHEN": ("flags", "warn_when", str),
        "DV6_AUTHOR_OPERATIONS": ("author", "operations", list),
        "DV6_AUTHOR_MAX_FIELDS": ("author", "max_fields", int),
        "DV6_LOG_LEVEL": ("logging", "level", str),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is None:
            continue
        try:
            converted = _split_list(val) if conv is list else conv(val)
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid %s", env_key, val, conv.__name__)
            continue
        setattr(getattr(config, section), attr, converted)

    if config.flags.warn_when not in FLAG_WARN_POLICIES:
        raise ConfigError(
            f"DV6_FLAG_WARN_WHEN must be one of {FLAG_WARN_POLICIES}, got {config.flags.warn_when!r}"
        )
    config.logging.level = config.logging.level.upper()

    return config


# Module-level config instance, loaded once on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached config so the next get_config() reloads it."""
    global _config
    _config = None
