"""
Configuration system for gitlogue.

This module provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable loading
- YAML/TOML file loading
- Sensible defaults with override capability
"""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from dotenv import find_dotenv, load_dotenv

from .speed import SpeedRule, SpeedRuleSet


# =============================================================================
# Playback Configuration
# =============================================================================

@dataclass
class PlaybackConfig:
    """Configuration for typing pace and scrubbing."""

    # Base interval between revealed characters
    speed_ms: float = 30.0

    # Pause at the end of each line; defaults to speed_ms
    line_pause_ms: Optional[float] = None

    # Ordered rules, first match wins
    speed_rules: list[SpeedRule] = field(default_factory=list)

    # Bound on each checkpoint stack
    max_checkpoints: int = 10_000

    # Commits kept for p/n navigation; the oldest is dropped first
    max_history: int = 1_000

    def __post_init__(self):
        if self.speed_ms <= 0:
            raise ValueError("speed_ms must be positive")
        if self.line_pause_ms is not None and self.line_pause_ms < 0:
            raise ValueError("line_pause_ms cannot be negative")
        if self.max_checkpoints < 1:
            raise ValueError("max_checkpoints must be at least 1")
        if self.max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.speed_rules = [
            rule if isinstance(rule, SpeedRule)
            else SpeedRule.parse(rule) if isinstance(rule, str)
            else SpeedRule.from_dict(rule)
            for rule in self.speed_rules
        ]

    def rule_set(self) -> SpeedRuleSet:
        return SpeedRuleSet(self.speed_ms, self.speed_rules)


# =============================================================================
# Commit Source Configuration
# =============================================================================

TraversalOrder = Literal["random", "asc", "desc"]
DiffMode = Literal["unstaged", "staged", "all"]

TRAVERSAL_ORDERS = ("random", "asc", "desc")
DIFF_MODES = ("unstaged", "staged", "all")


@dataclass
class SourceConfig:
    """Configuration for where commits come from."""

    repo_path: Path = field(default_factory=lambda: Path("."))

    # Traversal
    order: TraversalOrder = "random"
    loop: bool = False

    # A single commit, or a range "A..B" when range_mode is set
    commit: Optional[str] = None
    range_mode: bool = False

    # Replay uncommitted changes instead of history
    diff_mode: Optional[DiffMode] = None

    def __post_init__(self):
        if isinstance(self.repo_path, str):
            self.repo_path = Path(self.repo_path)
        if self.order not in TRAVERSAL_ORDERS:
            raise ValueError(f"order must be one of {', '.join(TRAVERSAL_ORDERS)}")
        if self.diff_mode is not None and self.diff_mode not in DIFF_MODES:
            raise ValueError(f"diff_mode must be one of {', '.join(DIFF_MODES)}")
        if self.range_mode and not self.commit:
            raise ValueError("range_mode requires a commit range")

    @property
    def single_commit(self) -> bool:
        """A lone explicit commit: nothing to advance to once it is shown."""
        return self.commit is not None and not self.range_mode and self.diff_mode is None


# =============================================================================
# UI Configuration
# =============================================================================

@dataclass
class UIConfig:
    """Configuration for the terminal loop."""

    # Bounded wait for input per loop iteration
    poll_interval_ms: float = 8.0

    def __post_init__(self):
        if self.poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")


# =============================================================================
# Logging Configuration
# =============================================================================

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: LogLevel = "WARNING"
    format: LogFormat = "text"

    # Output settings; stderr when unset
    log_file: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)
        self.level = str(self.level).upper()  # type: ignore
        self.format = str(self.format).lower()  # type: ignore
        if self.level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        if self.format not in LOG_FORMATS:
            raise ValueError(f"format must be one of {', '.join(LOG_FORMATS)}")


# =============================================================================
# Master Configuration
# =============================================================================

@dataclass
class Settings:
    """
    Master configuration for gitlogue.

    This aggregates all configuration sections into a single object
    that can be loaded from environment variables, files, or constructed
    programmatically.
    """

    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, prefix: str = "GITLOGUE_") -> "Settings":
        """
        Load settings from environment variables.

        Example:
            GITLOGUE_SPEED=20
            GITLOGUE_SPEED_RULES="removed:x2;added>=80:10ms"
            GITLOGUE_ORDER=asc
            GITLOGUE_LOOP=true
        """
        settings = cls()

        # Playback settings
        if speed := os.getenv(f"{prefix}SPEED"):
            settings.playback.speed_ms = float(speed)
        if line_pause := os.getenv(f"{prefix}LINE_PAUSE"):
            settings.playback.line_pause_ms = float(line_pause)
        if rules := os.getenv(f"{prefix}SPEED_RULES"):
            settings.playback.speed_rules = [
                SpeedRule.parse(rule) for rule in rules.split(";") if rule.strip()
            ]

        # Source settings
        if repo := os.getenv(f"{prefix}REPO"):
            settings.source.repo_path = Path(repo)
        if order := os.getenv(f"{prefix}ORDER"):
            settings.source.order = order.lower()  # type: ignore
        if loop := os.getenv(f"{prefix}LOOP"):
            settings.source.loop = _parse_bool(loop)

        # Logging settings
        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            settings.logging.level = level.upper()  # type: ignore
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            settings.logging.format = log_format.lower()  # type: ignore
        if log_file := os.getenv(f"{prefix}LOG_FILE"):
            settings.logging.log_file = Path(log_file)

        settings.validate()
        return settings

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Settings":
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)

        Returns:
            Settings object with values from file
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create Settings from a dictionary."""
        settings = cls()

        if "playback" in data:
            playback_data = dict(data["playback"])
            rules = playback_data.pop("speed_rules", None)
            for key, value in playback_data.items():
                if hasattr(settings.playback, key):
                    setattr(settings.playback, key, value)
            if rules is not None:
                settings.playback.speed_rules = [
                    SpeedRule.parse(rule) if isinstance(rule, str) else SpeedRule.from_dict(rule)
                    for rule in rules
                ]

        if "source" in data:
            for key, value in data["source"].items():
                if key == "repo_path":
                    value = Path(value)
                if hasattr(settings.source, key):
                    setattr(settings.source, key, value)

        if "ui" in data:
            for key, value in data["ui"].items():
                if hasattr(settings.ui, key):
                    setattr(settings.ui, key, value)

        if "logging" in data:
            for key, value in data["logging"].items():
                if key == "log_file" and value is not None:
                    value = Path(value)
                if hasattr(settings.logging, key):
                    setattr(settings.logging, key, value)

        settings.validate()
        return settings

    def validate(self) -> None:
        """Re-run section validation after fields were assigned."""
        self.playback.__post_init__()
        self.source.__post_init__()
        self.ui.__post_init__()
        self.logging.__post_init__()

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        import dataclasses

        def convert(obj):
            if isinstance(obj, SpeedRule):
                return obj.to_dict()
            if dataclasses.is_dataclass(obj):
                return {f.name: convert(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
            if isinstance(obj, list):
                return [convert(item) for item in obj]
            if isinstance(obj, Path):
                return str(obj)
            return obj

        return convert(self)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_env(path: Optional[str] = None, *, override: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        path: Optional path to a .env file. If not provided, uses find_dotenv().
        override: Whether to override existing environment variables.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = [
    "PlaybackConfig",
    "SourceConfig",
    "UIConfig",
    "LoggingConfig",
    "Settings",
    "TRAVERSAL_ORDERS",
    "DIFF_MODES",
    "LOG_LEVELS",
    "LOG_FORMATS",
    "load_env",
]
