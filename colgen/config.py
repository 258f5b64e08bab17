"""
Configuration module for colgen.

This module provides library-wide settings: logging, solver threads,
numerical tolerances and the default per-solve time limit.

Configuration can be set via:
1. Environment variables (COLGEN_*)
2. Config file (./colgen.toml or ~/.colgen/config.toml)
3. Programmatic API

Example:
    >>> from colgen.config import config
    >>> config.get_tolerance("reduced_cost")
    1e-06
    >>> config.log_level = "DEBUG"
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from colgen.exceptions import ConfigurationError


_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass
class ColgenConfig:
    """
    Library-wide configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        num_threads: Threads HiGHS may use per solve
        time_limit: Default per-solve time limit in seconds (None = no limit)
        tolerances: Numerical tolerances for optimization
    """

    # Logging
    log_level: str = field(
        default_factory=lambda: os.environ.get("COLGEN_LOG_LEVEL", "WARNING")
    )

    # Solver settings
    num_threads: int = field(default_factory=lambda: _env_int("COLGEN_THREADS", 1))
    time_limit: Optional[float] = field(
        default_factory=lambda: _env_float("COLGEN_TIME_LIMIT")
    )

    # Numerical tolerances
    tolerances: dict[str, float] = field(default_factory=lambda: {
        "reduced_cost": 1e-6,
        "feasibility": 1e-9,
        "integrality": 1e-6,
        "mip_gap": 0.0,
    })

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        if self.num_threads < 1:
            raise ConfigurationError("num_threads must be at least 1")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigurationError("time_limit must be positive")

    # =========================================================================
    # Tolerance helpers
    # =========================================================================

    def get_tolerance(self, name: str) -> float:
        """Get a tolerance value by name."""
        return self.tolerances.get(name, 1e-6)

    def set_tolerance(self, name: str, value: float) -> None:
        """Set a tolerance value."""
        if value < 0:
            raise ConfigurationError(f"Tolerance {name!r} must be non-negative")
        self.tolerances[name] = value

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "log_level": self.log_level,
            "num_threads": self.num_threads,
            "time_limit": self.time_limit,
            "tolerances": self.tolerances.copy(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> 'ColgenConfig':
        """Create config from dictionary."""
        defaults = cls()
        tolerances = defaults.tolerances
        tolerances.update(d.get("tolerances", {}))
        time_limit = d.get("time_limit", defaults.time_limit)
        return cls(
            log_level=d.get("log_level", defaults.log_level),
            num_threads=int(d.get("num_threads", defaults.num_threads)),
            time_limit=float(time_limit) if time_limit is not None else None,
            tolerances=tolerances,
        )

    def save(self, path: Optional[Path] = None) -> None:
        """
        Save configuration to a TOML file.

        Args:
            path: Path to save to (default: ./colgen.toml)
        """
        if path is None:
            path = Path("colgen.toml")

        lines = [
            "# colgen configuration",
            "",
            "[general]",
            f'log_level = "{self.log_level}"',
            f"num_threads = {self.num_threads}",
        ]
        if self.time_limit is not None:
            lines.append(f"time_limit = {self.time_limit}")

        lines.extend(["", "[tolerances]"])
        for name, value in self.tolerances.items():
            lines.append(f"{name} = {value}")

        path.write_text("\n".join(lines) + "\n")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'ColgenConfig':
        """
        Load configuration from a TOML file.

        Args:
            path: Path to load from (default: ./colgen.toml or ~/.colgen/config.toml)

        Returns:
            Loaded configuration (or default if file not found)
        """
        if path is None:
            local_config = Path("colgen.toml")
            user_config = Path.home() / ".colgen" / "config.toml"

            if local_config.exists():
                path = local_config
            elif user_config.exists():
                path = user_config
            else:
                return cls()

        if not path.exists():
            return cls()

        config_dict: dict[str, Any] = {"tolerances": {}}
        current_section = None

        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("[") and line.endswith("]"):
                current_section = line[1:-1]
                continue

            if "=" not in line:
                raise ConfigurationError(f"Malformed config line in {path}: {line!r}")

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if value.startswith('"') and value.endswith('"'):
                parsed: Any = value[1:-1]
            else:
                try:
                    parsed = int(value)
                except ValueError:
                    try:
                        parsed = float(value)
                    except ValueError:
                        raise ConfigurationError(
                            f"Cannot parse value for {key!r} in {path}: {value!r}"
                        )

            if current_section == "tolerances":
                config_dict["tolerances"][key] = float(parsed)
            else:
                config_dict[key] = parsed

        return cls.from_dict(config_dict)


# Global configuration instance
config = ColgenConfig()


def setup_logging(
    level: Optional[Union[str, int]] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the ``colgen`` logger hierarchy.

    Args:
        level: Logging level (default: config.log_level)
        log_file: Optional file to mirror log records to

    Returns:
        The ``colgen`` package logger
    """
    if level is None:
        level = config.log_level

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))

    logger = logging.getLogger("colgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger
