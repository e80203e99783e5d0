"""
Grid Configuration

Loads grid dimensions and shell settings from a YAML file. The packaged
grid_defaults.yaml is used when no path is given, so users can copy it and
tweak values without touching code.
"""

import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "grid_defaults.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GridConfig:
    """Dimensions and limits for a grid engine."""
    width: int = 12  # columns, immutable once the engine exists
    height: int = 10  # initial rows
    max_height: Optional[int] = None  # None = unbounded growth
    log_level: str = "WARNING"

    def validate(self) -> "GridConfig":
        """
        Check values for consistency.

        Returns:
            Self for chaining

        Raises:
            ConfigError: If any value is out of range
        """
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if self.max_height is not None:
            if isinstance(self.max_height, bool) or not isinstance(self.max_height, int):
                raise ConfigError(
                    f"max_height must be an integer or null, got {self.max_height!r}"
                )
            if self.max_height < self.height:
                raise ConfigError(
                    f"max_height ({self.max_height}) is smaller than height ({self.height})"
                )

        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"Unknown log_level: {self.log_level}. Valid options: {list(LOG_LEVELS)}"
            )
        self.log_level = level
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GridConfig":
        """Create from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")
        return cls(**data).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Optional[Union[str, Path]] = None) -> GridConfig:
    """
    Load grid configuration from YAML.

    Args:
        path: Path to a YAML file. If None, uses grid_defaults.yaml.

    Returns:
        Validated GridConfig

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file is a symlink, is not a mapping,
                     or holds invalid values
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Grid configuration file not found: {config_path}")

    # Security: Check for symlinks to prevent reading unintended files
    if config_path.is_symlink():
        raise ConfigError(f"Grid configuration file cannot be a symlink: {config_path}")

    with open(config_path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Grid configuration must be a mapping: {config_path}")

    config = GridConfig.from_dict(data)
    logger.debug("Loaded grid config from %s: %s", config_path, config)
    return config
