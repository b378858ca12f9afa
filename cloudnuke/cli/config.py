"""Application configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..nuke.batching import DEFAULT_MAX_CONCURRENT
from ..nuke.poller import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".cloudnuke" / "config.yaml"


@dataclass
class Config:
    """Configuration loaded from file and environment.

    Precedence (lowest to highest): defaults, config file, environment
    variables, CLI options.

    Attributes:
        aws_profile: AWS profile name
        log_level: Log level name
        storage_path: Base directory for audit logs
        max_concurrent: Concurrent delete calls per batch
        batch_pause_seconds: Pause between consecutive batches of one resource type
        confirm_max_attempts: Confirmation probes before giving up on an asynchronous delete
        confirm_interval_seconds: Seconds between confirmation probes
    """

    aws_profile: Optional[str] = None
    log_level: str = "INFO"
    storage_path: Optional[str] = None
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    batch_pause_seconds: float = 0.0
    confirm_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    confirm_interval_seconds: float = DEFAULT_INTERVAL_SECONDS

    @classmethod
    def load(cls, path: Optional[str] = None) -> Config:
        """Load configuration.

        Args:
            path: Config file path (default: $CLOUDNUKE_CONFIG or ~/.cloudnuke/config.yaml)

        Returns:
            Config instance

        Raises:
            ValueError: If the config file is not a valid YAML mapping
        """
        config_path = Path(path or os.environ.get("CLOUDNUKE_CONFIG") or DEFAULT_CONFIG_PATH)
        config = cls()

        if config_path.is_file():
            config = cls.from_dict(cls._read_file(config_path))
            logger.debug(f"Loaded config from {config_path}")

        if os.environ.get("AWS_PROFILE"):
            config.aws_profile = os.environ["AWS_PROFILE"]
        if os.environ.get("CLOUDNUKE_LOG_LEVEL"):
            config.log_level = os.environ["CLOUDNUKE_LOG_LEVEL"]
        if os.environ.get("CLOUDNUKE_STORAGE_PATH"):
            config.storage_path = os.environ["CLOUDNUKE_STORAGE_PATH"]

        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build config from a mapping, ignoring unknown keys."""
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            values[key] = value

        config = cls(**values)
        config.max_concurrent = int(config.max_concurrent)
        config.batch_pause_seconds = float(config.batch_pause_seconds)
        config.confirm_max_attempts = int(config.confirm_max_attempts)
        config.confirm_interval_seconds = float(config.confirm_interval_seconds)
        return config

    @staticmethod
    def _read_file(config_path: Path) -> dict[str, Any]:
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file {config_path}: expected a mapping")
        return data
