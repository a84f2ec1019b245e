# Copyright (c) Syntropy Systems
"""Configuration management for forecastview."""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import cast

import yaml

DEFAULT_API_URL = "http://localhost:8000"
API_URL_ENV = "FORECASTVIEW_API_URL"
CONFIG_DIR_NAME = ".forecastview"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class ForecastViewConfig:
    """Configuration for forecastview."""

    # Origin of the forecasting backend
    api_url: str = DEFAULT_API_URL

    # Per-request timeout in seconds; None leaves requests unbounded
    request_timeout: float | None = None

    # Ask the backend to skip hyperparameter search
    fast_mode: bool = True

    # Number of features shown in the importance table
    feature_limit: int = 10

    def to_dict(self) -> dict[str, object]:
        """Return the config as a plain dict for writing to YAML."""
        return asdict(self)


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .forecastview directory by walking up from start_path.

    Returns None if no .forecastview directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global forecastview config directory (~/.forecastview)."""
    return Path.home() / CONFIG_DIR_NAME


def find_config_file(config_dir: Path | None = None) -> Path | None:
    """Locate the config file that load_config would read."""
    if config_dir is not None:
        return config_dir / CONFIG_FILE_NAME

    found_dir = find_config_dir()
    if found_dir is not None:
        return found_dir / CONFIG_FILE_NAME

    global_config = get_global_config_dir() / CONFIG_FILE_NAME
    if global_config.exists():
        return global_config

    return None


def load_config(config_dir: Path | None = None) -> ForecastViewConfig:
    """Load configuration from .forecastview/config.yaml or defaults.

    Looks for config in:
    1. Provided config_dir
    2. Nearest .forecastview directory walking up
    3. ~/.forecastview/config.yaml
    4. Defaults

    The FORECASTVIEW_API_URL environment variable overrides api_url.
    """
    config = ForecastViewConfig()

    config_path = find_config_file(config_dir)
    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            loaded = yaml.safe_load(f) or {}
        data = cast("dict[str, object]", loaded if isinstance(loaded, dict) else {})

        api_url = data.get("api_url")
        if isinstance(api_url, str) and api_url.strip():
            config.api_url = api_url.strip()
        request_timeout = data.get("request_timeout")
        if isinstance(request_timeout, (int, float)) and not isinstance(
            request_timeout, bool
        ):
            config.request_timeout = float(request_timeout)
        fast_mode = data.get("fast_mode")
        if isinstance(fast_mode, bool):
            config.fast_mode = fast_mode
        feature_limit = data.get("feature_limit")
        if isinstance(feature_limit, int) and not isinstance(feature_limit, bool):
            config.feature_limit = max(1, feature_limit)

    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        config.api_url = env_url.strip()

    config.api_url = config.api_url.rstrip("/")
    return config
