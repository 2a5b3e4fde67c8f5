"""
Ingestion Configuration Module
==============================

Loads pipeline settings from a YAML file. Every setting has a default, so
the pipeline runs without any configuration file at all.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from gosince.ingestion.urls import DEFAULT_DOC_BASE_URL

DEFAULT_SEARCH_URL = "https://api.github.com/search/code?q=repo:golang/go+path:api+extension:txt"
DEFAULT_RAW_BASE_URL = "https://raw.githubusercontent.com/golang/go/master/api/"
DEFAULT_API_URL = "https://api.gosince.com/v1"


@dataclass
class IngestionConfig:
    """Settings for discovery, fetching and the record queue."""

    user_agent: str = "gosince/0.1"
    request_timeout: float = 30.0
    queue_size: int = 10000
    search_url: str = DEFAULT_SEARCH_URL
    raw_base_url: str = DEFAULT_RAW_BASE_URL
    version_prefix: str = "go"
    version_suffix: str = ".txt"
    doc_base_url: str = DEFAULT_DOC_BASE_URL
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IngestionConfig:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        defaults = cls()
        return cls(
            user_agent=str(data.get("user_agent", defaults.user_agent)),
            request_timeout=float(data.get("request_timeout", defaults.request_timeout)),
            queue_size=int(data.get("queue_size", defaults.queue_size)),
            search_url=str(data.get("search_url", defaults.search_url)),
            raw_base_url=str(data.get("raw_base_url", defaults.raw_base_url)),
            version_prefix=str(data.get("version_prefix", defaults.version_prefix)),
            version_suffix=str(data.get("version_suffix", defaults.version_suffix)),
            doc_base_url=str(data.get("doc_base_url", defaults.doc_base_url)),
            api_url=str(data.get("api_url", defaults.api_url)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(config_path: Path | str) -> IngestionConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the gosince.yaml file

    Returns:
        IngestionConfig built from the `ingestion` section
    """
    config_path = Path(config_path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return IngestionConfig.from_dict(data.get("ingestion"))


# Global config instance
_default_config: IngestionConfig | None = None


def get_default_config() -> IngestionConfig:
    """
    Get the default configuration instance.

    Loads configuration from the path specified in GOSINCE_CONFIG_PATH
    environment variable, or falls back to config/gosince.yaml. The
    GOSINCE_API_URL environment variable overrides the lookup endpoint.
    """
    global _default_config

    if _default_config is None:
        config_path = os.environ.get("GOSINCE_CONFIG_PATH")
        if config_path:
            path = Path(config_path)
        else:
            project_root = Path(__file__).parent.parent.parent
            path = project_root / "config" / "gosince.yaml"

        _default_config = load_config(path) if path.exists() else IngestionConfig()

        api_url = os.environ.get("GOSINCE_API_URL")
        if api_url:
            _default_config.api_url = api_url

    return _default_config


def reset_default_config() -> None:
    """Reset the default configuration (useful for testing)."""
    global _default_config
    _default_config = None
