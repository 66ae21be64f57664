"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

DEFAULT_ANALYSIS = {
    "classify": {
        "batch_size": 100,
        "max_text_chars": 20000,
    },
    "cluster": {
        "enabled": True,
        "similarity_threshold": 0.2,
        "min_sources": 2,
        "competing_min_leans": 3,
        "window_hours": 24,
        "max_articles": 500,
    },
    "triangulate": {
        "enabled": True,
        "days_back": 3,
        "max_articles": 50,
        "min_articles": 2,
        "competing_only": True,
    },
    "coverage": {
        "enabled": True,
        "bridge_below": 0.3,
        "wedge_above": 0.6,
    },
}


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        match = pattern.search(value)
        if match:
            if match.group(0) == value:
                return os.environ.get(match.group(1), "")
            return pattern.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _resolve_env_vars(raw)


def get_active_sources(config: dict) -> list[str]:
    """Return list of enabled source names."""
    sources = config.get("sources", {})
    return [name for name, cfg in sources.items() if cfg.get("enabled", False)]


def get_analysis_config(config: dict, stage: str) -> dict:
    """Settings for one analysis stage, with defaults filled in."""
    merged = dict(DEFAULT_ANALYSIS.get(stage, {}))
    merged.update(config.get("analysis", {}).get(stage, {}) or {})
    return merged


def get_db_path(config: dict) -> str:
    """Get database path from config."""
    return config.get("database", {}).get("path", "data/hygiene.db")


def get_terms_path(config: dict) -> str | None:
    """Term dictionary override; None means the bundled dictionary."""
    return config.get("terms", {}).get("path") or None


def get_retention_days(config: dict) -> int:
    return int(config.get("retention", {}).get("days", 90))
