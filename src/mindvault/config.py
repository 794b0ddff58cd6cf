"""Configuration management for mindvault."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG = {
    "store_path": "~/.mindvault/thoughts.json",
    "storage_backend": "json",
    "claude_model": "claude-sonnet-4-20250514",
    "ai_mode": False,
    "log_level": "WARNING",
    "clustering": {"min_cluster_size": 2, "max_clusters": 8, "similarity_threshold": 0.25},
    "recap": {"window_days": 7},
    "search": {"min_similarity": 0.1},
    "related": {"limit": 5, "min_similarity": 0.2},
}

_TRUTHY = {"1", "true", "yes", "on"}


def _find_config_file() -> Path | None:
    """Look for config.yaml in standard locations."""
    candidates = [
        Path.cwd() / "config" / "config.yaml",
        Path.cwd() / "config.yaml",
        Path.home() / ".mindvault" / "config.yaml",
    ]
    for p in candidates:
        if p.exists():
            return p
    return None


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration, merging defaults with file and env vars."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else _find_config_file()
    if path and path.exists():
        with open(path) as f:
            file_cfg = yaml.safe_load(f) or {}
        _deep_merge(cfg, file_cfg)

    # Env overrides
    if api_key := os.environ.get("ANTHROPIC_API_KEY"):
        cfg["claude_api_key"] = api_key
    if ai_mode := os.environ.get("MINDVAULT_AI_MODE"):
        cfg["ai_mode"] = ai_mode.strip().lower() in _TRUTHY
    if log_level := os.environ.get("MINDVAULT_LOG_LEVEL"):
        cfg["log_level"] = log_level.upper()

    cfg["store_path"] = str(Path(cfg["store_path"]).expanduser().resolve())

    return cfg


def _deep_merge(base: dict, override: dict) -> None:
    """Merge override into base in-place."""
    for k, v in override.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
