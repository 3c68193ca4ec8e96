"""Layered configuration for nichescope.

Loads and merges configuration from:
1. Default settings (built-in)
2. Config file (nichescope.yaml or an explicit path)
3. Environment (OPENAI_MODEL)
4. CLI parameters (override)
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "nichescope.yaml"

DEFAULT_CONFIG: dict = {
    "ai": {
        "provider": "openai",
        "temperature": 0.7,
        "timeout_seconds": 60,
        "retry_attempts": 3,
        "retry_delay_ms": 1000,
        "openai": {
            "model": "gpt-4o-mini",
            "api_key_env": "OPENAI_API_KEY",
            "max_tokens": 3000,
        },
        "azure-openai": {
            "endpoint": "",
            "deployment": "gpt-4o-mini",
            "api_version": "2024-10-01-preview",
            "api_key_env": "AZURE_OPENAI_KEY",
            "max_tokens": 3000,
        },
        "dry-run": {},
    },
    "personas": {
        "directory": None,
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Lists are replaced, not merged."""
    result = dict(base)
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_config_file(config_path: Optional[Path] = None) -> dict:
    """Load a YAML config file.

    Without an explicit path, looks for nichescope.yaml in the working
    directory. A missing default file yields an empty config; a missing
    explicit file is an error.
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME
        if not config_path.exists():
            return {}
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    content = config_path.read_text(encoding="utf-8-sig")
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def env_overrides() -> dict:
    """Overrides taken from environment variables."""
    overrides: dict = {}
    model = os.environ.get("OPENAI_MODEL", "").strip()
    if model:
        overrides.setdefault("ai", {}).setdefault("openai", {})["model"] = model
    return overrides


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    file_config = load_config_file(config_path)
    if file_config:
        config = deep_merge(config, file_config)

    env = env_overrides()
    if env:
        config = deep_merge(config, env)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    logger.debug("Effective provider: %s", config["ai"].get("provider"))
    return config


def get_persona_dir(config: dict) -> Optional[Path]:
    directory = (config.get("personas") or {}).get("directory")
    return Path(directory) if directory else None
