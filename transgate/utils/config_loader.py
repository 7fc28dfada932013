"""Configuration loading and management."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml)

    Returns:
        Configuration dictionary with environment overrides applied
    """
    load_dotenv()

    if config_path is None:
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            return override_with_env(get_default_config())

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    config = get_default_config()
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values

    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with environment variables."""
    env_mappings = {
        "OPENAI_API_KEY": ["provider", "api_key"],
        "OPENAI_MODEL": ["provider", "model"],
        "TRANSGATE_PROVIDER_TIMEOUT": ["provider", "timeout"],
        "TRANSGATE_MAX_CONCURRENT": ["gateway", "max_concurrent"],
        "TRANSGATE_MAX_RETRY_BATCH": ["gateway", "max_retry_batch"],
        "TRANSGATE_CACHE_PATH": ["cache", "path"],
        "TRANSGATE_CACHE_TTL_DAYS": ["cache", "ttl_days"],
    }

    for env_var, path in env_mappings.items():
        value = os.getenv(env_var)
        if value:
            current = config
            for key in path[:-1]:
                if key not in current:
                    current[key] = {}
                current = current[key]
            current[path[-1]] = value

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "provider": {
            "backend": "openai",
            "model": "gpt-4o-mini",
            "api_key": "",
            "timeout": 60.0,
            "max_tokens": 2000
        },
        "gateway": {
            "max_concurrent": 4,
            "max_retry_batch": 50,
            "default_target": "en"
        },
        "cache": {
            "path": ".cache/translations.json",
            "ttl_days": 30
        },
        "logging": {
            "level": "INFO",
            "file": None
        }
    }
