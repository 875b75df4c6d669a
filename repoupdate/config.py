#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import logging
import sys

# Configure logging
stderr_handler = logging.StreamHandler(sys.stderr) # Default to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[stderr_handler]
)
logger = logging.getLogger("repoupdate")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPOUPDATE_CONFIG environment variable
    2. ~/.repoupdate/ directory
    """
    if 'REPOUPDATE_CONFIG' in os.environ:
        path = Path(os.environ['REPOUPDATE_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.repoupdate'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                import yaml
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() in ['.toml']:
            # tomllib is read-only
            import toml
            with open(config_path, 'w') as f:
                toml.dump(config, f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            import yaml
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except Exception as e:
        logger.error(f"Error saving config to {config_path}: {e}")


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "base_directory": "",  # Working copy to update; empty means cwd
            "git_executable": "git",
            "remote": "origin",
            "timeout_seconds": 0  # 0 waits for git indefinitely
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REPOUPDATE_SECTION_KEY
    For example: REPOUPDATE_GENERAL_BASE_DIRECTORY=/opt/myapp
    """
    env_prefix = "REPOUPDATE_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == 'REPOUPDATE_CONFIG':
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key matching the remaining parts wins
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config


def configure_logging(level=None, config=None):
    """Apply the log level and format to the repoupdate logger.

    An explicit ``level`` wins over the ``logging.level`` config value;
    ``logging.format`` replaces the stderr handler's format.
    """
    if level is None:
        level = (config or {}).get("logging", {}).get("level", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    fmt = (config or {}).get("logging", {}).get("format")
    if fmt:
        stderr_handler.setFormatter(logging.Formatter(fmt))
    return level


@dataclass
class UpdateConfig:
    """Explicit settings threaded into the git client and repository."""
    base_dir: str
    git_executable: str = "git"
    remote: str = "origin"
    timeout: Optional[float] = None

    @classmethod
    def from_config(cls, config: dict, base_dir: Optional[str] = None) -> 'UpdateConfig':
        """Build from a config dict; an explicit ``base_dir`` overrides it."""
        general = config.get("general", {})
        directory = base_dir or general.get("base_directory") or os.getcwd()
        timeout = general.get("timeout_seconds") or None
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid general.timeout_seconds: {timeout!r}") from e
        return cls(
            base_dir=str(Path(directory).expanduser()),
            git_executable=general.get("git_executable") or "git",
            remote=general.get("remote") or "origin",
            timeout=timeout,
        )
