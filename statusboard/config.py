#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Optional

import logging
import sys

import yaml

from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger("statusboard")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. STATUSBOARD_CONFIG environment variable
    2. ~/.statusboard/ directory
    """
    if 'STATUSBOARD_CONFIG' in os.environ:
        path = Path(os.environ['STATUSBOARD_CONFIG'])
        if path.exists():
            return path

    statusboard_dir = Path.home() / '.statusboard'
    for filename in CONFIG_FILENAMES:
        path = statusboard_dir / filename
        if path.exists() and path.stat().st_size > 10:  # Not empty/trivial
            return path

    return statusboard_dir / 'config.json'


def read_config_file(config_path: Path) -> dict:
    """Parse a JSON, TOML or YAML config file."""
    suffix = config_path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                data = tomllib.load(f)
        elif suffix in ('.yaml', '.yml'):
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        else:
            with open(config_path, 'r') as f:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def load_config(config_path: Optional[Path] = None) -> dict:
    """
    Load configuration.

    Defaults are merged with the config file (explicit path, or the one
    found by get_config_path()), then STATUSBOARD_* environment overrides
    are applied. GITHUB_TOKEN fills github.token when nothing else set it.

    Raises:
        ConfigError: If the file exists but cannot be parsed
    """
    if config_path is None:
        config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        config = merge_configs(config, read_config_file(config_path))
        logger.debug(f"Loaded config from {config_path}")

    config = apply_env_overrides(config)

    if not config['github'].get('token') and os.environ.get('GITHUB_TOKEN'):
        config['github']['token'] = os.environ['GITHUB_TOKEN']

    return config


def get_default_config() -> dict:
    """Get default configuration."""
    return {
        "db": "~/.statusboard/index.db",
        "title": "StatusBoard",
        "description": "",
        "orgs": [],
        "projects": [],
        "github": {
            "token": "",
            "timeout_seconds": 30,
            "rate_limit": {
                "max_retries": 3,
                "max_delay_seconds": 60
            }
        },
        "npm": {
            "registry_url": "https://registry.npmjs.org",
            "timeout_seconds": 30
        },
        "index": {
            "max_projects": 50,
            "issue_page_size": 100,
            "activity_limit": 100,
            "commit_limit": 100
        },
        "logging": {
            "level": "INFO"
        }
    }


def configure_logging(config: dict, verbose: bool = False) -> None:
    """Apply the configured log level to the statusboard logger."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = str(config.get('logging', {}).get('level', 'INFO')).upper()
        level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)


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
    Environment variables follow the pattern: STATUSBOARD_SECTION_SUBSECTION_KEY
    For example: STATUSBOARD_INDEX_MAX_PROJECTS=20
    """
    env_prefix = "STATUSBOARD_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
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
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
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
                # Path conflict: env var is longer but we found a non-dict value
                break

    return config
