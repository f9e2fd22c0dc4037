#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import yaml

from .domain import AttributeCatalog, DEFAULT_CATALOG
from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("repoparse")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPOPARSE_CONFIG environment variable
    2. ~/.repoparse/ directory
    """
    # Check for environment variable override
    if 'REPOPARSE_CONFIG' in os.environ:
        path = Path(os.environ['REPOPARSE_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.repoparse'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return config_dir / 'config.json'


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file, defaults and environment."""
    config_path = Path(path) if path else get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        logger.debug(f"Loaded config from {config_path}")
        # Merge file config with defaults
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "parse": {
            "header": "FILENAME",   # Token starting each desc block
            "search_by": "Name",    # Field the search expression is applied to
            "delimiter": "\t"       # Separator for --list output
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        },
        # Extra desc attributes, e.g. {"XDATA": ["array", "XData"]}
        "attributes": {}
    }


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override_config into a copy of base_config."""
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def _typed_env_value(value):
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REPOPARSE_SECTION_KEY
    For example: REPOPARSE_PARSE_SEARCH_BY=Version

    Only keys already present in a section are overridden.
    """
    env_prefix = "REPOPARSE_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        section_name, _, key = env_key[len(env_prefix):].lower().partition('_')
        section = config.get(section_name)
        if isinstance(section, dict) and key in section:
            section[key] = _typed_env_value(value)

    return config


def catalog_from_config(config: Dict[str, Any]) -> AttributeCatalog:
    """
    Build the attribute catalog: the default catalog plus configured attributes.

    Raises:
        ConfigError: an attribute entry is not a [kind, label] pair
    """
    extra = config.get("attributes") or {}
    if not extra:
        return DEFAULT_CATALOG
    try:
        return DEFAULT_CATALOG.extend(extra)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid attribute definition in config: {e}") from e


def configure_logging(config: Dict[str, Any], verbose: bool = False) -> None:
    """Apply the logging section of the config to the repoparse logger."""
    logging_config = config.get("logging", {})
    level = "DEBUG" if verbose else str(logging_config.get("level", "WARNING")).upper()
    try:
        logger.setLevel(level)
    except ValueError as e:
        raise ConfigError(f"Invalid logging level in config: {e}") from e

    fmt = logging_config.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))
