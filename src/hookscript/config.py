# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Configuration loading for hookscript.

Config file lookup order:
1. Explicit path (--config)
2. $HOOKSCRIPT_CONFIG (if set)
3. ./hookscript.yaml (optional)

Example hookscript.yaml:

    encoding: utf-8
    log_file: target/hooks.log
    class_path:
      - tools/lib
    globals:
      project: demo
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_FILE = Path("hookscript.yaml")

KNOWN_KEYS = ("encoding", "log_file", "class_path", "globals")


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""

    pass


def get_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """Return the config file to read, or None if no explicit one was given."""
    if config_path:
        return Path(config_path).expanduser()
    env_path = os.environ.get("HOOKSCRIPT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate the hookscript configuration.

    Args:
        config_path: Explicit config path, overrides $HOOKSCRIPT_CONFIG

    Returns:
        Config dict (empty if no config file is present)

    Raises:
        ConfigError: If an explicit config file is missing or the YAML is invalid
    """
    path = get_config_path(config_path)
    if path is None:
        if not DEFAULT_CONFIG_FILE.exists():
            return {}
        path = DEFAULT_CONFIG_FILE
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a YAML mapping")

    validate_config(data)
    return data


def validate_config(config: Dict[str, Any]) -> None:
    """Check value types of known keys. Unknown keys are allowed."""
    encoding = config.get("encoding")
    if encoding is not None and not isinstance(encoding, str):
        raise ConfigError(f"encoding must be a string, got: {encoding!r}")

    log_file = config.get("log_file")
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError(f"log_file must be a string, got: {log_file!r}")

    class_path = config.get("class_path")
    if class_path is not None:
        if not isinstance(class_path, list) or not all(isinstance(p, str) for p in class_path):
            raise ConfigError("class_path must be a list of paths")

    globals_ = config.get("globals")
    if globals_ is not None and not isinstance(globals_, dict):
        raise ConfigError("globals must be a mapping of variable names to values")
