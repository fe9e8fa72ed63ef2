"""Settings loading from ``chartops.yaml`` and the environment."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from chartops.runtime.config.config_data import Settings
from chartops.runtime.config.config_utils import is_truthy, substitute_env_vars

CONFIG_PATH = Path("chartops.yaml")
ENV_PREFIX = "CHARTOPS_"


def _read_config_file(file_path: Path) -> dict[str, Any]:
    if not file_path.exists():
        logger.debug(f"No configuration file at {file_path}, using defaults")
        return {}

    content = substitute_env_vars(file_path.read_text())
    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    config = loaded["config"] or {}
    if not isinstance(config, dict):
        raise ValueError("Invalid YAML structure: 'config' must be a mapping")
    return config


def load_settings(
    file_path: Path = CONFIG_PATH, environ: Mapping[str, str] | None = None
) -> Settings:
    """
    Load settings from a YAML file with environment overrides.

    Args:
        file_path: Path to the YAML file (default: chartops.yaml, optional)
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated Settings

    Raises:
        ValueError: If the YAML is malformed, a referenced environment
                    variable is missing, or validation fails

    YAML Structure:
        The YAML file must have a top-level 'config:' key whose entries are
        Settings field names.

    Environment:
        CHARTOPS_<FIELD> overrides the matching field (e.g. CHARTOPS_DB_LOCAL_PORT).
        DEBUG set to a truthy value enables debug mode.
    """
    env = os.environ if environ is None else environ

    values = _read_config_file(file_path)

    overrides = {
        var[len(ENV_PREFIX) :].lower(): value
        for var, value in env.items()
        if var.startswith(ENV_PREFIX)
    }
    if overrides:
        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
    values.update(overrides)

    if is_truthy(env.get("DEBUG")):
        values["debug"] = True

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
