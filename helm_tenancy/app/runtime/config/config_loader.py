"""Configuration loading with environment variable substitution."""

import os
from pathlib import Path
from typing import Any, Literal, overload

import yaml
from loguru import logger
from pydantic import ValidationError

from helm_tenancy.app.runtime.config.config_data import ConfigData
from helm_tenancy.app.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path(os.getenv("HELM_TENANCY_CONFIG", "config.yaml"))


@overload
def load_config(
    file_path: Path | None = ..., *, processed: Literal[False]
) -> dict[str, Any]: ...


@overload
def load_config(
    file_path: Path | None = ..., processed: Literal[True] = ...
) -> ConfigData: ...


def load_config(
    file_path: Path | None = None, processed: bool = True
) -> ConfigData | dict[str, Any]:
    """
    Load the service configuration from YAML.

    Args:
        file_path: Path to the YAML file (default: CONFIG_PATH)
        processed: Whether to substitute environment variables and validate.
                  - True (default): substitute env vars and validate as ConfigData
                  - False: return the raw dict without validation or substitution

    Returns:
        ConfigData if processed, raw dict otherwise

    Raises:
        ValueError: If required environment variables are missing, validation
                   fails, or the YAML has no top-level 'config' key

    A missing file is not an error when processing: defaults apply, so the
    service can run from environment variables alone.

    Environment-Specific Behavior:
        Reads APP_ENVIRONMENT (default: 'development') and copies variables
        prefixed with the uppercased environment name (e.g. PRODUCTION_HELM_BINARY)
        to their unprefixed names before substitution.
    """
    path = file_path or CONFIG_PATH
    if not path.exists():
        if not processed:
            raise FileNotFoundError(path)
        logger.info(f"No configuration file at {path}, using defaults")
        return ConfigData()

    content = path.read_text()

    if not processed:
        return yaml.safe_load(content) or {}

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    prefix = f"{env_mode.upper()}_"
    overrides = [(var, value) for var, value in os.environ.items() if var.startswith(prefix)]
    logger.debug(f"Override keys: {[var for var, _ in overrides]}")
    for var_name, var_value in overrides:
        os.environ[var_name[len(prefix) :]] = var_value

    content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        return ConfigData(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
