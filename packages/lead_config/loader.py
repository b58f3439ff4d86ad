"""Configuration loader for the lead collection flow.

The flow (questions, retry policy, agent voices, turn timings) is read
from YAML and validated against LeadFlowConfig. Relative paths are looked
up in the working directory first, then in the project root, so
`LEAD_FLOW_CONFIG_PATH=configs/lead_flow.yaml` works from anywhere.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from .schemas import LeadFlowConfig

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = "configs/lead_flow.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def resolve_config_path(config_path: Union[str, Path]) -> Path:
    """Resolve a configuration path.

    Args:
        config_path: Absolute path, or path relative to the working directory
            or the project root

    Returns:
        The first existing candidate, or the path as given
    """
    path = Path(config_path).expanduser()
    if path.is_absolute() or path.exists():
        return path

    candidate = PROJECT_ROOT / path
    if candidate.exists():
        return candidate
    return path


def load_config_from_yaml(config_path: Union[str, Path]) -> LeadFlowConfig:
    """Load and validate the flow configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated LeadFlowConfig instance

    Raises:
        ConfigurationError: If the file cannot be read or validation fails
        FileNotFoundError: If the configuration file doesn't exist
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if not path.is_file():
        raise ConfigurationError(f"Configuration path is not a file: {config_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file: {e}") from e

    if config_data is None:
        raise ConfigurationError("Configuration file is empty")

    if not isinstance(config_data, dict):
        raise ConfigurationError("Configuration must be a YAML object (dict)")

    config = load_config_from_dict(config_data)
    logger.info("Loaded lead flow with %d steps from %s", config.step_count, path)
    return config


def load_config_from_dict(config_dict: Dict[str, Any]) -> LeadFlowConfig:
    """Load and validate the flow configuration from a dictionary.

    Args:
        config_dict: Configuration dictionary

    Returns:
        Validated LeadFlowConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return LeadFlowConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
