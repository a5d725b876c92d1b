"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import PipelineConfig


def load_config(config_path: Path | str) -> PipelineConfig:
    """
    Load and validate pipeline configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated PipelineConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        yaml_content = f.read()

    return pydantic_yaml.parse_yaml_raw_as(PipelineConfig, yaml_content)


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> PipelineConfig:
    """
    Load config from YAML and apply dotted-key overrides.

    Used by CLI flags such as ``--organism`` and ``--page-size`` that
    override values from the config file. ``None`` values are skipped so
    unset flags leave the file value in place.

    Args:
        config_path: Path to YAML configuration file
        overrides: Mapping like {"batch.page_size": 100, "calibration.ss.threshold": 2}

    Returns:
        Validated PipelineConfig with overrides applied

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If final config is invalid
    """
    config_dict = load_config(config_path).model_dump()

    for key, value in overrides.items():
        if value is None:
            continue
        *parents, leaf = key.split(".")
        target = config_dict
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value

    return PipelineConfig.model_validate(config_dict)
