"""Load run configuration from an optional mcpt.yaml file."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mcpt.models.config import RunConfig

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "mcpt.yaml"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


def load_run_config(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    *,
    cwd: Path | None = None,
) -> RunConfig:
    """Build the run configuration.

    Values come from, in increasing priority: model defaults, the YAML file,
    then ``overrides`` (usually explicit CLI flags; ``None`` values are
    ignored so unset flags don't mask file values).

    Args:
        config_path: Explicit config file. When omitted, ``mcpt.yaml`` in
            ``cwd`` is used if it exists.
        overrides: Values that take precedence over the file.
        cwd: Directory used to look up the default config file.

    Raises:
        ConfigError: If an explicit file is missing, or any file is not valid
            YAML or does not validate against RunConfig.

    """
    values: dict[str, Any] = {}

    if config_path is None:
        default_path = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
        if default_path.is_file():
            config_path = default_path
    elif not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    if config_path is not None:
        log.debug("Loading configuration from %s", config_path)
        values.update(_read_yaml(config_path))

    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return RunConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data
