"""Named formatter presets and YAML configuration files.

Built-in presets live next to this module as YAML documents of the form::

    name: ssms
    description: ...
    options:
      use_as_keyword: true

A user configuration file has the same ``options`` mapping and may name a
``preset`` to start from.
"""

import os
from typing import Any, Dict, List, Optional

import yaml

from sqlpolish.exceptions import (
    FormatterConfigError,
    PresetNotFoundError,
    SQLPolishError,
)
from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.logging import get_logger

logger = get_logger(__name__)

BUILTIN_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "builtin")
PRESET_EXTENSION = ".yaml"


def list_presets() -> List[str]:
    """Return the names of the built-in presets, sorted."""
    return sorted(
        filename[: -len(PRESET_EXTENSION)]
        for filename in os.listdir(BUILTIN_DIR)
        if filename.endswith(PRESET_EXTENSION)
    )


def read_preset(name: str) -> Dict[str, Any]:
    """Read the raw preset document.

    Args:
        name: Preset name

    Returns:
        Dict with ``name``, ``description`` and ``options`` keys

    Raises:
        PresetNotFoundError: If no preset has that name
    """
    available = list_presets()
    if name not in available:
        raise PresetNotFoundError(name, available)

    preset_path = os.path.join(BUILTIN_DIR, f"{name}{PRESET_EXTENSION}")
    logger.debug(f"Loading preset from: {preset_path}")
    with open(preset_path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}

    return {
        "name": document.get("name", name),
        "description": document.get("description", ""),
        "options": document.get("options") or {},
    }


def load_preset(name: str, overrides: Optional[Dict[str, Any]] = None) -> FormatterConfig:
    """Build a validated config from a preset plus optional overrides.

    Args:
        name: Preset name
        overrides: Options applied on top of the preset

    Returns:
        FormatterConfig for the preset

    Raises:
        PresetNotFoundError: If no preset has that name
        FormatterConfigError: If an override is invalid
    """
    options = dict(read_preset(name)["options"])
    options.update(overrides or {})
    return FormatterConfig.from_dict(options)


def load_config_file(path: str) -> FormatterConfig:
    """Load a YAML configuration file.

    The file may contain a ``preset`` key naming the starting preset and an
    ``options`` mapping of overrides.

    Args:
        path: Path to the YAML file

    Returns:
        Validated FormatterConfig

    Raises:
        SQLPolishError: If the file is missing or not a mapping
        PresetNotFoundError: If the named preset does not exist
        FormatterConfigError: If an option is invalid
    """
    if not os.path.exists(path):
        raise SQLPolishError(
            f"Configuration file not found: {path}",
            ["Check the path passed to --config"],
        )

    with open(path, "r", encoding="utf-8") as f:
        try:
            document = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SQLPolishError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(document, dict):
        raise SQLPolishError(
            f"Configuration file {path} must contain a mapping",
            ["Use 'preset: <name>' and an 'options:' mapping"],
        )

    unknown_keys = set(document) - {"preset", "options"}
    if unknown_keys:
        logger.warning(
            f"Ignoring unknown keys in {path}: {', '.join(sorted(unknown_keys))}"
        )

    options = document.get("options") or {}
    if not isinstance(options, dict):
        raise FormatterConfigError("options", options, "a mapping of option names")

    preset_name = document.get("preset", "default")
    logger.debug(f"Config file {path} uses preset '{preset_name}'")
    return load_preset(preset_name, options)
