"""
Diagram rendering settings.

Defaults are tuned to keep generated Mermaid text within what the Mermaid
renderer handles comfortably. They can be overridden from a YAML file:

    size_score_threshold: 5000
    max_nodes_for_detailed: 30
    detailed_component_limit: 10
    max_label_length: 40
    direction: LR
"""
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

VALID_DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")


@dataclass(frozen=True)
class DiagramSettings:
    size_score_threshold: int = 5000
    max_nodes_for_detailed: int = 30
    detailed_component_limit: int = 10
    max_label_length: int = 40
    direction: str = "TD"


DEFAULT_SETTINGS = DiagramSettings()


def settings_from_dict(data: Optional[Dict[str, Any]], base: DiagramSettings = DEFAULT_SETTINGS) -> DiagramSettings:
    """
    Applies a mapping of overrides on top of `base`.

    Unknown keys are logged and ignored.

    Raises:
        ValueError: If a value has the wrong type, is not positive, or names an
            unsupported direction.
    """
    if not data:
        return base

    known = {f.name: f for f in fields(DiagramSettings)}
    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown diagram setting: {key}")
            continue
        if key == "direction":
            direction = str(value).upper()
            if direction not in VALID_DIRECTIONS:
                raise ValueError(f"Invalid direction '{value}'. Expected one of {', '.join(VALID_DIRECTIONS)}.")
            overrides[key] = direction
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Setting '{key}' must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"Setting '{key}' must be positive, got {value}")
            overrides[key] = value
    return replace(base, **overrides)


def load_settings(config_path: Optional[str]) -> DiagramSettings:
    """
    Loads diagram settings from a YAML file.

    A missing path returns the defaults. An unreadable file, invalid YAML or a
    document that is not a mapping is logged and also yields the defaults.

    Args:
        config_path (Optional[str]): Path to the YAML settings file.

    Returns:
        DiagramSettings: The effective settings.

    Raises:
        ValueError: If the file is valid YAML but contains invalid values.
    """
    if not config_path:
        return DEFAULT_SETTINGS
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Settings file not found: {config_path}. Using defaults.")
        return DEFAULT_SETTINGS
    except yaml.YAMLError as e:
        logger.error(f"Error parsing settings file {config_path}: {e}. Using defaults.")
        return DEFAULT_SETTINGS

    if data is None:
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        logger.error(f"Settings file {config_path} must contain a mapping. Using defaults.")
        return DEFAULT_SETTINGS

    settings = settings_from_dict(data)
    logger.info(f"Loaded diagram settings from {config_path}: {settings}")
    return settings
