"""Configuration loader.

Reads configuration files in YAML format and returns a dictionary.
The shipped defaults live in `configs/default.yaml` at the project
root.  Two environment variables override the viewer section so that
keys never have to be committed:

``SCANPEOPLE_SDK_KEY``
    SDK key passed to the viewer backend.
``SCANPEOPLE_MODEL_SID``
    Scan (model) identifier to open on start-up.
"""

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import ConfigurationError

ENV_OVERRIDES = {
    "SCANPEOPLE_SDK_KEY": "sdk_key",
    "SCANPEOPLE_MODEL_SID": "model_sid",
}


def load_config(path: str) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist.

    Raises
    ------
    ConfigurationError
        If the file exists but is not valid YAML or is not a mapping.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        return {}
    try:
        with open(cfg_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {cfg_path}", {"error": str(exc)}) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {cfg_path}")
    return data


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``config`` with viewer settings taken from the environment."""
    merged = dict(config)
    viewer = dict(merged.get("viewer") or {})
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            viewer[key] = value
    merged["viewer"] = viewer
    return merged
