"""Configuration loading for the support widget.

Layered configuration:
1. Explicit path argument (highest precedence)
2. Environment variable SUPPORTBOT_CONFIG
3. Fallback to "config/default.yaml"

Values can be overridden with environment variables prefixed ``SUPPORTBOT__``
(e.g. SUPPORTBOT__WIDGET__REPLY_DELAY_MS=0).
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "SUPPORTBOT__"

DEFAULTS: Dict[str, Any] = {
    "widget": {"skin": "generic", "reply_delay_ms": 1500},
    "tracking": {"path": None},
    "server": {"cors_origins": ["*"], "max_sessions": 1000},
    "logging": {"level": "INFO"},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _coerce(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        # SUPPORTBOT__WIDGET__SKIN -> cfg["widget"]["skin"]
        parts = key[len(ENV_PREFIX):].lower().split("__")
        sub = cfg
        for p in parts[:-1]:
            if not isinstance(sub.get(p), dict):
                sub[p] = {}
            sub = sub[p]
        sub[parts[-1]] = _coerce(value)
    return cfg


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load YAML configuration merged over :data:`DEFAULTS`.

    Parameters
    ----------
    path : str | None
        Optional path to a configuration file. If not provided, the
        environment variable ``SUPPORTBOT_CONFIG`` is consulted, then
        ``config/default.yaml``.

    Returns
    -------
    Dict[str, Any]
        Configuration dictionary with environment overrides applied.
    """
    if path is None:
        path = os.environ.get("SUPPORTBOT_CONFIG", "config/default.yaml")

    path_obj = Path(path)
    if not path_obj.exists():
        logger.warning("Config file not found at %s, using defaults", path_obj)
        return _apply_env_overrides(copy.deepcopy(DEFAULTS))

    with path_obj.open("r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Failed to parse config file {path_obj}: {e}") from e

    if not isinstance(loaded, dict):
        raise RuntimeError(f"Invalid config format in {path_obj}, expected a mapping.")

    return _apply_env_overrides(_merge(DEFAULTS, loaded))
