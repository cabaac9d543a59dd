"""YAML configuration loading for Gerber runs."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Union

import yaml

BASE_CONFIG: Dict[str, Any] = {
    'run': {
        'log_level': 'INFO',
        'log_file': None,
        'logging_config': None,
    },
    'analysis': {
        'lookback': 0,
        'threshold': 0.5,
        'lookback_from_start': False,
        'use_parallel': True,
        'num_threads': None,
        'undefined_policy': 'raise',
        'show_progress': False,
        'update_freq': 1,
    },
}


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def _merge_extends(path: Path) -> Dict[str, Any]:
    """Load ``path`` and resolve its ``extends`` chain, parents first."""
    with open(path, 'r', encoding='utf-8') as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"config root must be a mapping: {path}")
    parent = cfg.pop('extends', None)
    if parent:
        parent_path = Path(parent)
        if not parent_path.is_absolute():
            parent_path = path.parent / parent_path
        return _merge(_merge_extends(parent_path), cfg)
    return cfg


def load_config(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """Return ``BASE_CONFIG`` overlaid with the YAML file at ``path`` if given."""
    if path is None:
        return copy.deepcopy(BASE_CONFIG)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"config not found: {path}")
    return _merge(BASE_CONFIG, _merge_extends(path))
