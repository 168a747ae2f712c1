"""
Configuration handling for the exposure enhancement pipeline.

Configuration is a nested dictionary with one section per stage. Stages read
their section with ``cfg.get(key, default)`` so partial dictionaries work;
``validate_config`` checks a full configuration before any pixels are touched.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'synthesis': {
        'regions': 7,
        'gamma': 2.2,
        'target_gray': 0.18,
        'eps': 0.003,
        'downsample_scale': 0.05,
    },
    'fusion': {
        'backend': 'exposedness',
        'radius': 12,
        'eps': 0.25,
        'sigma_l': 0.5,
        'sigma_g': 0.2,
        'sigma_d': 0.12,
        'alpha': 1.1,
        'detail_kernel': 7,
    },
    'brightness': {
        'dark_threshold': 85.0,
    },
    'contrast': {
        'clahe_clip_limit': 2.0,
        'clahe_tile_grid_size': 8,
    },
    'pipeline': {
        'final_merge': True,
        'final_backend': 'mertens',
    },
}

FUSION_BACKENDS = ('exposedness', 'mertens')


def default_config() -> Dict[str, Dict[str, Any]]:
    """Return a fresh copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``overrides`` into a copy of ``base``.

    Args:
        base: Configuration providing defaults
        overrides: Partial configuration whose values win

    Returns:
        New merged configuration dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load a JSON configuration file on top of the defaults.

    Args:
        path: Path to a JSON file, or None for the defaults only

    Returns:
        Validated configuration dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidConfigurationError: If the file content is malformed or invalid

    Example:
        >>> cfg = load_config("enhance.json")
        >>> cfg['synthesis']['regions']
        7
    """
    cfg = default_config()
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            with open(path) as f:
                overrides = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"Could not parse config {path}: {e}") from e
        if not isinstance(overrides, dict):
            raise InvalidConfigurationError(f"Config root must be an object: {path}")
        cfg = merge_config(cfg, overrides)
        logger.debug("Loaded configuration from %s", path)
    validate_config(cfg)
    return cfg


def _require_positive(section: Dict[str, Any], name: str, key: str) -> None:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise InvalidConfigurationError(f"{name}.{key} must be a positive number, got {value!r}")


def validate_regions(regions: Any) -> int:
    """Check a luminance band count and return it as an int."""
    if isinstance(regions, bool) or not isinstance(regions, int) or regions < 1:
        raise InvalidConfigurationError(f"regions must be an integer >= 1, got {regions!r}")
    return regions


def validate_config(cfg: Dict[str, Any]) -> None:
    """
    Validate a full configuration dictionary.

    Raises:
        InvalidConfigurationError: On the first invalid value found
    """
    synthesis = cfg.get('synthesis', {})
    validate_regions(synthesis.get('regions'))
    for key in ('gamma', 'target_gray', 'eps', 'downsample_scale'):
        _require_positive(synthesis, 'synthesis', key)
    if synthesis['downsample_scale'] > 1:
        raise InvalidConfigurationError("synthesis.downsample_scale must be <= 1")

    fusion = cfg.get('fusion', {})
    if fusion.get('backend') not in FUSION_BACKENDS:
        raise InvalidConfigurationError(
            f"Unknown fusion.backend: {fusion.get('backend')!r}. Supported: {', '.join(FUSION_BACKENDS)}")
    for key in ('radius', 'eps', 'sigma_l', 'sigma_g', 'sigma_d', 'alpha', 'detail_kernel'):
        _require_positive(fusion, 'fusion', key)

    pipeline = cfg.get('pipeline', {})
    if not isinstance(pipeline.get('final_merge'), bool):
        raise InvalidConfigurationError("pipeline.final_merge must be true or false")
    if pipeline.get('final_backend') not in FUSION_BACKENDS:
        raise InvalidConfigurationError(
            f"Unknown pipeline.final_backend: {pipeline.get('final_backend')!r}")

    _require_positive(cfg.get('brightness', {}), 'brightness', 'dark_threshold')

    contrast = cfg.get('contrast', {})
    for key in ('clahe_clip_limit', 'clahe_tile_grid_size'):
        _require_positive(contrast, 'contrast', key)
