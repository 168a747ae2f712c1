"""
Brightness classification for choosing the synthesis gamma.

Dark images are synthesized from the original with gamma 1/g; brighter images
are contrast-enhanced first and synthesized with gamma g.
"""

from typing import Any, Dict, Optional, Tuple
import numpy as np
import cv2

from .io import convert_to_uint8


def mean_value_brightness(img: np.ndarray) -> float:
    """
    Mean of the HSV value channel.

    Args:
        img: RGB image with shape (H, W, 3)

    Returns:
        Mean V in [0, 255]; 0 for an empty image
    """
    img = convert_to_uint8(img)
    if img.size == 0:
        return 0.0
    img_hsv = cv2.cvtColor(img, cv2.COLOR_RGB2HSV)
    return float(np.mean(img_hsv[:, :, 2]))


def is_dark(img: np.ndarray, cfg: Optional[Dict[str, Any]] = None) -> bool:
    """
    Decide whether an image is dark.

    Args:
        img: RGB image
        cfg: ``brightness`` configuration section

    Returns:
        True if the mean V is at or below ``dark_threshold`` (default 85)

    Example:
        >>> if is_dark(img):
        ...     stack = synthesize_exposures(img, 1 / 2.2)
    """
    cfg = cfg or {}
    return mean_value_brightness(img) <= cfg.get('dark_threshold', 85.0)


def select_gamma(img: np.ndarray, gamma: float = 2.2,
                 cfg: Optional[Dict[str, Any]] = None) -> Tuple[float, bool]:
    """
    Pick the synthesis gamma for an image.

    Returns:
        Tuple of (gamma to use, dark flag): ``1 / gamma`` for dark images,
        ``gamma`` otherwise
    """
    dark = is_dark(img, cfg)
    return (1.0 / gamma if dark else gamma), dark
