"""
Gamma correction through a 256-entry lookup table.
"""

import math

import numpy as np
import cv2

from .exceptions import InvalidConfigurationError
from .io import convert_to_uint8


def build_gamma_lut(g: float) -> np.ndarray:
    """
    Build a lookup table mapping each 8-bit level to ``255 * (level/255)^g``.

    Args:
        g: Gamma exponent, must be positive

    Returns:
        Monotonic uint8 table with 256 entries

    Raises:
        InvalidConfigurationError: If ``g`` is not a positive finite number
    """
    if isinstance(g, bool) or not isinstance(g, (int, float)) or not math.isfinite(g) or g <= 0:
        raise InvalidConfigurationError(f"Gamma must be a positive number, got {g!r}")

    levels = np.arange(256, dtype=np.float64) / 255.0
    table = np.rint(np.power(levels, g) * 255.0)
    return table.clip(0, 255).astype(np.uint8)


def apply_gamma(img: np.ndarray, g: float) -> np.ndarray:
    """
    Apply gamma correction to every channel of an image.

    Args:
        img: uint8 image (any channel count), or float image in [0, 1]
        g: Gamma exponent

    Returns:
        New gamma-corrected uint8 image; the input is not modified

    Example:
        >>> darker = apply_gamma(img, 2.2)
        >>> restored = apply_gamma(darker, 1 / 2.2)
    """
    lut = build_gamma_lut(g)
    img = convert_to_uint8(img)
    if img.size == 0:
        return img.copy()
    return cv2.LUT(img, lut)
