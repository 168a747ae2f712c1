"""
Synthetic multi-exposure generation from a single image.

The gamma-corrected image is segmented into luminance bands on a downsampled
copy. Each band yields an exposure-compensation gain from its log-average
luminance, and each gain is tone-mapped over the full-resolution luminance to
produce one synthetic exposure. The stack holds one exposure per band plus the
original.

Reference:
    Y. Kinoshita and H. Kiya, "Automatic exposure compensation using an image
    segmentation method for single-image-based multi-exposure fusion",
    APSIPA Transactions on Signal and Information Processing, 7, E22, 2018.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import cv2

from .exceptions import InvalidConfigurationError
from .gamma import apply_gamma
from .io import convert_to_uint8
from .region_stats import RegionStatistics
from .segmentation import segment_luminance

logger = logging.getLogger(__name__)


def extract_luma(img: np.ndarray) -> np.ndarray:
    """Y channel of the YUV transform of an RGB uint8 image."""
    return cv2.cvtColor(img, cv2.COLOR_RGB2YUV)[:, :, 0]


def downsample(img: np.ndarray, scale: float) -> np.ndarray:
    """
    Shrink an image by a linear scale factor, keeping at least one pixel.

    Args:
        img: Image to shrink
        scale: Linear factor in (0, 1]

    Returns:
        Resized image
    """
    h, w = img.shape[:2]
    size = (max(1, int(round(w * scale))), max(1, int(round(h * scale))))
    return cv2.resize(img, size, interpolation=cv2.INTER_LINEAR)


def tone_map_exposure(lum: np.ndarray, gain: float, eps: float = 0.003) -> np.ndarray:
    """
    Per-pixel multiplier turning ``lum`` into a tone-mapped exposure.

    With ``E = lum * gain``, ``n1 = E / max(E) + 1`` and ``n2 = E / (E + 1)``,
    the multiplier is ``n1 * n2 / (lum + eps)``.

    Args:
        lum: Full-resolution luminance as float (0-255 scale)
        gain: Exposure-compensation gain of one region
        eps: Floor added to the luminance divisor

    Returns:
        float32 multiplier map with the shape of ``lum``
    """
    lum = lum.astype(np.float32)
    exposure = lum * np.float32(gain)
    peak = float(exposure.max()) if exposure.size else 0.0
    if peak <= 0:
        # E is zero everywhere, so n2 is zero and any peak gives the same result
        peak = 1.0
    n1 = exposure / np.float32(peak) + 1.0
    n2 = exposure / (exposure + 1.0)
    return (n1 * n2) / (lum + np.float32(eps))


def render_exposure(corrected: np.ndarray, multiplier: np.ndarray, g: float) -> np.ndarray:
    """
    Apply a tone-mapping multiplier to every colour channel and undo the gamma.

    Args:
        corrected: Gamma-corrected RGB uint8 image
        multiplier: Map from ``tone_map_exposure``
        g: Gamma the image was corrected with

    Returns:
        Synthetic RGB uint8 exposure
    """
    exposure = corrected.astype(np.float32) * multiplier[:, :, np.newaxis] * 255.0
    exposure = np.rint(exposure).clip(0, 255).astype(np.uint8)
    return apply_gamma(exposure, 1.0 / g)


def synthesize_exposures(img: np.ndarray, g: Optional[float] = None,
                         cfg: Optional[Dict[str, Any]] = None) -> List[np.ndarray]:
    """
    Generate a synthetic exposure stack from one RGB image.

    Args:
        img: RGB image (H, W, 3), uint8 or float in [0, 1]; not modified
        g: Gamma applied before segmentation; defaults to ``cfg['gamma']``
        cfg: ``synthesis`` configuration section

    Returns:
        List of ``regions + 1`` RGB uint8 images: one synthetic exposure per
        luminance band (brightest band first) followed by the original

    Raises:
        InvalidConfigurationError: For a non-RGB input, ``regions < 1`` or a
            non-positive gamma

    Example:
        >>> stack = synthesize_exposures(img, 1 / 2.2, config['synthesis'])
        >>> len(stack)
        8
    """
    cfg = cfg or {}
    regions = cfg.get('regions', 7)
    target_gray = cfg.get('target_gray', 0.18)
    eps = cfg.get('eps', 0.003)
    scale = cfg.get('downsample_scale', 0.05)
    g = cfg.get('gamma', 2.2) if g is None else g

    if img.ndim != 3 or img.shape[2] != 3:
        raise InvalidConfigurationError(f"Expected an RGB image of shape (H, W, 3), got {img.shape}")
    stats = RegionStatistics(regions)

    corrected = apply_gamma(convert_to_uint8(img), g)
    if corrected.size == 0:
        return [corrected.copy() for _ in range(regions + 1)]

    small_lum = extract_luma(downsample(corrected, scale))
    labels = segment_luminance(small_lum, regions)
    gains = stats.accumulate(small_lum, labels, eps).gains(target_gray, eps)
    logger.debug("Region gains (gamma %.3f): %s", g, np.round(gains, 6).tolist())

    lum = extract_luma(corrected).astype(np.float32)
    stack = [render_exposure(corrected, tone_map_exposure(lum, gain, eps), g) for gain in gains]
    stack.append(apply_gamma(corrected, 1.0 / g))
    return stack
