"""
Exposure fusion of an image stack into a single well-exposed image.

The default backend splits every exposure into a smooth base layer and a
detail layer, weights base layers by how close they are to middle gray (per
pixel and per image) and detail layers by how well exposed their local
neighbourhood is, and sums the normalized contributions. OpenCV's Mertens
merge is available as an interchangeable backend.

Reference:
    M. Nejati, M. Karimi, S. M. R. Soroushmehr, N. Karimi, S. Samavi and
    K. Najarian, "Fast exposure fusion using exposedness function",
    IEEE ICIP 2017, pp. 2234-2238.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import cv2

from .exceptions import InvalidConfigurationError
from .filters import SmoothFn, box_mean, guided_smooth
from .io import convert_to_float, convert_to_uint8

logger = logging.getLogger(__name__)

# Added to every weight so the per-pixel stack sum is always positive
WEIGHT_FLOOR = 1e-12


def validate_stack(stack: Sequence[np.ndarray]) -> None:
    """
    Check that a stack is non-empty and holds RGB images of one size.

    Raises:
        InvalidConfigurationError: On an empty stack, a non-RGB image or a
            size mismatch
    """
    if len(stack) == 0:
        raise InvalidConfigurationError("At least one image required")

    height, width = stack[0].shape[:2]
    for i, img in enumerate(stack):
        if img.ndim != 3 or img.shape[2] != 3:
            raise InvalidConfigurationError(f"Image {i} must have shape (H, W, 3), got {img.shape}")
        if img.shape[:2] != (height, width):
            raise InvalidConfigurationError(
                f"Image {i} has size {img.shape[:2]}, expected {(height, width)}")


def compute_layers(img: np.ndarray, radius: int, eps: float,
                   smooth: SmoothFn = guided_smooth) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split an image into luminance, base layer and colour detail layer.

    Args:
        img: RGB image, uint8 or float in [0, 1]
        radius: Smoothing radius
        eps: Smoothing regularization
        smooth: Edge-preserving smoother ``smooth(guide, src, radius, eps)``

    Returns:
        Tuple of (luminance (H, W), base (H, W), detail (H, W, 3)), float32
    """
    img_float = convert_to_float(img)
    lum = cv2.cvtColor(img_float, cv2.COLOR_RGB2GRAY)
    base = np.asarray(smooth(lum, lum, radius, eps), dtype=np.float32)
    detail = img_float - base[:, :, np.newaxis]
    return lum, base, detail


def base_weight(base: np.ndarray, lum: np.ndarray, sigma_l: float = 0.5) -> np.ndarray:
    """
    Exposedness weight of a base layer.

    The product of a per-pixel term on the base layer and a global term on the
    mean luminance, both Gaussian around 0.5.
    """
    denom = 2.0 * sigma_l * sigma_l
    local = np.exp(-np.square(base - 0.5) / denom)
    global_term = np.exp(-(float(lum.mean()) - 0.5) ** 2 / denom)
    return (local * global_term).astype(np.float32) + np.float32(WEIGHT_FLOOR)


def detail_weight(lum: np.ndarray, sigma_d: float = 0.12, ksize: int = 7) -> np.ndarray:
    """Exposedness weight of a detail layer from the local mean luminance."""
    local_mean = box_mean(lum, ksize)
    weight = np.exp(-np.square(local_mean - 0.5) / (2.0 * sigma_d * sigma_d))
    return weight.astype(np.float32) + np.float32(WEIGHT_FLOOR)


def normalize_weights(weights: Sequence[np.ndarray]) -> List[np.ndarray]:
    """
    Divide each weight map by the per-pixel sum over the stack.

    Args:
        weights: Non-negative weight maps of equal shape

    Returns:
        Weight maps summing to 1 at every pixel
    """
    total = np.sum(weights, axis=0)
    total = np.maximum(total, np.finfo(np.float32).tiny)
    return [w / total for w in weights]


def fuse_exposures(stack: Sequence[np.ndarray], cfg: Optional[Dict[str, Any]] = None,
                   smooth: SmoothFn = guided_smooth) -> np.ndarray:
    """
    Fuse an exposure stack with base/detail exposedness weighting.

    Args:
        stack: RGB images of equal size, uint8 or float in [0, 1]
        cfg: ``fusion`` configuration section
        smooth: Edge-preserving smoother for the base layers

    Returns:
        Fused float32 RGB image; values may slightly leave [0, 1]

    Raises:
        InvalidConfigurationError: If the stack is empty or inconsistent

    Example:
        >>> fused = fuse_exposures(stack, config['fusion'])
    """
    cfg = cfg or {}
    radius = cfg.get('radius', 12)
    eps = cfg.get('eps', 0.25)
    sigma_l = cfg.get('sigma_l', 0.5)
    sigma_d = cfg.get('sigma_d', 0.12)
    alpha = cfg.get('alpha', 1.1)
    ksize = cfg.get('detail_kernel', 7)

    validate_stack(stack)
    if stack[0].size == 0:
        return np.zeros(stack[0].shape, dtype=np.float32)

    bases, details, base_weights, detail_weights = [], [], [], []
    for img in stack:
        lum, base, detail = compute_layers(img, radius, eps, smooth)
        bases.append(base)
        details.append(detail)
        base_weights.append(base_weight(base, lum, sigma_l))
        detail_weights.append(detail_weight(lum, sigma_d, ksize))

    base_weights = normalize_weights(base_weights)
    detail_weights = normalize_weights(detail_weights)

    fused = np.zeros(details[0].shape, dtype=np.float32)
    for base, detail, wb, wd in zip(bases, details, base_weights, detail_weights):
        fused += alpha * wd[:, :, np.newaxis] * detail + (wb * base)[:, :, np.newaxis]

    logger.debug("Fused %d exposures, output range %.3f-%.3f", len(stack), fused.min(), fused.max())
    return fused


def merge_mertens(stack: Sequence[np.ndarray]) -> np.ndarray:
    """
    Fuse an exposure stack with OpenCV's Mertens exposure fusion.

    Args:
        stack: RGB uint8 images of equal size

    Returns:
        Fused float32 RGB image, roughly in [0, 1]
    """
    validate_stack(stack)
    if stack[0].size == 0:
        return np.zeros(stack[0].shape, dtype=np.float32)
    merger = cv2.createMergeMertens()
    return merger.process([convert_to_uint8(img) for img in stack])


def fuse_stack(stack: Sequence[np.ndarray], cfg: Optional[Dict[str, Any]] = None,
               smooth: SmoothFn = guided_smooth) -> np.ndarray:
    """
    Fuse an exposure stack with the configured backend.

    Args:
        stack: RGB images of equal size
        cfg: ``fusion`` configuration section; ``backend`` is 'exposedness'
             (default) or 'mertens'
        smooth: Smoother for the exposedness backend

    Returns:
        Fused RGB uint8 image

    Raises:
        InvalidConfigurationError: On an unknown backend or invalid stack
    """
    cfg = cfg or {}
    backend = cfg.get('backend', 'exposedness')
    logger.debug("Fusing %d exposures with backend %s", len(stack), backend)

    if backend == 'exposedness':
        fused = fuse_exposures(stack, cfg, smooth)
    elif backend == 'mertens':
        fused = merge_mertens(stack)
    else:
        raise InvalidConfigurationError(f"Unknown backend: {backend}. Supported: 'exposedness', 'mertens'")

    return convert_to_uint8(fused)
