"""
Global contrast enhancement applied before synthesis on bright images.

Any callable ``enhance(img) -> img`` returning an RGB image of the same size
can stand in for ``enhance_contrast``.
"""

from typing import Any, Callable, Dict, Optional
import numpy as np
import cv2

from .io import convert_to_uint8

EnhanceFn = Callable[[np.ndarray], np.ndarray]


def enhance_contrast(img: np.ndarray, cfg: Optional[Dict[str, Any]] = None) -> np.ndarray:
    """
    Enhance contrast with CLAHE on the LAB lightness channel.

    Args:
        img: RGB image with shape (H, W, 3), uint8 or float in [0, 1]
        cfg: ``contrast`` configuration section

    Returns:
        Contrast-enhanced RGB uint8 image

    Example:
        >>> enhanced = enhance_contrast(img, config['contrast'])
    """
    cfg = cfg or {}
    tile_grid = int(cfg.get('clahe_tile_grid_size', 8))
    clip_limit = float(cfg.get('clahe_clip_limit', 2.0))

    img = convert_to_uint8(img)
    if img.size == 0:
        return img.copy()

    img_lab = cv2.cvtColor(img, cv2.COLOR_RGB2LAB)

    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_grid, tile_grid))
    img_lab[:, :, 0] = clahe.apply(np.ascontiguousarray(img_lab[:, :, 0]))

    return cv2.cvtColor(img_lab, cv2.COLOR_LAB2RGB)
