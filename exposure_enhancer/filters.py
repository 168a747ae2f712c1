"""
Filtering primitives used by exposure fusion.

``guided_smooth`` is the default edge-preserving smoother. Any callable with
the signature ``smooth(guide, src, radius, eps) -> ndarray`` can replace it.
"""

from typing import Callable
import numpy as np
import cv2

SmoothFn = Callable[[np.ndarray, np.ndarray, int, float], np.ndarray]


def guided_smooth(guide: np.ndarray, src: np.ndarray, radius: int, eps: float) -> np.ndarray:
    """
    Edge-preserving smoothing with the guided filter.

    Args:
        guide: Guide image, float in [0, 1]
        src: Image to smooth, float in [0, 1]
        radius: Filter window radius in pixels
        eps: Regularization, larger values smooth more

    Returns:
        Smoothed float32 image with the shape of ``src``
    """
    return cv2.ximgproc.guidedFilter(
        guide.astype(np.float32), src.astype(np.float32), int(radius), float(eps)
    )


def box_mean(img: np.ndarray, ksize: int = 7) -> np.ndarray:
    """
    Local mean over a ``ksize`` x ``ksize`` window.

    Args:
        img: Single-channel float image
        ksize: Window side length

    Returns:
        float32 image of local means
    """
    kernel = np.ones((ksize, ksize), np.float32) / (ksize * ksize)
    return cv2.filter2D(img.astype(np.float32), -1, kernel)
