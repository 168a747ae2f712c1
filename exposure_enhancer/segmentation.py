"""
Luminance segmentation into equal-width intensity bands.

The luminance range of an image is split into ``regions`` bands of equal
width. Labels are assigned from the brightest band down: label 0 is the
brightest band and label ``regions - 1`` the darkest. The exposure gain table
is indexed by these labels, so the order matters.
"""

import logging

import numpy as np

from .config import validate_regions

logger = logging.getLogger(__name__)


def band_boundaries(lum: np.ndarray, regions: int) -> np.ndarray:
    """
    Compute the ``regions + 1`` band boundaries of a luminance image.

    Boundaries are ``min + k * (max - min) / regions`` for ``k = 0..regions``.

    Args:
        lum: Single-channel luminance image
        regions: Number of bands, at least 1

    Returns:
        Float64 array of boundaries in ascending order
    """
    regions = validate_regions(regions)
    if lum.size == 0:
        return np.zeros(regions + 1, dtype=np.float64)
    lo = float(lum.min())
    hi = float(lum.max())
    width = (hi - lo) / regions
    return lo + width * np.arange(regions + 1, dtype=np.float64)


def band_to_label(regions: int) -> np.ndarray:
    """
    Map band positions counted from the darkest band to region labels.

    Position 0 (darkest) maps to label ``regions - 1`` and position
    ``regions - 1`` (brightest) maps to label 0.
    """
    regions = validate_regions(regions)
    return np.arange(regions - 1, -1, -1, dtype=np.int32)


def segment_luminance(lum: np.ndarray, regions: int) -> np.ndarray:
    """
    Label every pixel of a luminance image with its brightness band.

    A value in ``[b[regions-1-k], b[regions-k])`` gets label ``k``. Values at
    or above the top boundary get label 0 and values below ``b[1]`` get the
    darkest label, so every pixel receives a label. A flat image (max == min)
    collapses entirely into label 0.

    Args:
        lum: Single-channel luminance image (uint8 or float)
        regions: Number of bands, at least 1

    Returns:
        int32 label map with the shape of ``lum`` and values in [0, regions)

    Raises:
        InvalidConfigurationError: If ``regions`` is not an integer >= 1

    Example:
        >>> labels = segment_luminance(lum, 7)
        >>> brightest = lum[labels == 0]
    """
    boundaries = band_boundaries(lum, regions)
    if lum.size == 0:
        return np.zeros(lum.shape, dtype=np.int32)

    # Interior boundaries only: position counts how many of them lie at or below the value.
    positions = np.searchsorted(boundaries[1:regions], lum.astype(np.float64), side='right')
    labels = band_to_label(regions)[positions]

    logger.debug("Segmented luminance into %d bands, pixels per label: %s",
                 regions, np.bincount(labels.ravel(), minlength=regions).tolist())
    return labels
