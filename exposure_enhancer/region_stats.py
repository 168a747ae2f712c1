"""
Per-region log-average luminance statistics and exposure gains.

The gain of a region follows Reinhard's key estimate: the region's
log-average luminance is mapped to a target middle gray.
"""

from typing import Optional

import numpy as np

from .config import validate_regions


class RegionStatistics:
    """
    Running log-luminance sums and pixel counts, one slot per region.

    Filled by a single ``accumulate`` pass and read afterwards.
    """

    def __init__(self, regions: int):
        self.regions = validate_regions(regions)
        self.log_sums = np.zeros(self.regions, dtype=np.float64)
        self.counts = np.zeros(self.regions, dtype=np.float64)

    def accumulate(self, lum: np.ndarray, labels: np.ndarray, eps: float = 0.003) -> "RegionStatistics":
        """
        Add ``log(max(lum + 1, eps))`` of every pixel to its region.

        Args:
            lum: Luminance image; uint8 values saturate at 255 after the +1
            labels: Label map congruent to ``lum`` with values in [0, regions)
            eps: Floor applied before the logarithm

        Returns:
            self, for chaining
        """
        if lum.shape != labels.shape:
            raise ValueError(f"Label map shape {labels.shape} does not match luminance {lum.shape}")

        if lum.dtype == np.uint8:
            shifted = np.minimum(lum.astype(np.float64) + 1.0, 255.0)
        else:
            shifted = lum.astype(np.float64) + 1.0

        logs = np.log(np.maximum(shifted, eps)).ravel()
        flat_labels = labels.ravel()
        self.log_sums += np.bincount(flat_labels, weights=logs, minlength=self.regions)[:self.regions]
        self.counts += np.bincount(flat_labels, minlength=self.regions)[:self.regions]
        return self

    def log_averages(self, eps: float = 0.003) -> np.ndarray:
        """Log-average luminance per region; empty regions give 0."""
        return self.log_sums / (self.counts + eps)

    def gains(self, target_gray: float = 0.18, eps: float = 0.003) -> np.ndarray:
        """
        Exposure-compensation gain per region, ``target_gray / exp(v_r)``.

        Returns:
            Read-only float64 array of length ``regions`` (the gain table)
        """
        table = target_gray / np.exp(self.log_averages(eps))
        table.setflags(write=False)
        return table


def compute_gains(lum: np.ndarray, labels: np.ndarray, regions: int,
                  target_gray: float = 0.18, eps: float = 0.003,
                  stats: Optional[RegionStatistics] = None) -> np.ndarray:
    """
    Compute the gain table of a segmented luminance image.

    Args:
        lum: Luminance image
        labels: Label map from ``segment_luminance``
        regions: Number of regions
        target_gray: Middle-gray key value
        eps: Epsilon floor used in the logarithm and the average
        stats: Optional accumulator to fill instead of a fresh one

    Returns:
        Read-only gain table of length ``regions``

    Example:
        >>> labels = segment_luminance(lum, 7)
        >>> gains = compute_gains(lum, labels, 7)
    """
    stats = stats if stats is not None else RegionStatistics(regions)
    stats.accumulate(lum, labels, eps)
    return stats.gains(target_gray, eps)
