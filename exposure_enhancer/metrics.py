"""
Quality metrics for exposure enhancement.

No-reference measures (entropy, colorfulness, brightness and contrast change,
exposure ratios) and input-referenced measures (PSNR, MAE) used by the batch
report.
"""

from typing import Any, Dict
import numpy as np
import cv2
from sklearn.metrics import mean_squared_error
from scipy.stats import entropy


def compute_metrics(original: np.ndarray, enhanced: np.ndarray) -> Dict[str, float]:
    """
    Compute the metrics reported for one enhanced image.

    Args:
        original: Original image (H, W, 3) uint8
        enhanced: Enhanced image (H, W, 3) uint8

    Returns:
        Dictionary with computed metrics

    Example:
        >>> metrics = compute_metrics(orig_img, enhanced_img)
        >>> print(f"Entropy: {metrics['output_entropy']:.3f}")
    """
    input_entropy = compute_entropy(original)
    output_entropy = compute_entropy(enhanced)
    return {
        'input_entropy': input_entropy,
        'output_entropy': output_entropy,
        'entropy_ratio': output_entropy / input_entropy if input_entropy > 0 else 0.0,
        'brightness_enhancement': compute_brightness_enhancement(original, enhanced),
        'contrast_enhancement': compute_contrast_enhancement(original, enhanced),
        'colorfulness': compute_colorfulness(enhanced),
        'under_exposure_reduction': dark_ratio(original) - dark_ratio(enhanced),
        'over_exposure_change': bright_ratio(enhanced) - bright_ratio(original),
        'psnr': compute_psnr(original, enhanced),
        'mae': compute_mae(original, enhanced),
    }


def compute_psnr(reference: np.ndarray, enhanced: np.ndarray) -> float:
    """
    Compute Peak Signal-to-Noise Ratio.

    Args:
        reference: Reference image uint8
        enhanced: Enhanced image uint8

    Returns:
        PSNR value in dB, ``inf`` for identical images
    """
    mse = mean_squared_error(reference.astype(np.float64).ravel(), enhanced.astype(np.float64).ravel())
    if mse == 0:
        return float('inf')
    return float(20 * np.log10(255.0 / np.sqrt(mse)))


def compute_mae(reference: np.ndarray, enhanced: np.ndarray) -> float:
    """Mean absolute error between two uint8 images."""
    return float(np.mean(np.abs(reference.astype(np.float32) - enhanced.astype(np.float32))))


def compute_colorfulness(image: np.ndarray) -> float:
    """
    Compute colorfulness metric based on Hasler and Süsstrunk.

    Args:
        image: Input image uint8

    Returns:
        Colorfulness score
    """
    img = image.astype(np.float32)
    R, G, B = img[:, :, 0], img[:, :, 1], img[:, :, 2]

    rg = R - G
    yb = 0.5 * (R + G) - B

    std_rg_yb = np.sqrt(np.std(rg)**2 + np.std(yb)**2)
    mean_rg_yb = np.sqrt(np.mean(rg)**2 + np.mean(yb)**2)

    return float(std_rg_yb + 0.3 * mean_rg_yb)


def compute_brightness_enhancement(original: np.ndarray, enhanced: np.ndarray) -> float:
    """Relative change of mean intensity."""
    orig_brightness = np.mean(original.astype(np.float32))
    enh_brightness = np.mean(enhanced.astype(np.float32))
    return float((enh_brightness - orig_brightness) / (orig_brightness + 1e-6))


def compute_contrast_enhancement(original: np.ndarray, enhanced: np.ndarray) -> float:
    """Relative change of intensity standard deviation."""
    orig_contrast = np.std(original.astype(np.float32))
    enh_contrast = np.std(enhanced.astype(np.float32))
    return float((enh_contrast - orig_contrast) / (orig_contrast + 1e-6))


def compute_entropy(image: np.ndarray) -> float:
    """
    Compute image entropy as information content measure.

    Args:
        image: Input RGB image uint8

    Returns:
        Entropy of the gray-level histogram in bits
    """
    gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    hist, _ = np.histogram(gray, bins=256, range=(0, 256))
    if hist.sum() == 0:
        return 0.0
    return float(entropy(hist, base=2))


def dark_ratio(image: np.ndarray, threshold: int = 30) -> float:
    """Fraction of pixels whose HSV value is below ``threshold``."""
    v = cv2.cvtColor(image, cv2.COLOR_RGB2HSV)[:, :, 2]
    return float(np.mean(v < threshold))


def bright_ratio(image: np.ndarray, threshold: int = 200) -> float:
    """Fraction of pixels whose HSV value is above ``threshold``."""
    v = cv2.cvtColor(image, cv2.COLOR_RGB2HSV)[:, :, 2]
    return float(np.mean(v > threshold))


def analyze_histograms(original: np.ndarray, enhanced: np.ndarray) -> Dict[str, Any]:
    """Analyze histogram changes between original and enhanced images."""

    def get_histogram_stats(img):
        gray = cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)
        hist, bins = np.histogram(gray, bins=256, range=(0, 256))
        hist = hist.astype(np.float64) / hist.sum()
        mean = float(np.sum(hist * bins[:-1]))

        return {
            'mean': mean,
            'std': float(np.sqrt(np.sum(hist * (bins[:-1] - mean)**2))),
            'dark_pixels': float(np.sum(hist[:76])),
            'bright_pixels': float(np.sum(hist[204:])),
            'entropy': float(entropy(hist + 1e-6))
        }

    orig_stats = get_histogram_stats(original)
    enh_stats = get_histogram_stats(enhanced)

    return {
        'original': orig_stats,
        'enhanced': enh_stats,
        'changes': {
            'mean_change': enh_stats['mean'] - orig_stats['mean'],
            'std_change': enh_stats['std'] - orig_stats['std'],
            'dark_pixels_change': enh_stats['dark_pixels'] - orig_stats['dark_pixels'],
            'bright_pixels_change': enh_stats['bright_pixels'] - orig_stats['bright_pixels']
        }
    }
