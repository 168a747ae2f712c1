"""
Single-Image Exposure Enhancement

Synthesizes a multi-exposure stack from one photograph by luminance
segmentation and fuses the stack back into a single well-exposed image.
"""

__version__ = "1.0.0"
__author__ = "Computer Vision Team"

from .exceptions import ExposureEnhancerError, InvalidConfigurationError
from .config import default_config, load_config, validate_config
from .io import read_image, save_image
from .gamma import apply_gamma, build_gamma_lut
from .segmentation import segment_luminance
from .region_stats import RegionStatistics, compute_gains
from .synthesis import synthesize_exposures
from .fusion import fuse_exposures, fuse_stack, merge_mertens
from .brightness import is_dark, select_gamma
from .contrast import enhance_contrast
from .pipeline import enhance_image, run_pipeline

__all__ = [
    "ExposureEnhancerError",
    "InvalidConfigurationError",
    "default_config",
    "load_config",
    "validate_config",
    "read_image",
    "save_image",
    "apply_gamma",
    "build_gamma_lut",
    "segment_luminance",
    "RegionStatistics",
    "compute_gains",
    "synthesize_exposures",
    "fuse_exposures",
    "fuse_stack",
    "merge_mertens",
    "is_dark",
    "select_gamma",
    "enhance_contrast",
    "enhance_image",
    "run_pipeline",
]
