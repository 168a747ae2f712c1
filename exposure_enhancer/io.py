"""
Image I/O utilities for the exposure enhancement pipeline.

Images are RGB numpy arrays. 8-bit images are uint8 in [0, 255] and float
images are float32 in [0, 1]. Conversions round and saturate when going back
to 8-bit.
"""

from pathlib import Path
from typing import Union
import numpy as np
import cv2


def read_image(path: Union[str, Path]) -> np.ndarray:
    """
    Read an RGB image from file path.

    Args:
        path: Path to image file

    Returns:
        RGB image as numpy array with shape (H, W, 3) and dtype uint8 (0-255)

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be read or is not valid

    Example:
        >>> img = read_image("sample.jpg")
        >>> print(img.shape, img.dtype)
        (480, 640, 3) uint8
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    img_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)

    if img_bgr is None:
        raise ValueError(f"Could not read image from: {path}")

    return cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)


def save_image(img: np.ndarray, path: Union[str, Path], quality: int = 95) -> None:
    """
    Save an RGB image to file path.

    Args:
        img: RGB image array with shape (H, W, 3), uint8 or float in [0, 1]
        path: Output file path
        quality: JPEG quality (0-100), only used for JPEG files

    Raises:
        ValueError: If image array is not valid format or cannot be written

    Example:
        >>> save_image(fused, "output.jpg")
    """
    path = Path(path)

    if not isinstance(img, np.ndarray):
        raise ValueError("Image must be a numpy array")

    if img.ndim != 3 or img.shape[2] != 3:
        raise ValueError("Image must have shape (H, W, 3)")

    img = convert_to_uint8(img)

    path.parent.mkdir(parents=True, exist_ok=True)

    img_bgr = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)

    ext = path.suffix.lower()
    if ext in ['.jpg', '.jpeg']:
        encode_params = [cv2.IMWRITE_JPEG_QUALITY, quality]
    elif ext == '.png':
        encode_params = [cv2.IMWRITE_PNG_COMPRESSION, 9]
    else:
        encode_params = []

    if not cv2.imwrite(str(path), img_bgr, encode_params):
        raise ValueError(f"Failed to save image to: {path}")


def convert_to_float(img: np.ndarray) -> np.ndarray:
    """
    Convert uint8 image to float32 in range [0, 1].

    Args:
        img: Image array with dtype uint8, or a float image already in [0, 1]

    Returns:
        Image array with dtype float32 in range [0, 1]
    """
    if img.dtype == np.uint8:
        return img.astype(np.float32) / 255.0
    return img.astype(np.float32)


def convert_to_uint8(img: np.ndarray) -> np.ndarray:
    """
    Convert float image to uint8 in range [0, 255].

    Float values are scaled by 255, rounded to nearest and saturated.

    Args:
        img: Image array with dtype float32/float64 in range [0, 1]

    Returns:
        Image array with dtype uint8 in range [0, 255]
    """
    if img.dtype == np.uint8:
        return img
    if np.issubdtype(img.dtype, np.floating):
        return np.rint(img * 255.0).clip(0, 255).astype(np.uint8)
    return img.clip(0, 255).astype(np.uint8)
