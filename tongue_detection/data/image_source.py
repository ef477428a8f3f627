"""
Image Loading Utilities

Reads drum photos from disk into the RGBA ``PixelBuffer`` the detection
pipeline consumes.

Usage:
    from tongue_detection.data.image_source import load_pixel_buffer

    image = load_pixel_buffer("photos/drum.jpg")
    image.width, image.height
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Union

from ..detection.types import PixelBuffer
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff', '.webp')


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Convert an OpenCV image (gray, BGR or BGRA) to an RGBA array.

    Args:
        image: uint8 array as returned by ``cv2.imread``

    Returns:
        (H, W, 4) uint8 RGBA array
    """
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Unsupported channel count: {channels}")


def pixel_buffer_from_array(rgba: np.ndarray) -> PixelBuffer:
    """Wrap an (H, W, 4) uint8 RGBA array."""
    return PixelBuffer.from_array(rgba)


def load_pixel_buffer(image_path: Union[str, Path]) -> PixelBuffer:
    """
    Load an image file as an RGBA pixel buffer.

    Args:
        image_path: Path to a JPG/PNG/... photo

    Returns:
        PixelBuffer

    Raises:
        FileNotFoundError: if the path does not exist
        ValueError: if OpenCV cannot decode the file
    """
    path = Path(image_path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not decode image: {path}")

    if image.dtype != np.uint8:
        # 16-bit PNG/TIFF
        image = cv2.convertScaleAbs(image, alpha=255.0 / 65535.0)

    rgba = to_rgba(image)
    logger.debug(f"Image data extracted: {rgba.shape[1]}x{rgba.shape[0]} pixels from {path.name}")
    return pixel_buffer_from_array(rgba)


def list_images(directory: Union[str, Path]) -> list:
    """Sorted image files directly inside *directory*."""
    directory = Path(directory)
    return sorted(p for p in directory.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS)
