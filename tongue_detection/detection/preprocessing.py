"""
Image Preprocessing for Tongue Detection

The first three stages of the detection pipeline:
    1. Grayscale reduction: RGBA → luminance (ITU-R BT.601 weights)
    2. Noise smoothing: 3x3 discrete Gaussian
    3. Edge extraction: 3x3 Sobel gradient magnitude

All stages work on (H, W) uint8 maps. The 3x3 filters run through OpenCV and
only keep interior pixels; the one-pixel border stays at 0.

Usage:
    from tongue_detection.detection.preprocessing import (
        to_grayscale, gaussian_blur, sobel_edges
    )

    gray = to_grayscale(pixels, width, height)
    edges = sobel_edges(gaussian_blur(gray))
"""

import cv2
import numpy as np

from .types import validate_buffer
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


LUMA_WEIGHTS = (0.299, 0.587, 0.114)

GAUSSIAN_KERNEL = np.array([
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
], dtype=np.int32)
GAUSSIAN_KERNEL_SUM = 16

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.int32)

SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.int32)


def _filter3x3(image: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Correlate *image* with a 3x3 integer kernel via ``cv2.filter2D``.

    Returns a float32 array of the same shape with the one-pixel border
    set to 0.
    """
    h, w = image.shape
    if h < 3 or w < 3:
        return np.zeros((h, w), dtype=np.float32)

    out = cv2.filter2D(
        image.astype(np.float32), cv2.CV_32F, kernel.astype(np.float32),
        borderType=cv2.BORDER_CONSTANT,
    )
    out[0, :] = 0
    out[-1, :] = 0
    out[:, 0] = 0
    out[:, -1] = 0
    return out


def to_grayscale(pixels, width: int, height: int) -> np.ndarray:
    """
    Convert an RGBA pixel buffer to a luminance map.

    luminance = round(0.299 R + 0.587 G + 0.114 B), halves rounded up.

    Args:
        pixels: RGBA bytes or uint8 array of length width * height * 4
        width: image width
        height: image height

    Returns:
        (height, width) uint8 luminance map
    """
    flat = validate_buffer(pixels, width, height)
    rgba = flat.reshape(height, width, 4).astype(np.float64)

    r_w, g_w, b_w = LUMA_WEIGHTS
    luma = r_w * rgba[..., 0] + g_w * rgba[..., 1] + b_w * rgba[..., 2]
    gray = np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)

    logger.debug(f"Converted to grayscale: {gray.size} pixels")
    return gray


def gaussian_blur(luminance: np.ndarray) -> np.ndarray:
    """
    Smooth a luminance map with the 3x3 kernel [1 2 1; 2 4 2; 1 2 1] / 16.

    The quotient is stored as a byte, rounding halves to even.
    """
    summed = _filter3x3(luminance, GAUSSIAN_KERNEL).astype(np.float64)
    blurred = np.rint(summed / GAUSSIAN_KERNEL_SUM)
    return np.clip(blurred, 0, 255).astype(np.uint8)


def sobel_edges(luminance: np.ndarray) -> np.ndarray:
    """
    Gradient magnitude sqrt(Gx² + Gy²) of a luminance map, clamped to 255.

    Returns:
        (H, W) uint8 edge map
    """
    gx = _filter3x3(luminance, SOBEL_X).astype(np.float64)
    gy = _filter3x3(luminance, SOBEL_Y).astype(np.float64)

    magnitude = np.minimum(255.0, np.sqrt(gx * gx + gy * gy))
    return np.rint(magnitude).astype(np.uint8)
