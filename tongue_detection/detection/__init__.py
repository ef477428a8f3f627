"""Tongue region detection pipeline."""

from .types import BoundingBox, Candidate, PixelBuffer
from .detector import (
    TongueDetector,
    DetectionResult,
    DetectionBackend,
    detect,
    detect_with_fallback,
)
from .fallback import generate_fallback

__all__ = [
    "BoundingBox",
    "Candidate",
    "PixelBuffer",
    "TongueDetector",
    "DetectionResult",
    "DetectionBackend",
    "detect",
    "detect_with_fallback",
    "generate_fallback",
]
