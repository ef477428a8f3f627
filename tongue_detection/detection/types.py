"""
Detection Data Types

Geometric primitives shared by every pipeline stage.

Usage:
    from tongue_detection.detection.types import BoundingBox, Candidate

    box = BoundingBox(x=10, y=20, width=40, height=15)
    box.overlap_ratio(other_box)
"""

import numpy as np
from typing import Dict, List, Tuple, Any
from dataclasses import dataclass

from ..errors import InputShapeError


Point = Tuple[int, int]  # (x, y)
Contour = List[Point]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box. Width/height are coordinate extents (max - min)."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_points(cls, points: Contour) -> 'BoundingBox':
        """Smallest box enclosing *points*."""
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def intersection_area(self, other: 'BoundingBox') -> float:
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.x + self.width, other.x + other.width)
        y2 = min(self.y + self.height, other.y + other.height)

        if x1 >= x2 or y1 >= y2:
            return 0
        return (x2 - x1) * (y2 - y1)

    def overlap_ratio(self, other: 'BoundingBox') -> float:
        """Intersection area divided by the smaller of the two box areas."""
        inter = self.intersection_area(other)
        if inter == 0:
            return 0.0
        min_area = min(self.area, other.area)
        return inter / min_area if min_area > 0 else 0.0


@dataclass(frozen=True)
class Candidate:
    """A tongue-like region with its geometric descriptors and score."""
    bbox: BoundingBox
    area: float
    aspect_ratio: float
    center_x: float
    center_y: float
    confidence: float
    is_fallback: bool = False

    @classmethod
    def from_bbox(
        cls,
        bbox: BoundingBox,
        confidence: float,
        is_fallback: bool = False
    ) -> 'Candidate':
        cx, cy = bbox.center
        return cls(
            bbox=bbox,
            area=bbox.area,
            aspect_ratio=bbox.width / bbox.height,
            center_x=cx,
            center_y=cy,
            confidence=min(1.0, max(0.0, confidence)),
            is_fallback=is_fallback,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            'bbox': {
                'x': self.bbox.x,
                'y': self.bbox.y,
                'width': self.bbox.width,
                'height': self.bbox.height,
            },
            'area': self.area,
            'aspect_ratio': round(self.aspect_ratio, 4),
            'center': [self.center_x, self.center_y],
            'confidence': round(self.confidence, 4),
            'is_fallback': self.is_fallback,
        }


@dataclass(frozen=True)
class PixelBuffer:
    """Read-only RGBA image: ``data`` holds width * height * 4 bytes."""
    width: int
    height: int
    data: bytes

    def __post_init__(self):
        validate_buffer(self.data, self.width, self.height)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> 'PixelBuffer':
        """Wrap an (H, W, 4) uint8 array."""
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise InputShapeError(f"Expected (H, W, 4) RGBA array, got {rgba.shape}")
        h, w = rgba.shape[:2]
        return cls(width=w, height=h, data=np.ascontiguousarray(rgba, dtype=np.uint8).tobytes())

    def as_array(self) -> np.ndarray:
        """View the buffer as an (H, W, 4) uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)


def validate_buffer(pixels, width: int, height: int) -> np.ndarray:
    """
    Check that *pixels* is a width x height RGBA buffer.

    Args:
        pixels: bytes-like object or uint8 array (any shape)
        width: image width in pixels
        height: image height in pixels

    Returns:
        Flat uint8 view of the pixels

    Raises:
        InputShapeError: on non-positive dimensions or a length mismatch
    """
    if width <= 0 or height <= 0:
        raise InputShapeError(f"Image dimensions must be positive, got {width}x{height}")

    if isinstance(pixels, np.ndarray):
        flat = np.ascontiguousarray(pixels, dtype=np.uint8).ravel()
    else:
        flat = np.frombuffer(bytes(pixels), dtype=np.uint8)

    expected = width * height * 4
    if flat.size != expected:
        raise InputShapeError(
            f"Pixel buffer has {flat.size} bytes, expected {expected} "
            f"for a {width}x{height} RGBA image"
        )
    return flat
