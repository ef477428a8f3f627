"""
Shape Classification

Turns traced contours into scored tongue candidates using bounding-box
geometry only. The thresholds come from ``DetectionConfig`` and are fixed
reference values; there is no learned component.
"""

from collections import Counter
from typing import List, Optional, Tuple
from dataclasses import dataclass, field

from .types import BoundingBox, Candidate, Contour
from ..utils.config import DetectionConfig
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class ClassificationResult:
    """Accepted candidates plus a tally of why the others were rejected."""
    candidates: List[Candidate] = field(default_factory=list)
    rejections: Counter = field(default_factory=Counter)

    @property
    def num_rejected(self) -> int:
        return sum(self.rejections.values())


def compute_confidence(
    area: float,
    aspect_ratio: float,
    config: Optional[DetectionConfig] = None
) -> float:
    """Base score plus aspect-ratio and area bonuses, clamped to [0, 1]."""
    config = config or DetectionConfig()
    confidence = config.base_confidence

    aspect_lo, aspect_hi = config.aspect_bonus_range
    if aspect_lo <= aspect_ratio <= aspect_hi:
        confidence += config.aspect_bonus

    area_lo, area_hi = config.area_bonus_range
    if area_lo < area < area_hi:
        confidence += config.area_bonus

    return min(1.0, max(0.0, confidence))


def rejection_reason(
    bbox: BoundingBox,
    image_width: int,
    image_height: int,
    config: DetectionConfig,
) -> Optional[str]:
    """
    Return the first shape criterion *bbox* fails, or None if it passes.
    """
    if bbox.width <= 0 or bbox.height <= 0:
        return "degenerate box"

    image_area = image_width * image_height
    area = bbox.area
    aspect_ratio = bbox.width / bbox.height

    if area < image_area * config.min_area_fraction:
        return "area too small"
    if area > image_area * config.max_area_fraction:
        return "area too large"
    if aspect_ratio < config.min_aspect_ratio:
        return "aspect ratio too small"
    if aspect_ratio > config.max_aspect_ratio:
        return "aspect ratio too large"
    if bbox.width < image_width * config.min_width_fraction:
        return "width too small"
    if bbox.height < image_height * config.min_height_fraction:
        return "height too small"
    return None


def classify_contours(
    contours: List[Contour],
    image_width: int,
    image_height: int,
    expected_count: int,
    config: Optional[DetectionConfig] = None,
) -> ClassificationResult:
    """
    Filter contours to tongue-like shapes and score them.

    Args:
        contours: traced contours, in discovery order
        image_width: full image width
        image_height: full image height
        expected_count: user's tongue count hint (logged only)
        config: detection thresholds

    Returns:
        ClassificationResult with candidates in discovery order
    """
    config = config or DetectionConfig()
    result = ClassificationResult()

    logger.debug(
        f"Classifying {len(contours)} contours for {expected_count} expected tongues "
        f"on {image_width}x{image_height} image"
    )

    for i, contour in enumerate(contours):
        if len(contour) <= config.min_contour_points:
            result.rejections["too few points"] += 1
            continue

        bbox = BoundingBox.from_points(contour)
        reason = rejection_reason(bbox, image_width, image_height, config)
        if reason is not None:
            result.rejections[reason] += 1
            logger.debug(f"Rejected contour {i}: {reason} ({bbox.width}x{bbox.height} at ({bbox.x},{bbox.y}))")
            continue

        aspect_ratio = bbox.width / bbox.height
        confidence = compute_confidence(bbox.area, aspect_ratio, config)
        result.candidates.append(Candidate.from_bbox(bbox, confidence))
        logger.debug(f"Accepted contour {i}: confidence {confidence:.2f}")

    return result


def shape_bounds(
    image_width: int,
    image_height: int,
    config: Optional[DetectionConfig] = None
) -> Tuple[float, float]:
    """(min_area, max_area) in pixels for an image of the given size."""
    config = config or DetectionConfig()
    image_area = image_width * image_height
    return (image_area * config.min_area_fraction, image_area * config.max_area_fraction)
