"""Placeholder tongue layout used when detection produces nothing usable."""

import math
from typing import List, Optional

from .types import BoundingBox, Candidate
from ..utils.config import FallbackConfig
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


def generate_fallback(
    width: int,
    height: int,
    expected_count: int,
    config: Optional[FallbackConfig] = None,
) -> List[Candidate]:
    """
    Evenly space *expected_count* low-confidence boxes on a circle.

    Slit-drum tongues are usually arranged around the centre of the top
    face, so the circle is centred on the image with radius
    ``radius_fraction * min(width, height)``. Each box is centred on its
    point of the circle.

    Args:
        width: image width
        height: image height
        expected_count: number of placeholders to create
        config: fallback geometry

    Returns:
        Candidates flagged ``is_fallback``
    """
    config = config or FallbackConfig()
    center_x = width / 2
    center_y = height / 2
    radius = min(width, height) * config.radius_fraction

    logger.info(f"Creating fallback pattern of {expected_count} tongues (radius {radius:.1f})")

    candidates = []
    for i in range(expected_count):
        angle = (i / expected_count) * 2 * math.pi
        x = center_x + radius * math.cos(angle)
        y = center_y + radius * math.sin(angle)

        bbox = BoundingBox(
            x=x - config.box_width / 2,
            y=y - config.box_height / 2,
            width=config.box_width,
            height=config.box_height,
        )
        candidates.append(Candidate(
            bbox=bbox,
            area=bbox.area,
            aspect_ratio=bbox.width / bbox.height,
            center_x=x,
            center_y=y,
            confidence=config.confidence,
            is_fallback=True,
        ))

    return candidates
