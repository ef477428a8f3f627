"""
Contour Tracing

Extracts connected regions of strong edge pixels from an edge map.

Each region is found with an iterative 8-connected flood fill seeded from a
row-major scan. A single ``visited`` buffer is shared by every fill of one
call, so no pixel is ever assigned to two contours.
"""

import numpy as np
from typing import List, Optional, Sequence

from .types import Contour
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


NEIGHBOR_OFFSETS = [
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]


def trace_contour(
    edge_values: Sequence[int],
    width: int,
    height: int,
    start_x: int,
    start_y: int,
    threshold: int,
    visited: np.ndarray,
) -> Contour:
    """
    Flood fill the strong-edge region containing (start_x, start_y).

    Neighbours are pushed without checks; every popped pixel is validated
    against bounds, ``visited`` and ``threshold`` before it is accepted.

    Args:
        edge_values: flat row-major edge magnitudes (length width * height)
        width: map width
        height: map height
        start_x: seed column
        start_y: seed row
        threshold: pixels must be strictly above this value
        visited: flat boolean buffer, updated in place

    Returns:
        Points of the region, in visiting order
    """
    contour: Contour = []
    stack = [(start_x, start_y)]

    while stack:
        x, y = stack.pop()
        if x < 0 or x >= width or y < 0 or y >= height:
            continue

        index = y * width + x
        if visited[index] or edge_values[index] <= threshold:
            continue

        visited[index] = True
        contour.append((x, y))

        for dx, dy in NEIGHBOR_OFFSETS:
            stack.append((x + dx, y + dy))

    return contour


def find_contours(
    edges: np.ndarray,
    threshold: int = 30,
    min_points: int = 10,
    visited: Optional[np.ndarray] = None,
) -> List[Contour]:
    """
    Find all connected strong-edge regions in an edge map.

    Args:
        edges: (H, W) edge magnitude map
        threshold: edge strength a pixel must exceed
        min_points: contours with this many points or fewer are dropped
        visited: optional flat boolean buffer of length H * W; a fresh
            all-False buffer is used when omitted

    Returns:
        Contours in discovery (row-major seed) order
    """
    height, width = edges.shape
    if visited is None:
        visited = np.zeros(width * height, dtype=bool)
    elif visited.size != width * height:
        raise ValueError(
            f"visited buffer has {visited.size} entries, expected {width * height}"
        )
    else:
        # reshape keeps a view, so marks land in the caller's buffer
        visited = visited.reshape(-1)

    flat = edges.ravel()
    edge_values = flat.tolist()
    contours: List[Contour] = []
    discarded = 0

    # Row-major order of flatnonzero matches a full raster scan
    for index in np.flatnonzero(flat > threshold).tolist():
        if visited[index]:
            continue
        y, x = divmod(index, width)
        contour = trace_contour(edge_values, width, height, x, y, threshold, visited)
        if len(contour) > min_points:
            contours.append(contour)
        else:
            discarded += 1

    logger.debug(
        f"Found {len(contours)} contours (threshold: {threshold}, "
        f"{discarded} below {min_points + 1} points)"
    )
    return contours
