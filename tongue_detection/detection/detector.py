"""
Slit-Drum Tongue Detection via Classical Computer Vision

Detects candidate tongue regions on a photo of a slit drum using:
    1. Grayscale reduction
    2. 3x3 Gaussian smoothing
    3. Sobel gradient magnitude
    4. Contour tracing: flood fill over strong edge pixels
    5. Shape classification: bbox area / aspect heuristics and scoring
    6. Candidate resolution: rank, overlap suppression, count cap

The pipeline is deterministic and owns all of its intermediate buffers, so
independent calls can run concurrently.

Usage:
    from tongue_detection.detection.detector import TongueDetector

    detector = TongueDetector()
    candidates = detector.detect(rgba_bytes, width, height, expected_count=8)
"""

import numpy as np
from typing import Dict, List, Optional, Protocol, runtime_checkable
from dataclasses import dataclass, field

from .types import Candidate, validate_buffer
from .preprocessing import to_grayscale, gaussian_blur, sobel_edges
from .contours import find_contours
from .classifier import classify_contours, shape_bounds
from .resolver import resolve_with_stats, max_candidates
from .fallback import generate_fallback
from ..errors import InputShapeError, BackendFailure
from ..utils.config import DetectionConfig, FallbackConfig
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


@runtime_checkable
class DetectionBackend(Protocol):
    """Anything that can stand in for the built-in pipeline."""

    def detect(self, pixels, width: int, height: int, expected_count: int) -> List[Candidate]:
        ...


@dataclass
class DetectionResult:
    """Full result of one detection run."""
    candidates: List[Candidate] = field(default_factory=list)
    expected_count: int = 0
    max_candidates: int = 0
    # Run statistics
    num_contours: int = 0
    num_classified: int = 0
    rejections: Dict[str, int] = field(default_factory=dict)
    num_overlap_removed: int = 0
    # Intermediate maps (for visualisation / debugging)
    luminance: Optional[np.ndarray] = None
    blurred: Optional[np.ndarray] = None
    edges: Optional[np.ndarray] = None
    # Caller-level recovery
    used_fallback: bool = False
    error: Optional[BackendFailure] = None

    @property
    def success(self) -> bool:
        """True when real (non-fallback) candidates were found."""
        return bool(self.candidates) and not self.used_fallback

    def to_dict(self) -> Dict:
        return {
            'expected_count': self.expected_count,
            'max_candidates': self.max_candidates,
            'num_contours': self.num_contours,
            'num_classified': self.num_classified,
            'rejections': dict(self.rejections),
            'num_overlap_removed': self.num_overlap_removed,
            'used_fallback': self.used_fallback,
            'error': str(self.error) if self.error else None,
            'candidates': [c.to_dict() for c in self.candidates],
        }


def _check_expected_count(expected_count: int):
    if expected_count < 1:
        raise InputShapeError(f"expected_count must be at least 1, got {expected_count}")


class TongueDetector:
    """
    Tongue detector implementing the full edge → contour → shape pipeline.

    All thresholds come from a ``DetectionConfig``; the defaults reproduce
    the reference behaviour exactly.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(
        self,
        pixels,
        width: int,
        height: int,
        expected_count: int,
    ) -> List[Candidate]:
        """
        Detect tongue candidates in an RGBA image.

        Args:
            pixels: RGBA bytes or uint8 array, width * height * 4 values
            width: image width
            height: image height
            expected_count: how many tongues the user expects (>= 1)

        Returns:
            Candidates sorted by descending confidence; may be empty

        Raises:
            InputShapeError: if the buffer does not match the dimensions
        """
        return self.detect_with_details(pixels, width, height, expected_count).candidates

    def detect_with_details(
        self,
        pixels,
        width: int,
        height: int,
        expected_count: int,
        return_intermediates: bool = False,
    ) -> DetectionResult:
        """
        Run the full detection pipeline and keep run statistics.

        Pipeline:
            Grayscale → Blur → Sobel → Contours → Classify → Resolve

        Args:
            pixels: RGBA bytes or uint8 array
            width: image width
            height: image height
            expected_count: tongue count hint (>= 1)
            return_intermediates: keep luminance / blurred / edge maps

        Returns:
            DetectionResult
        """
        validate_buffer(pixels, width, height)
        _check_expected_count(expected_count)
        cfg = self.config

        result = DetectionResult(
            expected_count=expected_count,
            max_candidates=max_candidates(expected_count, cfg),
        )

        # --- 1-3. Preprocessing ---
        gray = to_grayscale(pixels, width, height)
        blurred = gaussian_blur(gray)
        edges = sobel_edges(blurred)

        if return_intermediates:
            result.luminance = gray
            result.blurred = blurred
            result.edges = edges

        # --- 4. Contours ---
        contours = find_contours(
            edges,
            threshold=cfg.edge_threshold,
            min_points=cfg.min_contour_points,
        )
        result.num_contours = len(contours)

        # --- 5. Shape classification ---
        min_area, max_area = shape_bounds(width, height, cfg)
        logger.debug(f"Shape filter: area in [{min_area:.0f}, {max_area:.0f}], "
                     f"aspect in [{cfg.min_aspect_ratio}, {cfg.max_aspect_ratio}]")

        classified = classify_contours(contours, width, height, expected_count, cfg)
        result.num_classified = len(classified.candidates)
        result.rejections = dict(classified.rejections)

        # --- 6. Resolution ---
        result.candidates, result.num_overlap_removed = resolve_with_stats(
            classified.candidates, expected_count, cfg
        )

        logger.info(
            f"Detection on {width}x{height} (expecting {expected_count}): "
            f"{result.num_contours} contours -> {result.num_classified} candidates "
            f"({result.num_overlap_removed} overlapping) "
            f"-> {len(result.candidates)} final (max {result.max_candidates})"
        )
        if classified.rejections:
            logger.debug(f"Rejection reasons: {dict(classified.rejections)}")

        return result


def detect(pixels, width: int, height: int, expected_count: int) -> List[Candidate]:
    """Run the default tongue detector. See ``TongueDetector.detect``."""
    return TongueDetector().detect(pixels, width, height, expected_count)


def detect_with_fallback(
    pixels,
    width: int,
    height: int,
    expected_count: int,
    backend: Optional[DetectionBackend] = None,
    fallback_config: Optional[FallbackConfig] = None,
    return_intermediates: bool = False,
) -> DetectionResult:
    """
    Detect tongues, substituting the fallback arrangement on failure.

    The input shape is validated up front and an ``InputShapeError`` is
    raised before any backend runs. After that, an exception from the
    backend or an empty result both yield the fallback layout; the
    exception is recorded on ``result.error`` as a ``BackendFailure``.

    Args:
        pixels: RGBA bytes or uint8 array
        width: image width
        height: image height
        expected_count: tongue count hint (>= 1)
        backend: detector to use (defaults to ``TongueDetector()``)
        fallback_config: geometry of the placeholder layout
        return_intermediates: forwarded to the built-in detector

    Returns:
        DetectionResult, with ``used_fallback`` set when placeholders
        were substituted
    """
    validate_buffer(pixels, width, height)
    _check_expected_count(expected_count)
    backend = backend if backend is not None else TongueDetector()

    result = DetectionResult(expected_count=expected_count)
    try:
        if isinstance(backend, TongueDetector):
            result = backend.detect_with_details(
                pixels, width, height, expected_count,
                return_intermediates=return_intermediates,
            )
        else:
            result.candidates = list(backend.detect(pixels, width, height, expected_count))
    except Exception as e:
        name = type(backend).__name__
        logger.error(f"Tongue detection backend {name} failed: {e}")
        result = DetectionResult(expected_count=expected_count, error=BackendFailure(name, e))

    if result.candidates:
        return result

    logger.warning(f"No tongues detected for expected count {expected_count}; using fallback layout")
    result.candidates = generate_fallback(width, height, expected_count, fallback_config)
    result.used_fallback = True
    return result
