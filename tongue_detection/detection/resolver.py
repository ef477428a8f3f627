"""
Candidate Resolution

Ranks classified candidates, suppresses overlapping detections and caps the
list length relative to the expected tongue count.
"""

from typing import List, Optional, Tuple

from .types import Candidate
from ..utils.config import DetectionConfig
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


def max_candidates(expected_count: int, config: Optional[DetectionConfig] = None) -> int:
    """Upper bound on returned candidates: max(n * 1.5, n + 5), floored."""
    config = config or DetectionConfig()
    return int(max(expected_count * config.candidate_multiplier,
                   expected_count + config.candidate_margin))


def suppress_overlaps(
    candidates: List[Candidate],
    overlap_threshold: float = 0.3
) -> Tuple[List[Candidate], int]:
    """
    Greedy suppression over an already ranked list.

    A candidate survives only if its overlap ratio with every survivor
    before it is at most *overlap_threshold*.

    Returns:
        (kept candidates, number removed)
    """
    kept: List[Candidate] = []
    removed = 0

    for i, cand in enumerate(candidates):
        clash = None
        for j, existing in enumerate(kept):
            if cand.bbox.overlap_ratio(existing.bbox) > overlap_threshold:
                clash = j
                break

        if clash is None:
            kept.append(cand)
        else:
            removed += 1
            logger.debug(
                f"Candidate {i} removed: "
                f"{cand.bbox.overlap_ratio(kept[clash].bbox):.0%} overlap with kept {clash}"
            )

    return kept, removed


def resolve_with_stats(
    candidates: List[Candidate],
    expected_count: int,
    config: Optional[DetectionConfig] = None,
) -> Tuple[List[Candidate], int]:
    """
    Sort, de-overlap and truncate candidates.

    Args:
        candidates: classifier output, in discovery order
        expected_count: user's tongue count hint
        config: detection thresholds

    Returns:
        (candidates in descending confidence order, number removed by
        overlap suppression)
    """
    config = config or DetectionConfig()

    # sorted() is stable: equal confidences keep discovery order
    ranked = sorted(candidates, key=lambda c: -c.confidence)
    kept, removed = suppress_overlaps(ranked, config.overlap_threshold)

    limit = max_candidates(expected_count, config)
    final = kept[:limit]

    logger.debug(
        f"Resolved {len(candidates)} candidates -> {len(kept)} after overlap "
        f"({removed} removed) -> {len(final)} final (max {limit})"
    )
    return final, removed


def resolve_candidates(
    candidates: List[Candidate],
    expected_count: int,
    config: Optional[DetectionConfig] = None,
) -> List[Candidate]:
    """Resolved candidate list only. See ``resolve_with_stats``."""
    return resolve_with_stats(candidates, expected_count, config)[0]
