"""
Calibration Session

Ties one detection run to the user's tongue ordering. Running detection
again replaces the candidates and discards the previous selection.
"""

from typing import List, Optional

from .selection import SelectionSequencer, SelectionState
from ..detection.detector import (
    DetectionBackend, DetectionResult, TongueDetector, detect_with_fallback
)
from ..detection.types import Candidate, PixelBuffer
from ..utils.config import Config
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


class CalibrationSession:
    """
    Detection results plus ordered selection for one calibration session.

    Not shared between sessions; create one instance per user session.
    """

    def __init__(
        self,
        backend: Optional[DetectionBackend] = None,
        config: Optional[Config] = None
    ):
        """
        Args:
            backend: detector to run (defaults to the built-in pipeline)
            config: configuration; supplies fallback geometry
        """
        self.config = config or Config()
        self.backend = backend if backend is not None else TongueDetector(self.config.detection)

        self.result: Optional[DetectionResult] = None
        self.selection = SelectionSequencer(num_candidates=0)

    @property
    def candidates(self) -> List[Candidate]:
        return self.result.candidates if self.result else []

    def run_detection(
        self,
        image: PixelBuffer,
        expected_count: Optional[int] = None
    ) -> DetectionResult:
        """
        Detect tongues on *image* and start a fresh selection.

        Args:
            image: RGBA image
            expected_count: tongue count hint; defaults to config.expected_count

        Returns:
            DetectionResult (possibly a fallback layout)
        """
        if expected_count is None:
            expected_count = self.config.expected_count

        result = detect_with_fallback(
            image.data, image.width, image.height, expected_count,
            backend=self.backend,
            fallback_config=self.config.fallback,
        )

        self.result = result
        self.selection = SelectionSequencer(num_candidates=len(result.candidates))

        if result.used_fallback:
            logger.warning("No tongues detected. Try adjusting the expected count or use a clearer image.")
        else:
            logger.info(f"Detected {len(result.candidates)} potential tongues")
        return result

    def select(self, index: int) -> SelectionState:
        return self.selection.select(index)

    def deselect(self, index: int) -> SelectionState:
        return self.selection.deselect(index)

    def toggle(self, index: int) -> SelectionState:
        state = self.selection.toggle(index)
        logger.debug(f"Selected tongues: {len(state.ordered_indices)}/{len(self.candidates)}")
        return state

    def clear_selection(self) -> SelectionState:
        return self.selection.clear()

    def ordered_candidates(self) -> List[Candidate]:
        """Selected candidates in the order the user picked them."""
        candidates = self.candidates
        return [candidates[i] for i in self.selection.current_order()]

    def reset(self):
        """Forget the detection run and the selection."""
        self.result = None
        self.selection = SelectionSequencer(num_candidates=0)
