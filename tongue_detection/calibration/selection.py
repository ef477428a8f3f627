"""
Tongue Selection Ordering

Lets a user pick detected candidates one at a time; the pick order becomes
the musical order of the tongues. Every transition returns an immutable
snapshot of the new state so callers can re-render without callbacks.

Usage:
    from tongue_detection.calibration.selection import SelectionSequencer

    seq = SelectionSequencer(num_candidates=12)
    seq.select(4)
    seq.select(1)
    state = seq.deselect(4)
    state.ordered_indices  # (1,)
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass

from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectionState:
    """Selected candidate indices in selection order."""
    ordered_indices: Tuple[int, ...] = ()

    def display_order(self, index: int) -> Optional[int]:
        """1-based position of *index*, or None if unselected."""
        try:
            return self.ordered_indices.index(index) + 1
        except ValueError:
            return None

    def display_numbers(self) -> Dict[int, int]:
        """Map of candidate index -> 1-based display number."""
        return {idx: pos + 1 for pos, idx in enumerate(self.ordered_indices)}


class SelectionSequencer:
    """
    Ordered multi-select over candidate indices.

    Deselecting renumbers the remaining selections so display numbers are
    always 1..n with no gaps.
    """

    def __init__(self, num_candidates: Optional[int] = None):
        """
        Args:
            num_candidates: when given, indices outside [0, num_candidates)
                are ignored
        """
        self.num_candidates = num_candidates
        self._order: List[int] = []

    @property
    def state(self) -> SelectionState:
        return SelectionState(tuple(self._order))

    def _in_range(self, index: int) -> bool:
        if index < 0 or (self.num_candidates is not None and index >= self.num_candidates):
            logger.debug(f"Ignoring out-of-range tongue index {index}")
            return False
        return True

    def select(self, index: int) -> SelectionState:
        """Append *index* to the selection; no-op if already selected."""
        if self._in_range(index) and index not in self._order:
            self._order.append(index)
        return self.state

    def deselect(self, index: int) -> SelectionState:
        """Remove *index* and renumber the rest; no-op if not selected."""
        if index in self._order:
            self._order.remove(index)
        return self.state

    def toggle(self, index: int) -> SelectionState:
        if index in self._order:
            return self.deselect(index)
        return self.select(index)

    def clear(self) -> SelectionState:
        self._order = []
        return self.state

    def current_order(self) -> Tuple[int, ...]:
        return tuple(self._order)

    def display_order(self, index: int) -> Optional[int]:
        return self.state.display_order(index)

    def is_selected(self, index: int) -> bool:
        return index in self._order

    def __contains__(self, index: int) -> bool:
        return self.is_selected(index)

    def __len__(self) -> int:
        return len(self._order)
