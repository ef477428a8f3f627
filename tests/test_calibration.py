"""Tests for tongue selection and calibration sessions."""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from tongue_detection.calibration.selection import SelectionSequencer, SelectionState
from tongue_detection.calibration.session import CalibrationSession
from tongue_detection.detection.types import PixelBuffer
from tongue_detection.errors import BackendFailure
from tongue_detection.utils.config import Config


def make_buffer(width, height, rects=()):
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    for (x, y, w, h) in rects:
        rgba[y:y + h, x:x + w, :3] = 255
    return PixelBuffer.from_array(rgba)


class TestSelectionSequencer:
    """Tests for SelectionSequencer class."""

    def test_initial_state(self):
        """Test empty initial selection."""
        seq = SelectionSequencer()
        assert seq.current_order() == ()
        assert len(seq) == 0

    def test_select_appends(self):
        """Test that selection order is kept."""
        seq = SelectionSequencer()
        seq.select(3)
        state = seq.select(1)
        assert state.ordered_indices == (3, 1)
        assert seq.display_order(3) == 1
        assert seq.display_order(1) == 2

    def test_select_twice_is_noop(self):
        """Test selecting an already selected index."""
        seq = SelectionSequencer()
        seq.select(2)
        seq.select(5)
        assert seq.select(2).ordered_indices == (2, 5)

    def test_deselect_renumbers(self):
        """Test renumbering after removing the first entry."""
        seq = SelectionSequencer()
        seq.select(0)
        seq.select(4)
        seq.deselect(0)
        assert seq.current_order() == (4,)
        assert seq.display_order(4) == 1
        assert seq.display_order(0) is None

    def test_deselect_middle(self):
        """Test renumbering after removing a middle entry."""
        seq = SelectionSequencer()
        for i in (7, 2, 9, 4):
            seq.select(i)
        state = seq.deselect(2)
        assert state.display_numbers() == {7: 1, 9: 2, 4: 3}

    def test_deselect_unselected_is_noop(self):
        """Test deselecting an index that is not selected."""
        seq = SelectionSequencer()
        seq.select(1)
        assert seq.deselect(6).ordered_indices == (1,)

    def test_toggle(self):
        """Test toggling an index on and off."""
        seq = SelectionSequencer()
        seq.toggle(3)
        assert 3 in seq
        seq.toggle(3)
        assert 3 not in seq

    def test_clear(self):
        """Test clearing the selection."""
        seq = SelectionSequencer()
        seq.select(1)
        seq.select(2)
        assert seq.clear() == SelectionState()
        assert not seq.is_selected(1)

    def test_out_of_range_ignored(self):
        """Test that indices outside the candidate list are ignored."""
        seq = SelectionSequencer(num_candidates=3)
        seq.select(3)
        seq.select(-1)
        seq.select(2)
        assert seq.current_order() == (2,)

    def test_returned_state_is_snapshot(self):
        """Test that returned states do not change later."""
        seq = SelectionSequencer()
        before = seq.select(1)
        seq.select(2)
        assert before.ordered_indices == (1,)


class FailingBackend:
    def detect(self, pixels, width, height, expected_count):
        raise RuntimeError("backend crashed")


class TestCalibrationSession:
    """Tests for CalibrationSession class."""

    @pytest.fixture
    def drum_image(self):
        rects = [(20 + 60 * c, 30, 30, 10) for c in range(4)]
        return make_buffer(300, 100, rects)

    def test_run_detection(self, drum_image):
        """Test detection on a four-tongue drum."""
        session = CalibrationSession()
        result = session.run_detection(drum_image, expected_count=4)
        assert not result.used_fallback
        assert len(session.candidates) == 4

    def test_ordered_candidates(self, drum_image):
        """Test candidates returned in selection order."""
        session = CalibrationSession()
        session.run_detection(drum_image, expected_count=4)
        session.toggle(2)
        session.toggle(0)
        ordered = session.ordered_candidates()
        assert ordered == [session.candidates[2], session.candidates[0]]

    def test_new_run_resets_selection(self, drum_image):
        """Test that a new run discards the selection."""
        session = CalibrationSession()
        session.run_detection(drum_image, expected_count=4)
        session.select(1)
        session.run_detection(drum_image, expected_count=4)
        assert session.selection.current_order() == ()

    def test_selection_bounded_by_candidates(self, drum_image):
        """Test that selection is bounded by the candidate count."""
        session = CalibrationSession()
        session.run_detection(drum_image, expected_count=4)
        state = session.select(10)
        assert state.ordered_indices == ()

    def test_fallback_on_backend_failure(self):
        """Test fallback layout when the backend fails."""
        session = CalibrationSession(backend=FailingBackend())
        result = session.run_detection(make_buffer(600, 600), expected_count=8)
        assert result.used_fallback
        assert isinstance(result.error, BackendFailure)
        assert len(session.candidates) == 8
        session.select(7)
        assert session.selection.current_order() == (7,)

    def test_default_expected_count(self):
        """Test the configured default tongue count."""
        config = Config(expected_count=6)
        session = CalibrationSession(config=config)
        result = session.run_detection(make_buffer(200, 200))
        assert result.used_fallback
        assert len(result.candidates) == 6

    def test_reset(self, drum_image):
        """Test clearing candidates and selection."""
        session = CalibrationSession()
        session.run_detection(drum_image, expected_count=4)
        session.select(0)
        session.reset()
        assert session.candidates == []
        assert session.ordered_candidates() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
