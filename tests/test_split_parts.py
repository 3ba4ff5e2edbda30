"""Tests for the building blocks of the split-merge fitter."""

import math

import pytest

from contourfit.geometry import as_contour_array
from contourfit.splitmerge.candidates import CandidateTable
from contourfit.splitmerge.corners import CornerLedger
from contourfit.splitmerge.split_selector import (
    MaximumLineDistance, create_split_selector,
)


class TestMaximumLineDistance:
    """Tests for the default split selector."""

    def test_selects_farthest_point(self, square_contour):
        """Test that the split lands on the corner off the diagonal."""
        contour = as_contour_array(square_contour)
        results = MaximumLineDistance().select_split_point(contour, 0, 20)

        assert results.index == 10
        assert results.score == pytest.approx(50.0)

    def test_wrapping_side(self, square_contour):
        """Test a side that crosses the end of the contour."""
        contour = as_contour_array(square_contour)
        results = MaximumLineDistance().select_split_point(contour, 20, 0)

        assert results.index == 30

    def test_first_of_equal_points(self, line_contour):
        """Test that ties keep the first point."""
        contour = as_contour_array(line_contour)
        results = MaximumLineDistance().select_split_point(contour, 9, 0)

        assert results.index == 10
        assert results.score == 0.0

    def test_no_interior_point(self, square_contour):
        """Test that adjacent ends return the first end with a negative score."""
        contour = as_contour_array(square_contour)
        results = MaximumLineDistance().select_split_point(contour, 5, 6)

        assert results.index == 5
        assert results.score < 0

    def test_higher_score_is_better(self):
        """Test the comparison convention."""
        selector = MaximumLineDistance()

        assert selector.compare_score(2.0, 1.0) > 0
        assert selector.compare_score(1.0, 2.0) < 0
        assert selector.compare_score(1.0, 1.0) == 0

    def test_registry(self):
        """Test creation by name."""
        assert isinstance(create_split_selector("maximum_line_distance"), MaximumLineDistance)

        with pytest.raises(ValueError):
            create_split_selector("does_not_exist")


class TestCornerLedger:
    """Tests for the circular corner ordering."""

    def test_append_is_circular(self):
        """Test that the last corner links back to the first."""
        ledger = CornerLedger()
        slots = [ledger.append(i) for i in (5, 10, 15)]

        assert ledger.indices() == [5, 10, 15]
        assert ledger.next(slots[2]) == slots[0]
        assert ledger.previous(slots[0]) == slots[2]

    def test_insert_after(self):
        """Test insertion in the middle and after the tail."""
        ledger = CornerLedger()
        a = ledger.append(0)
        ledger.append(10)
        c = ledger.append(20)

        ledger.insert_after(a, 5)
        ledger.insert_after(c, 25)

        assert ledger.indices() == [0, 5, 10, 20, 25]
        assert len(ledger) == 5

    def test_remove_head(self):
        """Test that removing the head moves it to the next corner."""
        ledger = CornerLedger()
        a = ledger.append(0)
        b = ledger.append(10)
        c = ledger.append(20)

        ledger.remove(a)

        assert ledger.head == b
        assert ledger.indices() == [10, 20]
        assert ledger.next(c) == b
        # removed corners stay in the arena
        assert ledger[a].index == 0

    def test_reset(self):
        """Test that reset empties the ledger."""
        ledger = CornerLedger()
        ledger.append(1)
        ledger.reset()

        assert len(ledger) == 0
        assert ledger.indices() == []


class TestCandidateTable:
    """Tests for candidate retention."""

    def test_new_sizes_append(self):
        """Test that each size gets its own entry."""
        table = CandidateTable()

        assert table.save_or_improve([0, 10, 20], [1.0, 2.0, 3.0], 9.0)
        assert table.save_or_improve([0, 5, 10, 20], [1.0, 1.0, 2.0, 0.5], 7.0)

        assert len(table) == 2
        assert table.get(4).splits == [0, 5, 10, 20]
        assert table.get(4).max_side_error == 2.0
        assert table.get(5) is None

    def test_only_improvements_replace(self):
        """Test that a worse polygon of a known size is ignored."""
        table = CandidateTable()
        table.save_or_improve([0, 10, 20], [1.0, 1.0, 1.0], 5.0)

        assert not table.save_or_improve([1, 11, 21], [2.0, 2.0, 2.0], 8.0)
        assert not table.save_or_improve([1, 11, 21], [2.0, 2.0, 2.0], 5.0)
        assert table.get(3).splits == [0, 10, 20]

        assert table.save_or_improve([2, 12, 22], [0.5, 0.5, 0.5], 3.0)
        assert table.get(3).splits == [2, 12, 22]

    def test_sizes_cannot_be_skipped(self):
        """Test that saving a size past the end is an error."""
        table = CandidateTable()

        with pytest.raises(ValueError):
            table.save_or_improve([0, 1, 2, 3], [0.0] * 4, 1.0)

    def test_best_in_range(self):
        """Test selection restricted to a side count band."""
        table = CandidateTable()
        table.save_or_improve([0, 1, 2], [0.0] * 3, 10.0)
        table.save_or_improve([0, 1, 2, 3], [0.0] * 4, 4.0)
        table.save_or_improve([0, 1, 2, 3, 4], [0.0] * 5, 6.0)

        assert table.best_in_range(3, 20).num_sides == 4
        assert table.best_in_range(5, 5).num_sides == 5
        assert table.best_in_range(3, 3).score == 10.0
        assert table.best_in_range(6, 8) is None

    def test_unsaved_score_is_infinite(self):
        """Test the default candidate score."""
        from contourfit.models import CandidatePolyline

        assert math.isinf(CandidatePolyline().score)
        assert CandidatePolyline(splits=[1, 2, 3]).num_sides == 3
