"""
Polygon fitting by greedy splitting and merging of polyline sides.

The fit starts from the triangle that best approximates the contour. Sides
are then split one at a time, always picking the side whose split changes
the error the most, until a few more sides than the requested maximum exist.
Corners are then removed one at a time while removal lowers the score. The
best polygon seen for every side count is kept and the overall best one
within [min_sides, max_sides] is the result.

Corners always follow the contour's winding, so their indices are in
increasing circular order.
"""

import math

import numpy as np

from contourfit.config import SplitMergeConfig, validate_config
from contourfit.geometry import (
    as_contour_array, circular_distance, distance_sq, is_positive_z, turn_z,
)
from contourfit.splitmerge.candidates import CandidateTable
from contourfit.splitmerge.corners import CornerLedger
from contourfit.splitmerge.side_error import compute_side_error
from contourfit.splitmerge.split_selector import create_split_selector
from contourfit.tracer import get_tracer, trace


class SplitMergeError(RuntimeError):
    """Raised when the fitter reaches a state that indicates a logic error."""


class PolylineSplitMerge:
    """
    Fits a polygon to a closed contour.

    Not safe for concurrent use: every call to process() resets the working
    state of the instance. Use one instance per thread.

    Args:
        config: SplitMergeConfig, defaults are used if None
        splitter: SplitSelector instance. If None one is created from
            config.split_selector
    """

    def __init__(self, config=None, splitter=None):
        self.config = config if config is not None else SplitMergeConfig()
        validate_config(self.config)

        if splitter is None:
            splitter = create_split_selector(self.config.split_selector)
        self.splitter = splitter

        self.ledger = CornerLedger()
        self.candidates = CandidateTable()
        self.best_polyline = None

    @trace(label="polyline_split_merge")
    def process(self, contour):
        """
        Fit a polygon to the contour.

        Args:
            contour: sequence of [x, y] points forming a closed loop

        Returns:
            True if a fit was computed, False if the contour is degenerate.
            The best polygon is then available from get_best_polyline().
        """
        config = self.config
        validate_config(config)
        tracer = get_tracer()

        self.ledger.reset()
        self.candidates.reset()
        self.best_polyline = None

        contour = as_contour_array(contour)
        if len(contour) < 3:
            tracer.event(f"Contour too short: {len(contour)} points", level="DEBUG")
            return False

        if not self._find_initial_triangle(contour):
            return False
        self._save_polyline(contour)

        # fitting more sides than needed lets the shrink phase undo bad splits
        limit = config.max_sides + config.extra_consider
        while len(self.ledger) < limit:
            if not self._increase_number_of_sides_by_one(contour):
                break

        while self._select_and_remove_corner(contour):
            pass

        self.best_polyline = self.candidates.best_in_range(config.min_sides, config.max_sides)

        if self.best_polyline is None:
            tracer.event(
                f"No polygon with {config.min_sides} to {config.max_sides} sides",
                level="DEBUG", sizes=len(self.candidates),
            )
        else:
            tracer.event(
                "Selected polygon", level="DEBUG",
                best=self.best_polyline, sizes=len(self.candidates),
            )

        return True

    def get_best_polyline(self):
        """Best CandidatePolyline from the last call to process(), or None."""
        return self.best_polyline

    def get_polylines(self):
        """Best CandidatePolyline for each side count, starting at three."""
        return list(self.candidates)

    def compute_corner_penalty(self, contour_size):
        """Score added for every corner in a polygon."""
        return contour_size * self.config.corner_score_penalty

    def compute_score(self, contour_size):
        """Score of the current polygon: side errors plus corner penalties."""
        penalty = self.compute_corner_penalty(contour_size)
        return sum(self.ledger.side_errors()) + penalty * len(self.ledger)

    def _save_polyline(self, contour):
        saved = self.candidates.save_or_improve(
            self.ledger.indices(),
            self.ledger.side_errors(),
            self.compute_score(len(contour)),
        )
        return saved

    def _find_initial_triangle(self, contour):
        tracer = get_tracer()
        size = len(contour)

        corner_seed = find_corner_seed(contour)

        # see if it can reject the contour immediately
        if self.config.convex and not sanity_check_convex(contour, 0, corner_seed):
            tracer.event("Contour rejected by convex sanity check", level="DEBUG", seed=corner_seed)
            return False

        results_a = self.splitter.select_split_point(contour, 0, corner_seed)
        results_b = self.splitter.select_split_point(contour, corner_seed, 0)

        if self.splitter.compare_score(results_a.score, results_b.score) >= 0:
            first, second = results_a.index, corner_seed
        else:
            first, second = corner_seed, results_b.index

        results_c = self.splitter.select_split_point(contour, second, first)
        triangle = [first, second, results_c.index]

        for index in triangle:
            _check_split_location(index, size)

        if len(set(triangle)) < 3:
            tracer.event(f"Degenerate initial triangle {triangle}", level="DEBUG")
            return False

        # keep the corners in the contour's winding order
        start = triangle[0]
        triangle.sort(key=lambda i: circular_distance(start, i, size))
        for index in triangle:
            self.ledger.append(index)

        tracer.event(
            "Initial triangle", level="DEBUG", corners=triangle,
            turn=turn_z(*(contour[i] for i in triangle)),
        )

        for slot in self.ledger.slots():
            corner = self.ledger[slot]
            following = self.ledger[self.ledger.next(slot)]
            corner.side_error = self._side_error(contour, corner.index, following.index)

        for slot in self.ledger.slots():
            self._compute_potential_split_score(contour, slot)

        return True

    def _increase_number_of_sides_by_one(self, contour):
        """
        Split the side that changes the score the most.

        Returns False if no side can be split.
        """
        selected = self._select_corner_to_split()
        if selected is None:
            return False

        corner = self.ledger[selected]
        corner.side_error = corner.split_error0

        new_slot = self.ledger.insert_after(selected, corner.split_location)
        self.ledger[new_slot].side_error = corner.split_error1

        self._compute_potential_split_score(contour, new_slot)
        self._compute_potential_split_score(contour, selected)

        get_tracer().event(
            "Split side", level="DEBUG",
            at=self.ledger[new_slot].index, sides=len(self.ledger),
        )

        self._save_polyline(contour)
        return True

    def _select_corner_to_split(self):
        """
        Slot of the corner whose side should be split next, or None.

        In convex mode a split must change the score by a positive amount.
        """
        selected = None
        best_change = 0.0 if self.config.convex else -math.inf

        for slot in self.ledger.slots():
            corner = self.ledger[slot]
            if not corner.splitable:
                continue

            # the largest change in either direction gives the best results
            change = abs(corner.side_error - corner.split_error0 - corner.split_error1)
            if change > best_change:
                best_change = change
                selected = slot

        return selected

    def _select_and_remove_corner(self, contour):
        """
        Remove the corner whose removal improves the score the most.

        Returns False if there are only three corners left or no removal
        improves the score.
        """
        if len(self.ledger) <= 3:
            return False

        ledger = self.ledger
        corner_penalty = self.compute_corner_penalty(len(contour))

        best = None
        best_change = -math.inf
        new_side_error = -1.0

        for slot in ledger.slots():
            prev_corner = ledger[ledger.previous(slot)]
            next_corner = ledger[ledger.next(slot)]

            # only the sides touching this corner change
            before = prev_corner.side_error + ledger[slot].side_error + corner_penalty
            after = self._side_error(contour, prev_corner.index, next_corner.index)

            if before - after > best_change:
                best_change = before - after
                new_side_error = after
                best = slot

        if best is None or best_change <= 0:
            return False

        prev_slot = ledger.previous(best)
        removed_index = ledger[best].index
        ledger[prev_slot].side_error = new_side_error
        ledger.remove(best)
        self._compute_potential_split_score(contour, prev_slot)

        get_tracer().event(
            "Removed corner", level="DEBUG",
            at=removed_index, sides=len(ledger), change=best_change,
        )

        self._save_polyline(contour)
        return True

    def _compute_potential_split_score(self, contour, slot):
        """Update whether the side can be split and where it would be split."""
        corner = self.ledger[slot]
        following = self.ledger[self.ledger.next(slot)]

        corner.splitable = self._can_be_split(len(contour), corner, following)
        if corner.splitable:
            self._set_split_variables(contour, corner, following)

    def _can_be_split(self, contour_size, corner, following):
        """
        A side can be split if it is long enough and does not already fit
        the contour nearly perfectly.
        """
        length = circular_distance(corner.index, following.index, contour_size)
        if length < self.config.minimum_side_length:
            return False

        return corner.side_error > self.config.threshold_side_split_score * length

    def _set_split_variables(self, contour, corner, following):
        size = len(contour)
        results = self.splitter.select_split_point(contour, corner.index, following.index)
        _check_split_location(results.index, size)

        # the split point has to lie strictly inside the side
        offset = circular_distance(corner.index, results.index, size)
        if offset == 0 or offset >= circular_distance(corner.index, following.index, size):
            corner.splitable = False
            return

        # if convex only split when the polygon stays convex
        if self.config.convex:
            a = contour[corner.index]
            b = contour[results.index]
            c = contour[following.index]
            if is_positive_z(a, b, c):
                corner.splitable = False
                return

        corner.split_location = results.index
        corner.split_error0 = self._side_error(contour, corner.index, results.index)
        corner.split_error1 = self._side_error(contour, results.index, following.index)

    def _side_error(self, contour, index_a, index_b):
        return compute_side_error(contour, index_a, index_b, self.config.max_number_of_side_samples)


def _check_split_location(index, size):
    if not 0 <= index < size:
        raise SplitMergeError(f"Split location {index} is outside of contour with {size} points")


def find_corner_seed(contour):
    """
    Index of the contour point farthest from the first point.

    In a perfect polygon without noise this point is a corner.
    """
    contour = np.asarray(contour, dtype=np.float64)
    distances = ((contour[1:] - contour[0]) ** 2).sum(axis=1)
    return int(np.argmax(distances)) + 1


def sanity_check_convex(contour, index_a, index_b):
    """
    Check that a contour could be convex given two of its points.

    No boundary path of a convex shape between two points can be longer
    than a half circle around them, so if either arc between index_a and
    index_b has more points than that the contour is not convex.
    """
    d = math.sqrt(distance_sq(contour[index_a], contour[index_b]))
    max_allowed = int(math.pi * d + 0.5)

    size = len(contour)
    length0 = circular_distance(index_a, index_b, size)
    length1 = circular_distance(index_b, index_a, size)

    return length0 <= max_allowed and length1 <= max_allowed
