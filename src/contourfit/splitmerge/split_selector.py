"""
Strategies for choosing where a side should be split.

A selector proposes an interior contour index for a side along with a score.
Scores are only meaningful to the selector that produced them, so the driver
always compares them through compare_score().
"""

from collections import namedtuple

import numpy as np

from contourfit.geometry import circular_indices, line_distance_sq


SplitResults = namedtuple("SplitResults", ["index", "score"])


class SplitSelector:
    """
    Interface for split point selection.

    Subclasses implement select_split_point() and may override
    compare_score() when a lower score is the better one.
    """

    def select_split_point(self, contour, index_a, index_b):
        """
        Select the best point to split the side from index_a to index_b.

        Returns a SplitResults with the chosen contour index and its score.
        """
        raise NotImplementedError

    def compare_score(self, score_a, score_b):
        """
        Compare two scores.

        Returns a positive number if score_a is better, negative if score_b
        is better and zero if they are equal.
        """
        if score_a > score_b:
            return 1
        if score_a < score_b:
            return -1
        return 0


class MaximumLineDistance(SplitSelector):
    """
    Splits at the contour point farthest from the line through the side's
    end points.

    The score is the squared distance. A side without interior points yields
    index_a with a score of -1.
    """

    def select_split_point(self, contour, index_a, index_b):
        interior = circular_indices(index_a, index_b, len(contour))
        if len(interior) == 0:
            return SplitResults(index_a, -1.0)

        distances = line_distance_sq(contour[interior], contour[index_a], contour[index_b])

        # argmax keeps the first of several equally distant points
        best = int(np.argmax(distances))
        return SplitResults(int(interior[best]), float(distances[best]))


SPLIT_SELECTORS = {
    "maximum_line_distance": MaximumLineDistance,
}


def create_split_selector(name):
    """
    Create a split selector from its registered name.

    Raises ValueError for unknown names.
    """
    try:
        selector_class = SPLIT_SELECTORS[name]
    except KeyError:
        known = ", ".join(sorted(SPLIT_SELECTORS))
        raise ValueError(f"Unknown split selector '{name}'. Known selectors: {known}") from None

    return selector_class()
