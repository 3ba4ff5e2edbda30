"""
Retention of the best polygon found for every side count.
"""

from contourfit.models import CandidatePolyline

# entry k of the table holds polygons with k + MIN_CORNERS sides
MIN_CORNERS = 3


class CandidateTable:
    """
    Best candidate seen so far for each side count, starting at three.

    Growing adds one side at a time, so a new size is always one past the
    end of the table. Shrinking revisits sizes that are already present and
    only replaces them when the score improves.
    """

    def __init__(self):
        self.polylines = []

    def reset(self):
        self.polylines = []

    def __len__(self):
        return len(self.polylines)

    def __iter__(self):
        return iter(self.polylines)

    def __getitem__(self, k):
        return self.polylines[k]

    def get(self, num_sides):
        """Candidate with num_sides sides, or None if none was saved."""
        k = num_sides - MIN_CORNERS
        if 0 <= k < len(self.polylines):
            return self.polylines[k]
        return None

    def save_or_improve(self, indices, side_errors, score):
        """
        Save the polygon if it beats the stored one of the same size.

        Args:
            indices: corner indices in polygon order
            side_errors: error of each side, same order as indices
            score: total score of the polygon

        Returns:
            True if the polygon was saved
        """
        k = len(indices) - MIN_CORNERS
        if k < 0:
            raise ValueError(f"A polygon needs at least {MIN_CORNERS} corners, got {len(indices)}")

        if k < len(self.polylines):
            candidate = self.polylines[k]
        elif k == len(self.polylines):
            candidate = CandidatePolyline()
            self.polylines.append(candidate)
        else:
            raise ValueError(f"Cannot save a {len(indices)} sided polygon, table only holds {len(self.polylines)} sizes")

        if candidate.score <= score:
            return False

        candidate.score = float(score)
        candidate.splits = [int(i) for i in indices]
        candidate.max_side_error = float(max(side_errors)) if side_errors else 0.0
        return True

    def best_in_range(self, min_sides, max_sides):
        """
        Lowest scoring candidate with a side count in [min_sides, max_sides].

        Returns None when no candidate falls inside the range.
        """
        best = None
        start = max(min_sides - MIN_CORNERS, 0)
        stop = min(max_sides - MIN_CORNERS + 1, len(self.polylines))

        for k in range(start, stop):
            candidate = self.polylines[k]
            if best is None or candidate.score < best.score:
                best = candidate

        return best
