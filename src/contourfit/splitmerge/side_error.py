"""
Side scoring for the split-merge fitter.

A side is scored by the sum of squared distances of the contour points it
spans to the line through its two end points.
"""

import numpy as np

from contourfit.geometry import circular_distance, line_distance_sq


def compute_side_error(contour, index_a, index_b, max_samples=50):
    """
    Score the side that starts at index_a and ends at index_b.

    The walk goes forward from index_a (inclusive) to index_b (exclusive),
    wrapping around the end of the contour if needed. End points are never
    sampled since their distance is zero by construction. Long sides are
    sampled at no more than max_samples evenly spaced points and the sum is
    scaled up to the true number of interior points.

    Args:
        contour: (N, 2) float array
        index_a: index of the first corner
        index_b: index of the second corner
        max_samples: cap on the number of sampled points

    Returns:
        approximate sum of squared point-to-line distances
    """
    size = len(contour)
    length = circular_distance(index_a, index_b, size) or size
    length -= 1

    num_samples = min(length, max_samples)
    if num_samples <= 0:
        return 0.0

    offsets = (length * np.arange(num_samples)) // num_samples
    indices = (index_a + 1 + offsets) % size

    distances = line_distance_sq(contour[indices], contour[index_a], contour[index_b])

    # scale the error to the actual length in pixels
    return float(distances.sum()) * length / num_samples
