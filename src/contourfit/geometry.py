"""
Geometry primitives shared by the contour fitter.

Contours are (N, 2) float arrays of pixel coordinates. All index helpers
treat the contour as closed, so index arithmetic wraps modulo N.
"""

import numpy as np


def as_contour_array(points):
    """
    Convert a sequence of [x, y] points into an (N, 2) float64 array.

    Raises ValueError if the input cannot be interpreted as 2D points.
    """
    arr = np.asarray(points, dtype=np.float64)

    if arr.size == 0:
        return arr.reshape(0, 2)

    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Contour must have shape (N, 2), got {arr.shape}")

    return arr


def distance_sq(a, b):
    """Squared Euclidean distance between two points."""
    dx = float(b[0]) - float(a[0])
    dy = float(b[1]) - float(a[1])
    return dx * dx + dy * dy


def line_distance_sq(points, a, b):
    """
    Squared perpendicular distance from each point to the infinite line
    passing through a and b.

    Args:
        points: (M, 2) array
        a: first point on the line
        b: second point on the line

    Returns:
        (M,) array of squared distances. If a and b coincide the squared
        distance to a is returned instead.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    slope_x = float(b[0]) - float(a[0])
    slope_y = float(b[1]) - float(a[1])

    dx = points[:, 0] - float(a[0])
    dy = points[:, 1] - float(a[1])

    length_sq = slope_x * slope_x + slope_y * slope_y
    if length_sq == 0:
        return dx * dx + dy * dy

    cross = dx * slope_y - dy * slope_x
    return cross * cross / length_sq


def turn_z(a, b, c):
    """
    Z component of the cross product (b - a) x (c - b).

    The sign tells which way the path a -> b -> c turns.
    """
    dx0 = float(b[0]) - float(a[0])
    dy0 = float(b[1]) - float(a[1])
    dx1 = float(c[0]) - float(b[0])
    dy1 = float(c[1]) - float(b[1])
    return dx0 * dy1 - dy0 * dx1


def is_positive_z(a, b, c):
    """True if a -> b -> c makes a positive-z turn."""
    return turn_z(a, b, c) > 0


def circular_distance(index0, index1, size):
    """Number of forward steps from index0 to index1 on a closed contour."""
    return (index1 - index0) % size


def circular_indices(index0, index1, size):
    """
    Indices strictly between index0 and index1 walking forward.

    When index0 == index1 the walk goes all the way around the contour.
    """
    length = circular_distance(index0, index1, size)
    if length == 0:
        length = size
    return (index0 + 1 + np.arange(length - 1)) % size
