"""Pytest fixtures for Contour Fit tests."""

import tempfile

import numpy as np
import pytest


def rasterize_polygon(vertices):
    """
    Walk the edges of a closed polygon in unit steps.

    Edges must be axis aligned or diagonal so every step lands on an integer
    point. Vertex k ends up at index sum(len(edge) for earlier edges).
    """
    points = []
    for k, start in enumerate(vertices):
        end = vertices[(k + 1) % len(vertices)]
        steps = max(abs(end[0] - start[0]), abs(end[1] - start[1]))
        for s in range(steps):
            points.append([
                start[0] + (end[0] - start[0]) * s // steps,
                start[1] + (end[1] - start[1]) * s // steps,
            ])
    return np.array(points, dtype=np.int32)


def circle_points(radius, count, center=(100, 100)):
    """Integer points on a circle, turning towards negative z."""
    theta = np.linspace(0, 2 * np.pi, count, endpoint=False)
    x = center[0] + radius * np.cos(theta)
    y = center[1] - radius * np.sin(theta)
    return np.round(np.column_stack([x, y])).astype(np.int32)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def rasterize():
    """Function that turns polygon vertices into a contour."""
    return rasterize_polygon


@pytest.fixture
def square_contour():
    """A 10x10 square with 10 contour points per edge, corners at 0, 10, 20, 30."""
    return rasterize_polygon([(0, 0), (10, 0), (10, 10), (0, 10)])


@pytest.fixture
def octagon_contour():
    """Convex octagon with edges of 10 points, winding towards negative z."""
    return rasterize_polygon([
        (10, 0), (0, 10), (0, 20), (10, 30),
        (20, 30), (30, 20), (30, 10), (20, 0),
    ])


@pytest.fixture
def circle_contour():
    """Circle of radius 50 sampled at 200 integer points."""
    return circle_points(50, 200)


@pytest.fixture
def line_contour():
    """Zero width contour that runs along a segment and back."""
    forward = [[x, 0] for x in range(10)]
    back = [[x, 0] for x in range(8, 0, -1)]
    return np.array(forward + back, dtype=np.int32)


@pytest.fixture
def default_config():
    """Create default fitter configuration."""
    from contourfit.config import SplitMergeConfig
    return SplitMergeConfig()


def assert_circular_order(splits, size):
    """Corner indices must increase strictly when walked circularly."""
    assert len(set(splits)) == len(splits)
    total = sum((splits[(k + 1) % len(splits)] - splits[k]) % size for k in range(len(splits)))
    assert total == size


@pytest.fixture
def check_circular_order():
    """Assertion helper for corner ordering."""
    return assert_circular_order
