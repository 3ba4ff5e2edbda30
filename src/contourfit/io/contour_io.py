"""
Contour loading and fit result saving for Contour Fit.

Contours are read from JSON. Accepted layouts:
- a single contour: [[x, y], ...]
- several contours: {"contours": [[[x, y], ...], ...]}
- named contours: {"contours": [{"id": "a", "points": [[x, y], ...]}, ...]}
"""

import json
import os

from contourfit.geometry import as_contour_array
from contourfit.tracer import get_tracer, trace


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


@trace(label="load_contours")
def load_contours(path):
    """
    Load contours from a JSON file.

    Returns a list of (contour_id, points) tuples where contour_id is None
    when the file does not name the contour.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the file does not hold contours.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Contour file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        if "contours" not in data:
            raise ValueError(f"Contour file has no 'contours' key: {path}")
        entries = data["contours"]
    else:
        entries = [data]

    contours = []
    for idx, entry in enumerate(entries):
        if isinstance(entry, dict):
            if "points" not in entry:
                raise ValueError(f"Contour {idx} in {path} has no 'points'")
            contour_id = entry.get("id")
            points = entry["points"]
        else:
            contour_id = None
            points = entry

        try:
            contour = as_contour_array(points)
        except ValueError as e:
            raise ValueError(f"Contour {idx} in {path}: {e}") from e

        contours.append((contour_id, contour))

    tracer.event(f"Loaded {len(contours)} contours from {path}")
    return contours


def save_fit_results(report, path, indent=2):
    """
    Save a FitReport (or any Pydantic model / dict) to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(report, "model_dump"):
        report = report.model_dump()

    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")
