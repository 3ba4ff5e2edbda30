"""
Pydantic data models for contour fitting results.

Fit results leave the fitter through these validated models so that they
can be serialized to JSON without extra glue.
"""

import hashlib
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CandidatePolyline(BaseModel):
    """A saved polygon fit: corner indices into the contour and its score."""
    splits: List[int] = Field(default_factory=list)
    score: float = float("inf")
    max_side_error: float = 0.0

    model_config = ConfigDict(extra="forbid")

    @property
    def num_sides(self):
        """Number of sides (and corners) in the polygon."""
        return len(self.splits)


class ContourFit(BaseModel):
    """Result of fitting a single contour."""
    contour_id: str
    num_points: int = 0
    success: bool = False
    best: Optional[CandidatePolyline] = None
    candidates: List[CandidatePolyline] = Field(default_factory=list)
    corners: List[List[float]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class FitReport(BaseModel):
    """Collection of contour fits written by the CLI."""
    fits: List[ContourFit] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def failure_count(self):
        """Count of contours that could not be fit."""
        return sum(1 for f in self.fits if not f.success or f.best is None)


def generate_contour_id(points, index, round_digits=2):
    """
    Generate a deterministic contour ID from its coordinates.

    Rounds coordinates to avoid floating point instability.
    """
    if len(points) == 0:
        return f"contour_{index}_empty"

    rounded = [[round(float(p[0]), round_digits), round(float(p[1]), round_digits)] for p in points]
    data = f"{index}:{rounded}"
    h = hashlib.sha256(data.encode()).hexdigest()[:12]
    return f"contour_{h}"
