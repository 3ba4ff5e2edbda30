"""
Batch fitting of polygons to many contours.
"""

from contourfit.config import SplitMergeConfig
from contourfit.models import ContourFit, FitReport, generate_contour_id
from contourfit.splitmerge.polyline_split_merge import PolylineSplitMerge
from contourfit.tracer import get_tracer, trace


@trace(label="fit_contours")
def fit_contours(contours, config=None, splitter=None):
    """
    Fit a polygon to every contour.

    One fitter is reused for the whole batch, so this function must not be
    shared between threads. Run separate calls per thread instead.

    Args:
        contours: list of contours, or of (contour_id, contour) tuples
        config: SplitMergeConfig (optional)
        splitter: SplitSelector instance (optional)

    Returns:
        FitReport with one ContourFit per contour, in input order
    """
    tracer = get_tracer()

    if config is None:
        config = SplitMergeConfig()

    fitter = PolylineSplitMerge(config, splitter)
    report = FitReport()

    total_sides = 0
    for idx, entry in enumerate(contours):
        if _is_named_contour(entry):
            contour_id, contour = entry
        else:
            contour_id, contour = None, entry

        if contour_id is None:
            contour_id = generate_contour_id(contour, idx)

        fit = fit_single_contour(fitter, contour, contour_id)
        report.fits.append(fit)

        if fit.best is not None:
            total_sides += fit.best.num_sides

    fitted = len(report.fits) - report.failure_count
    tracer.event(f"Fitted {fitted}/{len(report.fits)} contours, {total_sides} sides in total")

    return report


def fit_single_contour(fitter, contour, contour_id):
    """
    Run the fitter on one contour and package the result.

    Candidates are copied so the result stays valid after the fitter is
    reused.
    """
    success = fitter.process(contour)

    best = fitter.get_best_polyline()
    corners = []
    if best is not None:
        corners = [[float(contour[i][0]), float(contour[i][1])] for i in best.splits]

    return ContourFit(
        contour_id=contour_id,
        num_points=len(contour),
        success=success,
        best=best.model_copy(deep=True) if best is not None else None,
        candidates=[c.model_copy(deep=True) for c in fitter.get_polylines()],
        corners=corners,
    )


def _is_named_contour(entry):
    """True for (contour_id, contour) pairs as returned by load_contours()."""
    return (
        isinstance(entry, tuple)
        and len(entry) == 2
        and isinstance(entry[0], (str, type(None)))
    )
