"""
Route danger index and safest route selection
"""
import logging

import numpy as np

from ..config import NO_COVERAGE_DANGER_INDEX, TIE_TOLERANCE
from ..snow.classes import SnowClass

logger = logging.getLogger(__name__)

SAFEST_COLOR = "green"
OTHER_COLOR = "red"


def danger_index(histogram):
    """
    Weighted mean class of a route

    ``(1*f1 + 2*f2 + 3*f3 + 4*f4) / (f1 + f2 + f3 + f4)``, or
    ``NO_COVERAGE_DANGER_INDEX`` when the route holds no classified pixel.
    """
    counts = {cls: histogram.get(cls, 0) for cls in SnowClass}
    total = sum(counts.values())
    if total == 0:
        return NO_COVERAGE_DANGER_INDEX
    return sum(int(cls) * count for cls, count in counts.items()) / total


def rank_routes(routes, tolerance=TIE_TOLERANCE):
    """
    Sort routes by danger index and flag the safest ones

    Args:
        routes: (Geo)DataFrame with ``name`` and ``danger_index`` columns
        tolerance: Routes within this distance of the minimum are all safest

    Routes without coverage are never safest. When no route has
    coverage, none is flagged.
    """
    ranked = routes.sort_values(["danger_index", "name"], kind="mergesort",
                                na_position="last").reset_index(drop=True)
    covered = ranked["danger_index"] < NO_COVERAGE_DANGER_INDEX

    if covered.any():
        min_index = ranked.loc[covered, "danger_index"].min()
        is_safest = covered & ((ranked["danger_index"] - min_index).abs() < tolerance)
        logger.info(f"Safest route danger index: {min_index:.4f}")
    else:
        is_safest = np.zeros(len(ranked), dtype=bool)
        if len(ranked):
            logger.warning("No route has classified snow coverage, none is safest")

    ranked["is_safest"] = np.asarray(is_safest, dtype=bool)
    ranked["style_color"] = np.where(ranked["is_safest"], SAFEST_COLOR, OTHER_COLOR)
    return ranked


def safest_route(ranked):
    """First safest row of a ranked table, or None."""
    safest = ranked[ranked["is_safest"]]
    if safest.empty:
        return None
    return safest.iloc[0]
