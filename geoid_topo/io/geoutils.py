"""
Geoid correction: ellipsoid heights to topographic (orthometric) heights.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from ..common_core import GeoidModel
from ..geom.grid_interp import interpolate, interpolate_many


def topographic_height(
    model: GeoidModel,
    lat: float,
    lon: float,
    ellipsoid_height: float,
    bounds: Optional[str] = None,
) -> float:
    """Return orthometric height H = h - N(lat, lon)."""
    return ellipsoid_height - interpolate(model, lat, lon, bounds=bounds)


def topographic_heights(
    model: GeoidModel,
    lats,
    lons,
    ellipsoid_heights,
    bounds: Optional[str] = None,
) -> np.ndarray:
    geoid = interpolate_many(model, lats, lons, bounds=bounds)
    return np.asarray(ellipsoid_heights, dtype=np.float64) - geoid
