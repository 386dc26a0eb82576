"""Cell lookup and bilinear interpolation over a ``GeoidModel``."""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .. import constants
from ..common_core import GeoidModel, GridIndices, OutOfBoundsError

log = logging.getLogger(__name__)


def _resolve_policy(bounds: Optional[str]) -> str:
    policy = bounds or constants.BOUNDS_POLICY
    if policy not in constants.BOUNDS_POLICIES:
        raise ValueError(
            f"Unknown bounds policy '{policy}', expected one of {constants.BOUNDS_POLICIES}"
        )
    return policy


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


def grid_indices(model: GeoidModel, lat: float, lon: float) -> GridIndices:
    """Corner indices of the cell around (lat, lon), clamped to the grid.

    Queries outside coverage collapse onto the nearest edge or corner cell.
    Non-finite coordinates have no cell and raise ``ValueError``.
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"non-finite coordinate ({lat}, {lon}) has no grid cell")
    row = (lat - model.lat_origin) / model.lat_step
    col = (lon - model.lon_origin) / model.lon_step

    row_floor = math.floor(row)
    col_floor = math.floor(col)
    return GridIndices(
        row_lo=_clamp(row_floor, model.row_count - 1),
        row_hi=_clamp(math.ceil(row), model.row_count - 1),
        col_lo=_clamp(col_floor, model.col_count - 1),
        col_hi=_clamp(math.ceil(col), model.col_count - 1),
        row_floor=row_floor,
        col_floor=col_floor,
    )


def interpolate(model: GeoidModel, lat: float, lon: float, bounds: Optional[str] = None) -> float:
    """Bilinear geoid height (m) at (lat, lon).

    With the default ``"extrapolate"`` policy this never raises: corner
    indices are clamped while the in-cell offsets are measured from the
    unclamped lower indices. Off-grid offsets can leave [0, 1], but they
    only ever scale a collapsed (zero) corner difference, so an off-grid
    point takes the value of its projection onto the nearest grid edge.
    ``"raise"`` rejects points outside ``model.bounds`` with
    ``OutOfBoundsError`` instead.

    A nan or infinite coordinate yields ``nan`` under ``"extrapolate"`` and
    ``OutOfBoundsError`` under ``"raise"``; ``interpolate_many`` agrees.
    """
    if _resolve_policy(bounds) == "raise" and not model.contains(lat, lon):
        raise OutOfBoundsError(lat, lon, model.bounds)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return math.nan

    idx = grid_indices(model, lat, lon)
    h11 = model.height_at(idx.row_lo, idx.col_lo)
    h12 = model.height_at(idx.row_lo, idx.col_hi)
    h21 = model.height_at(idx.row_hi, idx.col_lo)
    h22 = model.height_at(idx.row_hi, idx.col_hi)

    dlat = (lat - model.lat_origin - idx.row_floor * model.lat_step) / model.lat_step
    dlon = (lon - model.lon_origin - idx.col_floor * model.lon_step) / model.lon_step

    h_top = h11 + dlon * (h12 - h11)
    h_bot = h21 + dlon * (h22 - h21)
    return h_top + dlat * (h_bot - h_top)


def interpolate_many(model: GeoidModel, lats, lons, bounds: Optional[str] = None) -> np.ndarray:
    """Vectorised ``interpolate`` over broadcastable lat/lon arrays."""
    policy = _resolve_policy(bounds)
    lats, lons = np.broadcast_arrays(
        np.asarray(lats, dtype=np.float64), np.asarray(lons, dtype=np.float64)
    )

    if policy == "raise":
        lat_min, lon_min, lat_max, lon_max = model.bounds
        outside = ~((lats >= lat_min) & (lats <= lat_max) & (lons >= lon_min) & (lons <= lon_max))
        if outside.any():
            i = np.flatnonzero(outside.ravel())[0]
            raise OutOfBoundsError(float(lats.ravel()[i]), float(lons.ravel()[i]), model.bounds)

    # non-finite points are parked on the origin node, then masked to nan
    finite = np.isfinite(lats) & np.isfinite(lons)
    lats = np.where(finite, lats, model.lat_origin)
    lons = np.where(finite, lons, model.lon_origin)

    row = (lats - model.lat_origin) / model.lat_step
    col = (lons - model.lon_origin) / model.lon_step
    row_floor = np.floor(row)
    col_floor = np.floor(col)
    row_lo = np.clip(row_floor, 0, model.row_count - 1).astype(np.intp)
    row_hi = np.clip(np.ceil(row), 0, model.row_count - 1).astype(np.intp)
    col_lo = np.clip(col_floor, 0, model.col_count - 1).astype(np.intp)
    col_hi = np.clip(np.ceil(col), 0, model.col_count - 1).astype(np.intp)

    grid = model.grid
    h11 = grid[row_lo, col_lo]
    h12 = grid[row_lo, col_hi]
    h21 = grid[row_hi, col_lo]
    h22 = grid[row_hi, col_hi]

    dlat = (lats - model.lat_origin - row_floor * model.lat_step) / model.lat_step
    dlon = (lons - model.lon_origin - col_floor * model.lon_step) / model.lon_step

    h_top = h11 + dlon * (h12 - h11)
    h_bot = h21 + dlon * (h22 - h21)
    out = np.where(finite, h_top + dlat * (h_bot - h_top), np.nan)
    log.debug("Interpolated %d geoid heights (bounds=%s)", out.size, policy)
    return out
