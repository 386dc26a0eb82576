"""
Shared dataclasses, error types and the immutable geoid grid.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional, Tuple

import numpy as np


class FormatError(ValueError):
    """Raised when a geoid grid definition cannot be turned into a model."""

    reason = "invalid format"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.reason)


class HeaderError(FormatError):
    reason = "invalid header"


class RowError(FormatError):
    reason = "invalid row"

    def __init__(self, message: Optional[str] = None, line_number: Optional[int] = None):
        self.line_number = line_number
        if message is None and line_number is not None:
            message = f"{self.reason} at line {line_number}"
        super().__init__(message)


class GridError(FormatError):
    reason = "degenerate grid"


class OutOfBoundsError(ValueError):
    """Query outside model coverage under the opt-in "raise" bounds policy."""

    def __init__(self, lat: float, lon: float, bounds: Tuple[float, float, float, float]):
        self.lat = lat
        self.lon = lon
        self.bounds = bounds
        super().__init__(f"point ({lat}, {lon}) is outside geoid model bounds {bounds}")


class GridRecord(NamedTuple):
    """One parsed data line: a grid node and its geoid height."""

    lon: float
    lat: float
    height: float


class GridIndices(NamedTuple):
    """Clamped corner indices of the cell enclosing a query.

    ``row_floor``/``col_floor`` keep the unclamped lower indices; the
    offset formula is evaluated against them.
    """

    row_lo: int
    row_hi: int
    col_lo: int
    col_hi: int
    row_floor: int
    col_floor: int


@dataclass(frozen=True, eq=False)
class GeoidModel:
    """Regular lat/lon grid of geoid heights (meters), row-major."""

    row_count: int
    col_count: int
    lat_origin: float
    lon_origin: float
    lat_step: float
    lon_step: float
    heights: np.ndarray = field(repr=False)

    def __post_init__(self):
        if self.row_count < 2 or self.col_count < 2:
            raise GridError(
                f"degenerate grid: {self.row_count} rows x {self.col_count} columns"
            )
        if self.lat_step == 0 or self.lon_step == 0:
            raise GridError("degenerate grid: zero step size")
        if not (np.isfinite(self.lat_step) and np.isfinite(self.lon_step)):
            raise GridError("degenerate grid: non-finite step size")

        heights = np.array(self.heights, dtype=np.float64).ravel()
        if heights.size != self.row_count * self.col_count:
            raise GridError(
                f"ragged grid: {heights.size} heights for "
                f"{self.row_count} x {self.col_count} nodes"
            )
        heights.setflags(write=False)
        # frozen dataclass: bypass __setattr__ once to store the private copy
        object.__setattr__(self, "heights", heights)

    def height_at(self, row: int, col: int) -> float:
        return float(self.heights[row * self.col_count + col])

    @property
    def grid(self) -> np.ndarray:
        """Read-only (row_count, col_count) view of ``heights``."""
        return self.heights.reshape(self.row_count, self.col_count)

    def node_coordinate(self, row: int, col: int) -> Tuple[float, float]:
        return (
            self.lat_origin + row * self.lat_step,
            self.lon_origin + col * self.lon_step,
        )

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(lat_min, lon_min, lat_max, lon_max) regardless of step sign."""
        lat_end, lon_end = self.node_coordinate(self.row_count - 1, self.col_count - 1)
        return (
            min(self.lat_origin, lat_end),
            min(self.lon_origin, lon_end),
            max(self.lat_origin, lat_end),
            max(self.lon_origin, lon_end),
        )

    def contains(self, lat: float, lon: float) -> bool:
        lat_min, lon_min, lat_max, lon_max = self.bounds
        return lat_min <= lat <= lat_max and lon_min <= lon <= lon_max

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the georeferencing metadata (not the heights)."""
        lat_min, lon_min, lat_max, lon_max = self.bounds
        return {
            "row_count": int(self.row_count),
            "col_count": int(self.col_count),
            "lat_origin": float(self.lat_origin),
            "lon_origin": float(self.lon_origin),
            "lat_step": float(self.lat_step),
            "lon_step": float(self.lon_step),
            "bounds": {
                "lat_min": float(lat_min),
                "lon_min": float(lon_min),
                "lat_max": float(lat_max),
                "lon_max": float(lon_max),
            },
            "height_min": float(np.min(self.heights)),
            "height_max": float(np.max(self.heights)),
        }
