"""Topographic heights from GNSS ellipsoid heights and a regular geoid grid.

The public surface is deliberately small: ``load`` a grid definition,
``interpolate`` a geoid height, or go straight to ``topographic_height``.
"""
from __future__ import annotations

from .common_core import (
    FormatError,
    GeoidModel,
    GridError,
    GridIndices,
    GridRecord,
    HeaderError,
    OutOfBoundsError,
    RowError,
)
from .geom.grid_interp import grid_indices, interpolate, interpolate_many
from .io.geoutils import topographic_height, topographic_heights
from .io.readers import load

__all__: list[str] = [
    "FormatError",
    "GeoidModel",
    "GridError",
    "GridIndices",
    "GridRecord",
    "HeaderError",
    "OutOfBoundsError",
    "RowError",
    "grid_indices",
    "interpolate",
    "interpolate_many",
    "load",
    "topographic_height",
    "topographic_heights",
]

__version__ = "0.1.0"
