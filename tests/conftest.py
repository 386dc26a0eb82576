from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import pytest

from geoid_topo import constants


def _grid_text(records: Iterable[Sequence[float]], header: str = constants.GRID_HEADER, sep: str = "\t") -> str:
    lines = [header]
    lines.extend(sep.join(str(v) for v in rec) for rec in records)
    return "\n".join(lines) + "\n"


def _grid_records(lats, lons, heights):
    it = iter(heights)
    return [(lon, lat, next(it)) for lat in lats for lon in lons]


@pytest.fixture
def grid_text():
    """Render records as a grid definition file body."""
    return _grid_text


@pytest.fixture
def grid_records():
    """Row-major (lon, lat, height) records, latitude outer, longitude inner."""
    return _grid_records


@pytest.fixture
def write_grid(tmp_path):
    def _write(records, name: str = "grid.dat", **kwargs) -> Path:
        path = tmp_path / name
        path.write_text(_grid_text(records, **kwargs), encoding="utf8")
        return path

    return _write


@pytest.fixture
def pt_grid_path(write_grid) -> Path:
    """2x2 grid around Porto: lons {-9, -8}, lats {41, 42}, heights 10..16."""
    return write_grid(_grid_records([41.0, 42.0], [-9.0, -8.0], [10.0, 12.0, 14.0, 16.0]))
