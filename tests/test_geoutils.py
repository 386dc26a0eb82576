from __future__ import annotations

import numpy as np
import pytest

from geoid_topo import load, topographic_height, topographic_heights
from geoid_topo.common_core import OutOfBoundsError
from geoid_topo.geom.grid_interp import interpolate


def test_topographic_height_subtracts_geoid(pt_grid_path):
    model = load(pt_grid_path)
    assert topographic_height(model, 41.5, -8.5, 148.0) == pytest.approx(135.0)


def test_topographic_height_matches_interpolate_everywhere(pt_grid_path):
    model = load(pt_grid_path)
    for lat, lon in [(41.0, -9.0), (41.2, -8.9), (41.9, -8.1), (50.0, -20.0)]:
        expected = 100.0 - interpolate(model, lat, lon)
        assert topographic_height(model, lat, lon, 100.0) == pytest.approx(expected)


def test_topographic_heights_vectorised(pt_grid_path):
    model = load(pt_grid_path)
    lats = np.array([41.0, 41.5, 42.0])
    lons = np.array([-9.0, -8.5, -8.0])
    out = topographic_heights(model, lats, lons, [110.0, 113.0, 116.0])
    assert np.allclose(out, [100.0, 100.0, 100.0])


def test_topographic_height_forwards_bounds_policy(pt_grid_path):
    model = load(pt_grid_path)
    with pytest.raises(OutOfBoundsError):
        topographic_height(model, 40.0, -8.5, 100.0, bounds="raise")
    with pytest.raises(OutOfBoundsError):
        topographic_heights(model, [40.0], [-8.5], [100.0], bounds="raise")
