from __future__ import annotations

import json

import numpy as np

from geoid_topo.io.writers import RESULT_COLUMNS, write_manifest, write_results_csv


def test_write_results_csv_header_and_precision(tmp_path):
    path = tmp_path / "nested" / "heights.csv"
    write_results_csv(str(path), [(41.157944, -8.629105, 148.0, 57.123456, 90.876544)], precision=3)

    lines = path.read_text(encoding="utf8").splitlines()
    assert lines[0] == ",".join(RESULT_COLUMNS)
    fields = lines[1].split(",")
    assert float(fields[0]) == 41.157944
    assert float(fields[1]) == -8.629105
    assert fields[2:] == ["148.000", "57.123", "90.877"]


def test_write_results_csv_empty(tmp_path):
    path = tmp_path / "heights.csv"
    write_results_csv(str(path), [])
    assert path.read_text(encoding="utf8").splitlines() == [",".join(RESULT_COLUMNS)]


def test_write_manifest_serialises_numpy_scalars(tmp_path):
    path = write_manifest(str(tmp_path / "run"), {"count": np.int64(3), "mean": np.float32(0.5), "tags": {"a"}})
    data = json.loads(open(path, encoding="utf8").read())
    assert data == {"count": 3, "mean": 0.5, "tags": ["a"]}
