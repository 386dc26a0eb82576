"""
Writers for converted heights and run manifests.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterable, Sequence

import numpy as np

from .. import constants

RESULT_COLUMNS = (
    "latitude",
    "longitude",
    "ellipsoid_height",
    "geoid_height",
    "topographic_height",
)


def write_results_csv(path: str, rows: Iterable[Sequence[float]], precision: int | None = None) -> str:
    """
    Write one CSV line per converted point, columns as in RESULT_COLUMNS.
    Coordinates keep full precision; heights are rounded to *precision* decimals.
    """
    prec = constants.OUTPUT_PRECISION if precision is None else int(precision)
    table = np.asarray(list(rows), dtype=np.float64).reshape(-1, len(RESULT_COLUMNS))
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    fmt = ["%.9f", "%.9f"] + [f"%.{prec}f"] * 3
    np.savetxt(path, table, fmt=fmt, delimiter=",", header=",".join(RESULT_COLUMNS), comments="")
    return path


def write_manifest(out_dir: str, manifest: Dict[str, Any]) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, constants.MANIFEST_FILENAME)
    with open(path, "w", encoding="utf8") as fh:
        json.dump(manifest, fh, indent=2, default=_json_default)
        fh.write("\n")
    return path


def _json_default(obj):
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
