"""
Typer CLI for converting GNSS ellipsoid heights to topographic heights.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Optional

import numpy as np
import typer

from .. import constants
from ..common_core import FormatError, GeoidModel
from ..geom.grid_interp import interpolate, interpolate_many
from ..io.readers import load
from ..io.writers import write_manifest, write_results_csv

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_model_path(explicit: Optional[str] = None) -> str:
    """Model path from the CLI, then GEOID_MODEL_PATH, then the default file."""
    if explicit and explicit.strip():
        return explicit.strip()

    env_path = os.getenv(constants.MODEL_PATH_ENV)
    if env_path and env_path.strip():
        return str(Path(env_path.strip()).expanduser())

    return constants.DEFAULT_MODEL_PATH


def read_points(points_path: str) -> np.ndarray:
    """Read ``lat lon ellipsoid_height`` rows, whitespace or comma separated."""
    text = Path(points_path).read_text(encoding="utf8").replace(",", " ")
    if not any(
        line.strip() and not line.lstrip().startswith(constants.COMMENT_PREFIX)
        for line in text.splitlines()
    ):
        return np.zeros((0, 3), dtype=np.float64)
    pts = np.loadtxt(io.StringIO(text), comments=constants.COMMENT_PREFIX, ndmin=2, dtype=np.float64)
    if pts.shape[1] != 3:
        raise ValueError(
            f"points file must have three columns (lat lon ellipsoid_height), got {pts.shape[1]}"
        )
    return pts


def convert_points(
    model_path: str,
    points_path: str,
    out_dir: str = "./out",
    bounds: Optional[str] = None,
    model: Optional[GeoidModel] = None,
) -> dict:
    """
    Convert every point in *points_path* and write heights.csv + manifest.json.
    Returns the manifest describing the run.

    Parameters
    ----------
    model_path : str
        Geoid grid file, loaded unless *model* is given
    points_path : str
        Text file of `lat lon ellipsoid_height` rows
    out_dir : str
        Output directory for results
    bounds : str, optional
        Out-of-coverage policy forwarded to the interpolator
    model : GeoidModel, optional
        Already loaded model for *model_path*
    """
    if model is None:
        model = load(model_path)
    pts = read_points(points_path)
    lats, lons, h_ellip = pts[:, 0], pts[:, 1], pts[:, 2]

    geoid = interpolate_many(model, lats, lons, bounds=bounds)
    topo = h_ellip - geoid
    lat_min, lon_min, lat_max, lon_max = model.bounds
    inside = (lats >= lat_min) & (lats <= lat_max) & (lons >= lon_min) & (lons <= lon_max)
    outside = int(np.count_nonzero(~inside))
    if outside:
        log.warning(
            "%d of %d points fall outside the geoid model coverage %s",
            outside,
            len(pts),
            model.bounds,
        )

    os.makedirs(out_dir, exist_ok=True)
    results_path = write_results_csv(
        os.path.join(out_dir, constants.RESULTS_FILENAME),
        np.column_stack([lats, lons, h_ellip, geoid, topo]),
    )
    manifest = {
        "model": {"path": str(model_path), **model.to_dict()},
        "points": {"path": str(points_path), "count": int(len(pts)), "outside_coverage": outside},
        "bounds_policy": bounds or constants.BOUNDS_POLICY,
        "outputs": {"results": results_path},
        "constants": _constants_snapshot(),
    }
    manifest["outputs"]["manifest"] = os.path.join(out_dir, constants.MANIFEST_FILENAME)
    write_manifest(out_dir, manifest)
    log.info("Converted %d points into %s", len(pts), results_path)
    return manifest


def _constants_snapshot() -> dict:
    snapshot = {}
    for name in dir(constants):
        if name.isupper():
            snapshot[name] = getattr(constants, name)
    return snapshot


def _load_or_exit(model_path: str) -> GeoidModel:
    try:
        return load(model_path)
    except FormatError as exc:
        typer.echo(f"error: {model_path}: {exc}", err=True)
        raise typer.Exit(code=2)
    except OSError as exc:
        typer.echo(f"error: cannot read geoid model: {exc}", err=True)
        raise typer.Exit(code=1)


app = typer.Typer(help="Topographic heights from GNSS ellipsoid heights and a geoid grid")


@app.callback()
def cli_main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@app.command("height")
def cli_height(
    lat: float,
    lon: float,
    ellipsoid_height: float,
    model: Optional[str] = typer.Option(None, help="Geoid grid file (default: $GEOID_MODEL_PATH or GeodPT08.dat)"),
    bounds: str = typer.Option(constants.BOUNDS_POLICY, help="Out-of-coverage policy: extrapolate or raise"),
) -> None:
    """Convert one point. Put negative coordinates after `--`."""
    geoid_model = _load_or_exit(resolve_model_path(model))
    if not geoid_model.contains(lat, lon):
        log.warning("Point (%s, %s) is outside the geoid model coverage %s", lat, lon, geoid_model.bounds)
    try:
        geoid = interpolate(geoid_model, lat, lon, bounds=bounds)
    except ValueError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)
    topo = ellipsoid_height - geoid

    prec = constants.OUTPUT_PRECISION
    typer.echo(f"GPS Coordinates: ({lat}, {lon})")
    typer.echo(f"Ellipsoid height: {ellipsoid_height:.{prec}f} m")
    typer.echo(f"Geoid height: {geoid:.{prec}f} m")
    typer.echo(f"Topographic height: {topo:.{prec}f} m")


@app.command("batch")
def cli_batch(
    points: str,
    model: Optional[str] = typer.Option(None, help="Geoid grid file"),
    out_dir: str = typer.Option("./out", help="Output directory"),
    bounds: str = typer.Option(constants.BOUNDS_POLICY, help="Out-of-coverage policy"),
) -> None:
    """Convert a points file of `lat lon ellipsoid_height` rows."""
    model_path = resolve_model_path(model)
    geoid_model = _load_or_exit(model_path)
    try:
        manifest = convert_points(model_path, points, out_dir=out_dir, bounds=bounds, model=geoid_model)
    except ValueError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)
    except OSError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{manifest['points']['count']} points -> {manifest['outputs']['results']}")


@app.command("info")
def cli_info(model: Optional[str] = typer.Option(None, help="Geoid grid file")) -> None:
    """Print grid dimensions, origin, step and coverage."""
    geoid_model = _load_or_exit(resolve_model_path(model))
    lat_min, lon_min, lat_max, lon_max = geoid_model.bounds
    typer.echo(f"Grid: {geoid_model.row_count} rows x {geoid_model.col_count} columns")
    typer.echo(f"Origin: ({geoid_model.lat_origin}, {geoid_model.lon_origin})")
    typer.echo(f"Step: ({geoid_model.lat_step}, {geoid_model.lon_step})")
    typer.echo(f"Coverage: lat [{lat_min}, {lat_max}] lon [{lon_min}, {lon_max}]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
