"""
Readers for tab-separated geoid grid definitions.

Loading is split in two phases so each can be tested on its own:
``parse_records`` turns lines into ``GridRecord``s, ``infer_shape`` and
``assemble_model`` lay those records out as a row-major ``GeoidModel``.
"""
from __future__ import annotations

import logging
import os
from typing import IO, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .. import constants
from ..common_core import FormatError, GeoidModel, GridError, GridRecord, HeaderError, RowError

log = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", IO[str]]


def columns_from_header(header: str) -> int:
    """Number of fields per record announced by the header (delimiters + 1)."""
    return header.count(constants.HEADER_DELIMITER) + 1


def parse_records(lines: Iterable[str]) -> Iterator[GridRecord]:
    """Validate the header and yield one ``GridRecord`` per data line.

    Trailing blank lines are ignored; a blank line followed by more data is
    reported as an invalid row.
    """
    it = iter(lines)
    try:
        header = next(it).rstrip("\r\n")
    except StopIteration:
        raise HeaderError("invalid header: empty source") from None
    if header != constants.GRID_HEADER:
        raise HeaderError(f"invalid header: {header!r}")

    n_fields = columns_from_header(header)
    blank_at: Optional[int] = None
    for line_number, raw in enumerate(it, start=2):
        line = raw.strip()
        if not line:
            if blank_at is None:
                blank_at = line_number
            continue
        if blank_at is not None:
            raise RowError(line_number=blank_at)
        yield _parse_row(line, line_number, n_fields)


def _parse_row(line: str, line_number: int, n_fields: int) -> GridRecord:
    tokens = line.split()
    if len(tokens) != n_fields:
        raise RowError(
            f"invalid row at line {line_number}: expected {n_fields} fields, got {len(tokens)}",
            line_number=line_number,
        )
    try:
        lon, lat, height = (float(tok) for tok in tokens)
    except ValueError:
        raise RowError(
            f"invalid row at line {line_number}: non-numeric field in {line!r}",
            line_number=line_number,
        ) from None
    if not (np.isfinite(lon) and np.isfinite(lat) and np.isfinite(height)):
        raise RowError(
            f"invalid row at line {line_number}: non-finite value in {line!r}",
            line_number=line_number,
        )
    return GridRecord(lon, lat, height)


def infer_shape(records: Sequence[GridRecord]) -> Tuple[int, int]:
    """Return ``(row_count, col_count)`` for records laid out row by row.

    A row is the leading run of records sharing the first latitude.
    """
    if not records:
        raise GridError("degenerate grid: no data records")

    lat0 = records[0].lat
    col_count = 0
    for rec in records:
        if rec.lat != lat0:
            break
        col_count += 1

    total = len(records)
    if total % col_count:
        raise GridError(
            f"ragged grid: {total} records do not fill rows of {col_count} columns"
        )
    return total // col_count, col_count


def assemble_model(
    records: Sequence[GridRecord],
    col_count: int,
    check_nodes: Optional[bool] = None,
) -> GeoidModel:
    """Build the height-only grid from parsed records."""
    total = len(records)
    if col_count < 2 or total < 2 * col_count:
        raise GridError(
            f"degenerate grid: {total} records with {col_count} columns"
        )
    if total % col_count:
        raise GridError(
            f"ragged grid: {total} records do not fill rows of {col_count} columns"
        )
    row_count = total // col_count

    table = np.asarray(records, dtype=np.float64)  # (N, 3): lon, lat, height
    lon_origin = float(table[0, 0])
    lat_origin = float(table[0, 1])
    lon_step = (float(table[col_count - 1, 0]) - lon_origin) / (col_count - 1)
    lat_step = (float(table[-1, 1]) - lat_origin) / (row_count - 1)
    if lon_step == 0 or lat_step == 0:
        raise GridError("degenerate grid: duplicate boundary coordinates give a zero step")

    if constants.CHECK_NODE_COORDINATES if check_nodes is None else check_nodes:
        _check_node_coordinates(table, row_count, col_count, lat_origin, lon_origin, lat_step, lon_step)

    return GeoidModel(
        row_count=row_count,
        col_count=col_count,
        lat_origin=lat_origin,
        lon_origin=lon_origin,
        lat_step=lat_step,
        lon_step=lon_step,
        heights=table[:, 2],
    )


def _check_node_coordinates(
    table: np.ndarray,
    row_count: int,
    col_count: int,
    lat_origin: float,
    lon_origin: float,
    lat_step: float,
    lon_step: float,
) -> None:
    rows, cols = np.divmod(np.arange(row_count * col_count), col_count)
    lon_err = np.abs(table[:, 0] - (lon_origin + cols * lon_step))
    lat_err = np.abs(table[:, 1] - (lat_origin + rows * lat_step))
    bad = (lon_err > constants.NODE_TOLERANCE * abs(lon_step)) | (
        lat_err > constants.NODE_TOLERANCE * abs(lat_step)
    )
    if bad.any():
        i = int(np.flatnonzero(bad)[0])
        raise GridError(
            f"node coordinate mismatch at record {i + 1}: "
            f"({table[i, 0]}, {table[i, 1]}) is not grid node ({rows[i]}, {cols[i]})"
        )


def read_records(source: Source) -> List[GridRecord]:
    try:
        if hasattr(source, "read"):
            return list(parse_records(source))
        with open(source, "r", encoding="utf8") as fh:
            return list(parse_records(fh))
    except UnicodeDecodeError as exc:
        raise FormatError(f"invalid encoding: {exc}") from exc


def load(source: Source, check_nodes: Optional[bool] = None) -> GeoidModel:
    """Load a ``GeoidModel`` from a path or an open text stream.

    Raises ``FormatError`` (``HeaderError``, ``RowError`` or ``GridError``)
    for malformed content, including bytes that are not UTF-8, and
    ``OSError`` when the source cannot be read.
    """
    records = read_records(source)
    _, col_count = infer_shape(records)
    model = assemble_model(records, col_count, check_nodes=check_nodes)
    log.info(
        "Loaded geoid grid %dx%d from %s (origin %.6f, %.6f; step %.6f, %.6f)",
        model.row_count,
        model.col_count,
        getattr(source, "name", source),
        model.lat_origin,
        model.lon_origin,
        model.lat_step,
        model.lon_step,
    )
    return model
