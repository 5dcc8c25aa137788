"""CSV/text reader — delimited point records as a stream of Points."""

from __future__ import annotations

import io as _io
import logging
from pathlib import Path
from typing import Iterator

import numpy as np

from lasstream.core.dimensions import (
    COLOR_DIMENSIONS,
    FLOAT_FIELDS,
    STANDARD_DIMENSIONS,
    normalize_name,
)
from lasstream.point.point import Color, Point

logger = logging.getLogger(__name__)


class CsvReader:
    """Read CSV/TXT point files.

    Columns are matched to point fields by name, case-insensitively and
    ignoring underscores (``X``, ``GpsTime``, ``gps_time``, ``Red`` ...).
    A point gets ``gps_time``, ``nir`` or ``color`` only if the file has
    the corresponding columns.

    Options:
        delimiter: Field delimiter (default: auto-detect from ',', ';', '\\t', ' ').
        header: Comma-separated column names if the file has no header row.
            E.g., "X,Y,Z,Intensity". If not given, the first row is used.
        skip: Number of lines to skip before the header row (default: 0).
    """

    def __init__(
        self,
        delimiter: str | None = None,
        header: str | None = None,
        skip: int = 0,
    ) -> None:
        self.delimiter = delimiter
        self.header = header
        self.skip = skip

    def columns(self, path: str | Path) -> list[str]:
        """Column names of a file, without reading its data."""
        columns, _, _ = self._read_table(path, header_only=True)
        return columns

    def read(self, path: str | Path) -> Iterator[Point]:
        """Yield one Point per data row.

        Args:
            path: Path to the delimited text file.

        Yields:
            Points in file order.
        """
        columns, delimiter, remaining = self._read_table(path)
        if not remaining.strip():
            return

        # Bulk parse with np.loadtxt, then build points row by row
        data = np.loadtxt(
            _io.StringIO(remaining),
            delimiter=None if delimiter == " " else delimiter,
            dtype=np.float64,
            ndmin=2,
        )
        if data.shape[1] != len(columns):
            raise ValueError(
                f"{path}: {data.shape[1]} values per row but {len(columns)} columns"
            )

        fields: list[tuple[int, str]] = []
        color_index: dict[str, int] = {}
        for j, col in enumerate(columns):
            key = normalize_name(col)
            if key in STANDARD_DIMENSIONS:
                fields.append((j, STANDARD_DIMENSIONS[key]))
            elif key in COLOR_DIMENSIONS:
                color_index[key] = j
            else:
                logger.warning("Ignoring unknown column '%s' in %s", col, path)
        has_color = len(color_index) == len(COLOR_DIMENSIONS)
        if color_index and not has_color:
            logger.warning("Ignoring incomplete color columns in %s", path)

        for row in data:
            values = {
                name: float(row[j]) if name in FLOAT_FIELDS else int(row[j])
                for j, name in fields
            }
            if has_color:
                values["color"] = Color(*(int(row[color_index[c]]) for c in COLOR_DIMENSIONS))
            yield Point(**values)

    def _read_table(
        self, path: str | Path, header_only: bool = False
    ) -> tuple[list[str], str | None, str]:
        delimiter = self.delimiter
        with open(path, "r") as f:
            # Skip leading lines
            for _ in range(self.skip):
                f.readline()

            if self.header:
                columns = [c.strip() for c in self.header.split(",")]
            else:
                first_line = f.readline().strip()
                if delimiter is None:
                    delimiter = _detect_delimiter(first_line)
                columns = [c.strip() for c in first_line.split(delimiter) if c.strip()]

            remaining = "" if header_only else f.read()

        if delimiter is None and remaining:
            delimiter = _detect_delimiter(remaining.split("\n", 1)[0])
        return columns, delimiter, remaining


def _detect_delimiter(line: str) -> str:
    """Auto-detect the delimiter from a sample line."""
    for delim in [",", ";", "\t"]:
        if delim in line:
            return delim
    return " "
