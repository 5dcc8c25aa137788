"""Write LAS points to a seekable stream.

A :class:`Writer` uses a :class:`~lasstream.header.Header` for its
configuration. The set of optional attributes on the point format and on
each point must match exactly:

    >>> import io
    >>> from lasstream import Color, Header, Point, Writer
    >>> writer = Writer(io.BytesIO(), Header(point_format=1))
    >>> point = Point()              # no optional attributes
    >>> writer.write(point)          # format 1 requires gps time
    Traceback (most recent call last):
    ...
    lasstream.errors.PointAttributesError: ...
    >>> point.gps_time = 42.0
    >>> writer.write(point)
    >>> point.color = Color(1, 2, 3)
    >>> writer.write(point)          # the color would be lost
    Traceback (most recent call last):
    ...
    lasstream.errors.PointAttributesError: ...
"""

from __future__ import annotations

import copy
import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable

from lasstream.errors import ClosedError, PointAttributesError
from lasstream.header.header import Header
from lasstream.point.point import Point
from lasstream.vlr import write_vlrs

logger = logging.getLogger(__name__)


class Writer:
    """Writes LAS data.

    The header is written twice: a placeholder when the writer is created
    and the final version, with the real point count and bounds, when it
    is closed. Points are appended in between.

    Use the writer as a context manager, or call :meth:`close` explicitly.
    A writer that is garbage collected while still open closes itself, but
    a failure at that point cannot be reported to anyone and aborts the
    process; call :meth:`close` to handle close errors.

    Examples:
        >>> import io
        >>> with Writer(io.BytesIO(), Header(version="1.4", point_format=6)) as writer:
        ...     writer.write(Point(x=1.0, y=2.0, z=3.0, gps_time=0.0))
    """

    def __init__(self, sink: BinaryIO, header: Header | None = None) -> None:
        """Create a writer and write the placeholder header and the VLRs.

        The header is copied and its point counts and bounds are zeroed.

        Args:
            sink: Seekable binary stream, positioned where the LAS data starts.
            header: File configuration (default: ``Header()``).

        Raises:
            HeaderError: If the header configuration is invalid.
            ConversionError, VlrError: If the header or a VLR cannot be encoded.
            OSError: If writing to the sink fails.
        """
        # Nothing to finalize until the placeholder is on disk
        self._closed = True
        self._owns_sink = False

        header = copy.deepcopy(header) if header is not None else Header()
        header.clear()

        self._start = sink.tell()
        header.into_raw().write_to(sink)

        self._sink = sink
        self._header = header
        self._closed = False
        logger.debug(
            "Opened LAS %s writer, %s, %d VLRs, %d EVLRs",
            header.version, header.point_format, len(header.vlrs), len(header.evlrs),
        )

    # ── Constructors ────────────────────────────────────────────────

    @classmethod
    def from_path(cls, path: str | Path, header: Header | None = None) -> Writer:
        """Create a writer for a new file.

        The file is opened buffered and owned by the writer: it is closed
        when the writer closes.

        Args:
            path: Output path, created or truncated.
            header: File configuration (default: ``Header()``).
        """
        f = open(path, "w+b")
        try:
            writer = cls(f, header)
        except BaseException:
            f.close()
            raise
        writer._owns_sink = True
        logger.info("Writing LAS data to %s", path)
        return writer

    @classmethod
    def default(cls) -> Writer:
        """Create a writer over an in-memory buffer with the default header."""
        return cls(io.BytesIO(), Header())

    # ── Properties ──────────────────────────────────────────────────

    @property
    def header(self) -> Header:
        """A copy of the header, with the counts and bounds of the points written so far."""
        return copy.deepcopy(self._header)

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Writing ─────────────────────────────────────────────────────

    def write(self, point: Point) -> None:
        """Write a point.

        The point is encoded and written first; the header counts and
        bounds only change once the bytes have been handed to the sink.

        Args:
            point: A point whose optional attributes exactly match the
                header's point format.

        Raises:
            ClosedError: If the writer is closed.
            PointAttributesError: If the point does not match the format.
                The rejected point is available as ``error.point``.
            ConversionError: If the point cannot be encoded.
            OSError: If writing to the sink fails.
        """
        if self._closed:
            raise ClosedError()
        point_format = self._header.point_format
        if not point.matches(point_format):
            raise PointAttributesError(point_format, point)
        raw = point.into_raw(self._header.transforms, point_format)
        raw.write_to(self._sink)
        self._header.add_point(point)

    def write_all(self, points: Iterable[Point]) -> int:
        """Write points in order, stopping at the first error.

        Returns:
            Number of points written.
        """
        count = 0
        for point in points:
            self.write(point)
            count += 1
        return count

    def close(self) -> None:
        """Write the EVLRs and the final header, then close the writer.

        If this fails the writer stays open, so ``close`` can be retried;
        the stream may be partially updated.

        Raises:
            ClosedError: If the writer is already closed.
            HeaderError, ConversionError, VlrError: If encoding fails.
            OSError: If writing or seeking fails.
        """
        if self._closed:
            raise ClosedError()
        self._finalize()
        if self._owns_sink:
            self._sink.close()
        self._mark_closed()

    def into_inner(self) -> BinaryIO:
        """Close this writer and return its stream, seeked to the start of the LAS data.

        The stream is left open and belongs to the caller, also for writers
        created with :meth:`from_path`.

        Raises:
            ClosedError: If the writer already closed the file it opened.

        Examples:
            >>> data = Writer.default().into_inner().read()
            >>> data[:4]
            b'LASF'
        """
        if not self._closed:
            self._finalize()
            self._mark_closed()
        elif self._owns_sink:
            raise ClosedError("the writer is closed and so is the file it opened")
        self._owns_sink = False
        self._sink.seek(self._start)
        return self._sink

    def _finalize(self) -> None:
        """Write the EVLRs and the final header, leaving the sink open."""
        header = self._header
        write_vlrs(header.evlrs, self._sink, extended=True)
        # TODO: truncate sinks that already held a longer LAS file at this position
        self._sink.seek(self._start)
        header.into_raw().write_to(self._sink)
        self._sink.flush()

    def _mark_closed(self) -> None:
        self._closed = True
        logger.info(
            "Closed LAS writer: %d points, bounds %s",
            self._header.number_of_points, self._header.bounds,
        )

    # ── Lifetime ────────────────────────────────────────────────────

    def __enter__(self) -> Writer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._closed:
            self.close()

    def __del__(self) -> None:
        if getattr(self, "_closed", True):
            return
        try:
            self.close()
        except Exception:
            logger.critical("Error when finalizing an unclosed LAS writer", exc_info=True)
            os.abort()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return (
            f"Writer({state}, LAS {self._header.version}, {self._header.point_format}, "
            f"{self._header.number_of_points:,} points)"
        )
