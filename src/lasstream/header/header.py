"""The LAS header: file configuration plus running point statistics."""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from enum import IntEnum

import laspy
from laspy.header import GlobalEncoding

from lasstream._version import __version__
from lasstream.core.bounds import Bounds
from lasstream.core.transform import Vector, default_transforms
from lasstream.core.version import Version
from lasstream.errors import ConversionError, HeaderError, InvalidPointFormatError
from lasstream.header.raw import RawHeader
from lasstream.point.format import Format, extra_bytes_dimension
from lasstream.point.point import Point
from lasstream.vlr import Vlr

# Written after the VLRs of LAS 1.0 files, little-endian 0xCCDD
POINT_DATA_START_SIGNATURE = b"\xdd\xcc"

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# Number of per-return counters kept in memory (the 1.4 maximum)
NUM_RETURN_SLOTS = 15
LEGACY_RETURN_SLOTS = 5


class GpsTimeType(IntEnum):
    """Meaning of the GPS time stored in point records."""

    WEEK = 0
    STANDARD = 1


def _default_software() -> str:
    return f"lasstream {__version__}"


@dataclass
class Header:
    """LAS header.

    Holds the configuration a writer needs (version, point format,
    transforms, identification, VLRs) and the statistics it accumulates
    while writing (point counts and bounds). A writer starts from a
    cleared copy, so any statistics set by the caller are discarded.

    ``version`` also accepts "1.4" or (1, 4), and ``point_format`` accepts
    a format number. A ``date`` of None is stamped with the day of writing.

    Encoding goes through :class:`laspy.LasHeader`, which leaves the legacy
    32-bit point counts of 1.4 files at zero.

    Examples:
        >>> header = Header(version="1.4", point_format=6)
        >>> header.point_format.has_gps_time
        True
        >>> header.number_of_points
        0
    """

    version: Version = field(default_factory=Version)
    point_format: Format = field(default_factory=Format)
    transforms: Vector = field(default_factory=default_transforms)
    file_source_id: int = 0
    gps_time_type: GpsTimeType = GpsTimeType.WEEK
    has_synthetic_return_numbers: bool = False
    has_wkt_crs: bool = False
    guid: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))
    system_identifier: str = "lasstream"
    generating_software: str = field(default_factory=_default_software)
    date: datetime.date | None = field(default_factory=datetime.date.today)
    padding: bytes = b""
    vlrs: list[Vlr] = field(default_factory=list)
    vlr_padding: bytes = b""
    evlrs: list[Vlr] = field(default_factory=list)
    number_of_points: int = field(default=0, init=False)
    number_of_points_by_return: list[int] = field(
        default_factory=lambda: [0] * NUM_RETURN_SLOTS, init=False
    )
    bounds: Bounds | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.version = Version.parse(self.version)
        if isinstance(self.point_format, int):
            self.point_format = Format.new(self.point_format)
        self.validate()

    def validate(self) -> None:
        """Check that the configuration can be written.

        Raises:
            HeaderError: On an invalid version/format/EVLR combination.
        """
        number = self.point_format.to_u8()
        if not self.version.supports_point_format(number):
            raise InvalidPointFormatError(
                f"LAS {self.version} does not support point format {number}"
            )
        if self.evlrs and not self.version.supports_evlrs:
            raise HeaderError(f"LAS {self.version} does not support EVLRs")
        if self.file_source_id and not self.version.supports_file_source_id:
            raise HeaderError(f"LAS {self.version} does not support a file source id")
        if not 0 <= self.file_source_id <= U16_MAX:
            raise HeaderError(f"File source id {self.file_source_id} is out of range")
        for axis, transform in zip("xyz", self.transforms):
            if transform.scale == 0:
                raise HeaderError(f"The {axis} scale must not be zero")

    # ── Running statistics ──────────────────────────────────────────

    def clear(self) -> None:
        """Reset point counts and bounds."""
        self.number_of_points = 0
        self.number_of_points_by_return = [0] * NUM_RETURN_SLOTS
        self.bounds = None

    def add_point(self, point: Point) -> None:
        """Account for a written point in the counts and bounds."""
        self.number_of_points += 1
        if 1 <= point.return_number <= NUM_RETURN_SLOTS:
            self.number_of_points_by_return[point.return_number - 1] += 1
        if self.bounds is None:
            self.bounds = Bounds.from_point(point.x, point.y, point.z)
        else:
            self.bounds = self.bounds.grow(point.x, point.y, point.z)

    # ── Layout ──────────────────────────────────────────────────────

    @property
    def point_data_padding(self) -> bytes:
        """Bytes written between the VLRs and the first point."""
        if self.version.requires_point_data_start_signature:
            return self.vlr_padding + POINT_DATA_START_SIGNATURE
        return self.vlr_padding

    @property
    def header_size(self) -> int:
        return self.version.header_size + len(self.padding)

    @property
    def offset_to_point_data(self) -> int:
        return (
            self.header_size
            + sum(vlr.len(extended=False) for vlr in self.vlrs)
            + len(self.point_data_padding)
        )

    @property
    def start_of_first_evlr(self) -> int:
        """Where the EVLRs start, given the points written so far (0 if none)."""
        if not self.evlrs:
            return 0
        return self.offset_to_point_data + self.number_of_points * len(self.point_format)

    # ── Encoding ────────────────────────────────────────────────────

    def into_raw(self) -> RawHeader:
        """Encode this header, its VLRs and the point data padding.

        Raises:
            HeaderError: If the configuration is invalid.
            ConversionError: If a value does not fit its header field.
            VlrError: If a VLR cannot be encoded.
        """
        self.validate()
        version = self.version
        point_format = self.point_format

        if self.header_size > U16_MAX:
            raise ConversionError(f"Header size {self.header_size} does not fit in 16 bits")
        if self.offset_to_point_data > U32_MAX:
            raise ConversionError(
                f"Offset to point data {self.offset_to_point_data} does not fit in 32 bits"
            )
        if len(point_format) > U16_MAX:
            raise ConversionError(f"Point record length {len(point_format)} is too large")
        if not version.supports_large_files and not self._fits_legacy_counts():
            raise ConversionError(
                f"{self.number_of_points} points do not fit in a LAS {version} header"
            )
        _check_ascii("System identifier", self.system_identifier)
        _check_ascii("Generating software", self.generating_software)

        # 1.0 is written with the 1.1 layout, see RawHeader
        las_version = f"1.{max(version.minor, 1)}"
        las_header = laspy.LasHeader(version=las_version, point_format=point_format.to_u8())
        if point_format.extra_bytes:
            # Appended in place: undocumented bytes get no extra bytes VLR
            las_header.point_format.dimensions.append(
                extra_bytes_dimension(point_format.extra_bytes)
            )

        las_header.file_source_id = self.file_source_id
        self._set_global_encoding(las_header.global_encoding)
        las_header.uuid = self.guid
        las_header.system_identifier = self.system_identifier
        las_header.generating_software = self.generating_software
        las_header.creation_date = self.date

        las_header.scales[:] = [t.scale for t in self.transforms]
        las_header.offsets[:] = [t.offset for t in self.transforms]
        if self.bounds is not None:
            las_header.mins[:] = [self.bounds.minx, self.bounds.miny, self.bounds.minz]
            las_header.maxs[:] = [self.bounds.maxx, self.bounds.maxy, self.bounds.maxz]
        las_header.point_count = self.number_of_points
        las_header.number_of_points_by_return[:] = self.number_of_points_by_return

        las_header.extra_header_bytes = bytes(self.padding)
        las_header.vlrs.extend(vlr.into_raw(extended=False) for vlr in self.vlrs)
        las_header.extra_vlr_bytes = self.point_data_padding
        if version.supports_evlrs:
            las_header.number_of_evlrs = len(self.evlrs)
            las_header.start_of_first_evlr = self.start_of_first_evlr

        return RawHeader(las_header=las_header, version_minor=version.minor)

    def _fits_legacy_counts(self) -> bool:
        by_return = self.number_of_points_by_return[:LEGACY_RETURN_SLOTS]
        return self.number_of_points <= U32_MAX and all(n <= U32_MAX for n in by_return)

    def _set_global_encoding(self, encoding: GlobalEncoding) -> None:
        minor = self.version.minor
        encoding.gps_time_type = self.gps_time_type if minor >= 2 else GpsTimeType.WEEK
        encoding.synthetic_return_numbers = minor >= 3 and self.has_synthetic_return_numbers
        encoding.wkt = minor >= 4 and self.has_wkt_crs


def _check_ascii(name: str, value: str) -> None:
    try:
        encoded = value.encode("ascii")
    except UnicodeEncodeError:
        raise ConversionError(f"{name} must be ASCII, got {value!r}") from None
    if len(encoded) > 32:
        raise ConversionError(f"{name} {value!r} is longer than 32 bytes")
