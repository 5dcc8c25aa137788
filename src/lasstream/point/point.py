"""Cooked points: the caller-facing point representation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from lasstream.core.transform import Vector
from lasstream.point.format import Format
from lasstream.point.raw import RawPoint


class ScanDirection(IntEnum):
    """Direction the scanner mirror was travelling."""

    RIGHT_TO_LEFT = 0
    LEFT_TO_RIGHT = 1


@dataclass(frozen=True)
class Color:
    """16-bit RGB color."""

    red: int = 0
    green: int = 0
    blue: int = 0


@dataclass(frozen=True)
class Waveform:
    """Reference from a point to its waveform packet."""

    wave_packet_descriptor_index: int = 0
    byte_offset_to_waveform_data: int = 0
    waveform_packet_size_in_bytes: int = 0
    return_point_waveform_location: float = 0.0
    x_t: float = 0.0
    y_t: float = 0.0
    z_t: float = 0.0


@dataclass
class Point:
    """A point with real-valued coordinates and optional attributes.

    The optional attributes (``gps_time``, ``color``, ``nir``, ``waveform``)
    are ``None`` when absent. A point can only be written with a format
    whose required attributes are exactly the ones present here, see
    :meth:`matches`.

    ``scan_angle`` is in degrees. ``classification`` is the raw ASPRS
    class code; ``is_overlap`` is stored as class 12 by formats 0-5.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    intensity: int = 0
    return_number: int = 0
    number_of_returns: int = 0
    scan_direction: ScanDirection = ScanDirection.RIGHT_TO_LEFT
    is_edge_of_flight_line: bool = False
    classification: int = 0
    is_synthetic: bool = False
    is_key_point: bool = False
    is_withheld: bool = False
    is_overlap: bool = False
    scanner_channel: int = 0
    scan_angle: float = 0.0
    user_data: int = 0
    point_source_id: int = 0
    gps_time: float | None = None
    color: Color | None = None
    nir: int | None = None
    waveform: Waveform | None = None
    extra_bytes: bytes = b""

    @property
    def present_attributes(self) -> frozenset[str]:
        """Names of the optional attributes that are set on this point."""
        present = {
            "gps_time": self.gps_time is not None,
            "color": self.color is not None,
            "nir": self.nir is not None,
            "waveform": self.waveform is not None,
        }
        return frozenset(name for name, is_set in present.items() if is_set)

    def matches(self, format: Format) -> bool:
        """Check that this point carries exactly what the format stores.

        Surplus attributes would be silently dropped on encode and missing
        ones cannot be encoded, so both are mismatches.
        """
        return (
            self.present_attributes == format.required_attributes
            and len(self.extra_bytes) == format.extra_bytes
        )

    def into_raw(self, transforms: Vector, format: Format) -> RawPoint:
        """Encode this point with the header's transforms.

        Raises:
            ConversionError: If a field does not fit its on-disk representation.
        """
        return RawPoint.from_point(self, transforms, format)

