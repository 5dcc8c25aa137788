"""Binary encoding of point data records, packed by laspy."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, BinaryIO

import laspy

from lasstream.core.transform import Vector
from lasstream.errors import ConversionError
from lasstream.point.format import Format

if TYPE_CHECKING:
    from lasstream.point.point import Point

# Class code that legacy formats use for overlap points
OVERLAP_CLASSIFICATION = 12

# Extended formats store the scan angle in 0.006 degree increments
SCAN_ANGLE_SCALE = 0.006


def _check(name: str, value: int, low: int, high: int) -> int:
    value = int(value)
    if not low <= value <= high:
        raise ConversionError(f"{name} {value} is out of range [{low}, {high}]")
    return value


def _scan_angle(value: float, scale: float, low: int, high: int) -> int:
    if not math.isfinite(value):
        raise ConversionError(f"Scan angle {value} is not finite")
    return _check("Scan angle", round(value / scale), low, high)


def _set(record: laspy.PackedPointRecord, name: str, value: Any) -> None:
    # laspy records take sequences, one value per point
    record[name] = [value]


@dataclass
class RawPoint:
    """A point record encoded for one format.

    Attributes:
        record: One-point laspy record with the standard fields.
        extra_bytes: Trailing bytes, written after the standard fields.
    """

    record: laspy.PackedPointRecord
    extra_bytes: bytes = b""

    @classmethod
    def from_point(cls, point: Point, transforms: Vector, format: Format) -> RawPoint:
        """Encode a cooked point.

        Args:
            point: The point; its attributes must already match ``format``.
            transforms: Per-axis scale/offset of the header.
            format: The format to encode for.

        Raises:
            ConversionError: If any value does not fit its field.
        """
        record = laspy.PackedPointRecord.zeros(1, laspy.PointFormat(format.to_u8()))
        _set(record, "X", transforms.x.inverse(point.x))
        _set(record, "Y", transforms.y.inverse(point.y))
        _set(record, "Z", transforms.z.inverse(point.z))
        _set(record, "intensity", _check("Intensity", point.intensity, 0, 0xFFFF))
        _set(record, "user_data", _check("User data", point.user_data, 0, 0xFF))
        _set(
            record,
            "point_source_id",
            _check("Point source id", point.point_source_id, 0, 0xFFFF),
        )
        _set(record, "scan_direction_flag", int(point.scan_direction))
        _set(record, "edge_of_flight_line", int(point.is_edge_of_flight_line))
        _set(record, "synthetic", int(point.is_synthetic))
        _set(record, "key_point", int(point.is_key_point))
        _set(record, "withheld", int(point.is_withheld))

        if format.is_extended:
            _encode_extended_core(record, point)
        else:
            _encode_legacy_core(record, point)
        if format.has_gps_time:
            _set(record, "gps_time", point.gps_time)
        if format.has_color:
            _set(record, "red", _check("Red", point.color.red, 0, 0xFFFF))
            _set(record, "green", _check("Green", point.color.green, 0, 0xFFFF))
            _set(record, "blue", _check("Blue", point.color.blue, 0, 0xFFFF))
        if format.has_nir:
            _set(record, "nir", _check("NIR", point.nir, 0, 0xFFFF))
        if format.has_waveform:
            waveform = point.waveform
            _set(
                record,
                "wavepacket_index",
                _check(
                    "Wave packet descriptor index",
                    waveform.wave_packet_descriptor_index, 0, 0xFF,
                ),
            )
            _set(
                record,
                "wavepacket_offset",
                _check(
                    "Waveform data offset",
                    waveform.byte_offset_to_waveform_data, 0, 2**64 - 1,
                ),
            )
            _set(
                record,
                "wavepacket_size",
                _check(
                    "Waveform packet size",
                    waveform.waveform_packet_size_in_bytes, 0, 2**32 - 1,
                ),
            )
            _set(record, "return_point_wave_location", waveform.return_point_waveform_location)
            _set(record, "x_t", waveform.x_t)
            _set(record, "y_t", waveform.y_t)
            _set(record, "z_t", waveform.z_t)

        return cls(record=record, extra_bytes=bytes(point.extra_bytes))

    def to_bytes(self) -> bytes:
        return self.record.array.tobytes() + self.extra_bytes

    def write_to(self, stream: BinaryIO) -> None:
        stream.write(self.to_bytes())


def _encode_legacy_core(record: laspy.PackedPointRecord, point: Point) -> None:
    _set(record, "return_number", _check("Return number", point.return_number, 0, 7))
    _set(
        record,
        "number_of_returns",
        _check("Number of returns", point.number_of_returns, 0, 7),
    )

    classification = int(point.classification)
    if point.is_overlap:
        if classification not in (0, 1, OVERLAP_CLASSIFICATION):
            raise ConversionError(
                f"Overlap point with class {classification} cannot be stored "
                f"in a legacy point format"
            )
        classification = OVERLAP_CLASSIFICATION
    _set(record, "classification", _check("Classification", classification, 0, 31))

    if point.scanner_channel != 0:
        raise ConversionError("Legacy point formats cannot store a scanner channel")
    _set(record, "scan_angle_rank", _scan_angle(point.scan_angle, 1.0, -128, 127))


def _encode_extended_core(record: laspy.PackedPointRecord, point: Point) -> None:
    _set(record, "return_number", _check("Return number", point.return_number, 0, 15))
    _set(
        record,
        "number_of_returns",
        _check("Number of returns", point.number_of_returns, 0, 15),
    )
    _set(record, "overlap", int(point.is_overlap))
    _set(record, "scanner_channel", _check("Scanner channel", point.scanner_channel, 0, 3))
    _set(record, "classification", _check("Classification", point.classification, 0, 255))
    _set(
        record,
        "scan_angle",
        _scan_angle(point.scan_angle, SCAN_ANGLE_SCALE, -(2**15), 2**15 - 1),
    )
