"""Point data record formats 0-10."""

from __future__ import annotations

from dataclasses import dataclass

import laspy

from lasstream.errors import InvalidPointFormatError

# format number -> (gps_time, color, nir, waveform, extended)
_FLAGS: dict[int, tuple[bool, bool, bool, bool, bool]] = {
    0: (False, False, False, False, False),
    1: (True, False, False, False, False),
    2: (False, True, False, False, False),
    3: (True, True, False, False, False),
    4: (True, False, False, True, False),
    5: (True, True, False, True, False),
    6: (True, False, False, False, True),
    7: (True, True, False, False, True),
    8: (True, True, True, False, True),
    9: (True, False, False, True, True),
    10: (True, True, True, True, True),
}
_NUMBERS = {flags: number for number, flags in _FLAGS.items()}

# Names of the optional point attributes a format can require
OPTIONAL_ATTRIBUTES: tuple[str, ...] = ("gps_time", "color", "nir", "waveform")

# laspy's name for trailing bytes not described by an extra bytes VLR
EXTRA_BYTES_DIMENSION = "ExtraBytes"


def extra_bytes_dimension(count: int) -> laspy.DimensionInfo:
    """Dimension covering ``count`` undocumented bytes at the end of a record."""
    return laspy.DimensionInfo(
        name=EXTRA_BYTES_DIMENSION,
        kind=laspy.DimensionKind.UnsignedInteger,
        num_bits=8 * count,
        num_elements=count,
        is_standard=False,
        description="Un-registered ExtraBytes",
    )


@dataclass(frozen=True)
class Format:
    """Declares which optional attributes a point record carries.

    Build standard formats with :meth:`new`; the flags can also be set
    directly, in which case :meth:`to_u8` reports whether the combination
    is a real LAS format. Record layouts come from :class:`laspy.PointFormat`.

    Examples:
        >>> Format.new(3).has_color
        True
        >>> len(Format.new(1))
        28
        >>> len(Format(extra_bytes=4))
        24
    """

    has_gps_time: bool = False
    has_color: bool = False
    has_nir: bool = False
    has_waveform: bool = False
    is_extended: bool = False
    extra_bytes: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.extra_bytes <= 0xFFFF:
            raise InvalidPointFormatError(
                f"Extra bytes must be between 0 and 65535, got {self.extra_bytes}"
            )

    @classmethod
    def new(cls, number: int, extra_bytes: int = 0) -> Format:
        """Create the standard point format with the given number."""
        if number not in _FLAGS:
            raise InvalidPointFormatError(
                f"Invalid point format {number}. Supported: 0-10"
            )
        gps_time, color, nir, waveform, extended = _FLAGS[number]
        return cls(
            has_gps_time=gps_time,
            has_color=color,
            has_nir=nir,
            has_waveform=waveform,
            is_extended=extended,
            extra_bytes=extra_bytes,
        )

    def to_u8(self) -> int:
        """Return the format number for the header.

        Raises:
            InvalidPointFormatError: If no LAS format has this set of flags.
        """
        key = (
            self.has_gps_time,
            self.has_color,
            self.has_nir,
            self.has_waveform,
            self.is_extended,
        )
        if key not in _NUMBERS:
            raise InvalidPointFormatError(f"No point format matches {self!r}")
        return _NUMBERS[key]

    @property
    def required_attributes(self) -> frozenset[str]:
        """Optional point attributes that must be present for this format."""
        flags = (self.has_gps_time, self.has_color, self.has_nir, self.has_waveform)
        return frozenset(
            name for name, present in zip(OPTIONAL_ATTRIBUTES, flags) if present
        )

    @property
    def base_len(self) -> int:
        return laspy.PointFormat(self.to_u8()).size

    def __len__(self) -> int:
        return self.base_len + self.extra_bytes

    def __str__(self) -> str:
        try:
            name = f"point format {self.to_u8()}"
        except InvalidPointFormatError:
            name = "non-standard point format"
        if self.extra_bytes:
            name += f" with {self.extra_bytes} extra bytes"
        return name
