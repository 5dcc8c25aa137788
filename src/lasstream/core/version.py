"""LAS format versions and the features each one allows."""

from __future__ import annotations

from dataclasses import dataclass

from lasstream.errors import InvalidVersionError

# Size of the fixed header, by minor version
HEADER_SIZES: dict[int, int] = {0: 227, 1: 227, 2: 227, 3: 235, 4: 375}

# Highest point format number each minor version allows
MAX_POINT_FORMAT: dict[int, int] = {0: 1, 1: 1, 2: 3, 3: 5, 4: 10}


@dataclass(frozen=True, order=True)
class Version:
    """A LAS version, 1.0 through 1.4.

    Examples:
        >>> Version.parse("1.4").header_size
        375
        >>> Version(1, 0).requires_point_data_start_signature
        True
    """

    major: int = 1
    minor: int = 2

    def __post_init__(self) -> None:
        if self.major != 1 or self.minor not in HEADER_SIZES:
            raise InvalidVersionError(
                f"Unsupported LAS version {self.major}.{self.minor}. "
                f"Supported: {', '.join(f'1.{m}' for m in HEADER_SIZES)}"
            )

    @classmethod
    def parse(cls, value: Version | str | tuple[int, int]) -> Version:
        """Build a version from "1.4", (1, 4) or an existing Version."""
        if isinstance(value, Version):
            return value
        if isinstance(value, str):
            try:
                major, minor = (int(x) for x in value.strip().split("."))
            except ValueError:
                raise InvalidVersionError(f"Invalid LAS version string: {value!r}") from None
            return cls(major, minor)
        major, minor = value
        return cls(int(major), int(minor))

    @property
    def header_size(self) -> int:
        return HEADER_SIZES[self.minor]

    def supports_point_format(self, format_number: int) -> bool:
        return 0 <= format_number <= MAX_POINT_FORMAT[self.minor]

    @property
    def supports_evlrs(self) -> bool:
        """Whether the header can locate EVLRs (1.3 only points at waveform data)."""
        return self.minor >= 4

    @property
    def supports_file_source_id(self) -> bool:
        return self.minor >= 1

    @property
    def supports_large_files(self) -> bool:
        """Whether the header carries 64-bit point counts."""
        return self.minor >= 4

    @property
    def requires_point_data_start_signature(self) -> bool:
        return self.minor == 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"
