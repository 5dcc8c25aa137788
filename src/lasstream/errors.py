"""Exception types raised by lasstream.

I/O failures are never wrapped: they surface as the ``OSError`` raised by
the underlying stream.
"""

from __future__ import annotations

from typing import Any


class LasError(Exception):
    """Base class for all lasstream errors."""


class WriterError(LasError):
    """Base class for errors raised by the writer lifecycle."""


class ClosedError(WriterError):
    """The writer is closed."""

    def __init__(self, message: str = "the writer is closed") -> None:
        super().__init__(message)


class PointAttributesError(WriterError):
    """The attributes of the point format and point do not match.

    Attributes:
        format: The writer's active point format.
        point: The rejected point, returned to the caller untouched.
    """

    def __init__(self, format: Any, point: Any) -> None:
        self.format = format
        self.point = point
        super().__init__(
            f"the attributes of {format} do not match point {point!r}"
        )


class HeaderError(LasError, ValueError):
    """The header configuration cannot be encoded."""


class InvalidVersionError(HeaderError):
    """The LAS version is not supported."""


class InvalidPointFormatError(HeaderError):
    """The point format is unknown or not allowed by the version."""


class ConversionError(LasError, ValueError):
    """A value cannot be represented in its on-disk field."""


class VlrError(LasError, ValueError):
    """A variable length record cannot be encoded."""


class ConfigError(LasError, ValueError):
    """A header configuration file or mapping is invalid."""
