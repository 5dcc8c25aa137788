"""Scale/offset transforms between real coordinates and stored integers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator

from lasstream.errors import ConversionError

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1


@dataclass(frozen=True)
class Transform:
    """Per-axis scale and offset.

    A stored integer ``n`` represents the coordinate ``n * scale + offset``.
    """

    scale: float = 0.001
    offset: float = 0.0

    def direct(self, n: int) -> float:
        """Apply this transform to a stored integer."""
        return n * self.scale + self.offset

    def inverse(self, value: float) -> int:
        """Convert a coordinate to the nearest stored integer.

        Raises:
            ConversionError: If the result is not a finite signed 32-bit integer.
        """
        n = (value - self.offset) / self.scale
        if not math.isfinite(n):
            raise ConversionError(f"Cannot transform {value} with {self}")
        n = round(n)
        if not I32_MIN <= n <= I32_MAX:
            raise ConversionError(
                f"Coordinate {value} is out of range for {self} "
                f"(stored value {n} does not fit in 32 bits)"
            )
        return n


@dataclass(frozen=True)
class Vector:
    """An x/y/z triple."""

    x: Any
    y: Any
    z: Any

    def __iter__(self) -> Iterator[Any]:
        return iter((self.x, self.y, self.z))


def default_transforms() -> Vector:
    return Vector(Transform(), Transform(), Transform())
