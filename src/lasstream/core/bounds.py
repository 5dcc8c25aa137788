"""Axis-aligned 3D bounding box."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Bounds:
    """3D axis-aligned bounding box.

    Attributes:
        minx, miny, minz: Minimum corner coordinates.
        maxx, maxy, maxz: Maximum corner coordinates.
    """

    minx: float
    miny: float
    minz: float
    maxx: float
    maxy: float
    maxz: float

    @classmethod
    def from_point(cls, x: float, y: float, z: float) -> Bounds:
        """Degenerate box holding a single position."""
        return cls(minx=x, miny=y, minz=z, maxx=x, maxy=y, maxz=z)

    @classmethod
    def from_arrays(cls, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> Bounds:
        """Compute bounds from X, Y, Z arrays, or from per-axis [min, max] pairs."""
        return cls(
            minx=float(np.min(x)),
            miny=float(np.min(y)),
            minz=float(np.min(z)),
            maxx=float(np.max(x)),
            maxy=float(np.max(y)),
            maxz=float(np.max(z)),
        )

    def grow(self, x: float, y: float, z: float) -> Bounds:
        """Return the smallest box enclosing this box and the given position."""
        return Bounds(
            minx=min(self.minx, x),
            miny=min(self.miny, y),
            minz=min(self.minz, z),
            maxx=max(self.maxx, x),
            maxy=max(self.maxy, y),
            maxz=max(self.maxz, z),
        )

    def __repr__(self) -> str:
        return (
            f"Bounds(x=[{self.minx:.2f}, {self.maxx:.2f}], "
            f"y=[{self.miny:.2f}, {self.maxy:.2f}], "
            f"z=[{self.minz:.2f}, {self.maxz:.2f}])"
        )
