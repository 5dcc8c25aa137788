"""Core value types for lasstream."""

from lasstream.core.bounds import Bounds
from lasstream.core.transform import Transform, Vector
from lasstream.core.version import Version

__all__ = ["Bounds", "Transform", "Vector", "Version"]
