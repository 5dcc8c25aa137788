"""lasstream — streaming LAS point cloud writer."""

from lasstream._version import __version__
from lasstream.core.bounds import Bounds
from lasstream.core.transform import Transform, Vector
from lasstream.core.version import Version
from lasstream.errors import (
    ClosedError,
    ConversionError,
    HeaderError,
    LasError,
    PointAttributesError,
    VlrError,
)
from lasstream.header.config import header_from_dict, load_header_config
from lasstream.header.header import GpsTimeType, Header
from lasstream.io.writer import Writer
from lasstream.point.format import Format
from lasstream.point.point import Color, Point, ScanDirection, Waveform
from lasstream.vlr import Vlr

__all__ = [
    "__version__",
    "Writer",
    "Header",
    "GpsTimeType",
    "Point",
    "Color",
    "Waveform",
    "ScanDirection",
    "Format",
    "Version",
    "Transform",
    "Vector",
    "Bounds",
    "Vlr",
    "header_from_dict",
    "load_header_config",
    "LasError",
    "ClosedError",
    "PointAttributesError",
    "HeaderError",
    "ConversionError",
    "VlrError",
]
