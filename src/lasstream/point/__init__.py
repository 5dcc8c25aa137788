"""Point formats, cooked points and their binary records."""

from lasstream.point.format import Format
from lasstream.point.point import Color, Point, ScanDirection, Waveform
from lasstream.point.raw import RawPoint

__all__ = ["Format", "Point", "Color", "Waveform", "ScanDirection", "RawPoint"]
