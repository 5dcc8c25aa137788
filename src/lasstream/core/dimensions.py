"""Standard point dimension names and how they map onto Point fields."""

from __future__ import annotations

# Dimension name (lowercased) -> Point attribute, for scalar fields
STANDARD_DIMENSIONS: dict[str, str] = {
    "x": "x",
    "y": "y",
    "z": "z",
    "intensity": "intensity",
    "returnnumber": "return_number",
    "numberofreturns": "number_of_returns",
    "classification": "classification",
    "scanangle": "scan_angle",
    "scananglerank": "scan_angle",
    "userdata": "user_data",
    "pointsourceid": "point_source_id",
    "scannerchannel": "scanner_channel",
    "gpstime": "gps_time",
    "nir": "nir",
}

# Fields that hold floating point values; everything else is an integer
FLOAT_FIELDS = frozenset({"x", "y", "z", "scan_angle", "gps_time"})

COLOR_DIMENSIONS = ("red", "green", "blue")


def normalize_name(name: str) -> str:
    """Canonical lookup key for a dimension name: 'GpsTime', 'gps_time' -> 'gpstime'."""
    return name.strip().lower().replace("_", "")


def detect_point_format(columns: list[str]) -> int:
    """Pick the simplest point format that stores every given dimension."""
    names = {normalize_name(c) for c in columns}
    has_color = all(c in names for c in COLOR_DIMENSIONS)
    has_gps = "gpstime" in names
    has_nir = "nir" in names

    if has_nir:
        return 8  # Point format 8: GPS + RGB + NIR
    if has_color and has_gps:
        return 3  # Point format 3: GPS + RGB
    if has_color:
        return 2  # Point format 2: RGB
    if has_gps:
        return 1  # Point format 1: GPS time
    return 0  # Point format 0: basic
