"""Shared test fixtures."""

import struct

import numpy as np
import pytest

from lasstream.core.transform import Transform, Vector
from lasstream.header.header import Header
from lasstream.point.point import Point

# Offsets of a few public header fields
_LEGACY_FIELDS = struct.Struct("<HIIBHI5I3d3d6d")  # from header_size (offset 94)
_LARGE_FIELDS = struct.Struct("<QIQ15Q")  # from start_of_first_evlr (offset 235)


def unpack_header(data: bytes) -> dict:
    """Decode the public header fields the writer is responsible for."""
    assert data[:4] == b"LASF"
    minor = data[25]
    values = _LEGACY_FIELDS.unpack_from(data, 94)
    header = {
        "version": (data[24], minor),
        "header_size": values[0],
        "offset_to_point_data": values[1],
        "number_of_vlrs": values[2],
        "point_format": values[3],
        "point_record_length": values[4],
        "legacy_point_count": values[5],
        "legacy_points_by_return": list(values[6:11]),
        "scale": values[11:14],
        "offset": values[14:17],
        "max": (values[17], values[19], values[21]),
        "min": (values[18], values[20], values[22]),
    }
    if minor >= 4:
        large = _LARGE_FIELDS.unpack_from(data, 235)
        header["start_of_first_evlr"] = large[0]
        header["number_of_evlrs"] = large[1]
        header["point_count"] = large[2]
        header["points_by_return"] = list(large[3:])
    else:
        header["point_count"] = header["legacy_point_count"]
    return header


@pytest.fixture
def utm_header() -> Header:
    """A LAS 1.2 header with offsets suited to UTM coordinates."""
    return Header(
        transforms=Vector(
            Transform(scale=0.001, offset=400000.0),
            Transform(scale=0.001, offset=5600000.0),
            Transform(scale=0.001, offset=0.0),
        ),
    )


@pytest.fixture
def sample_points() -> list[Point]:
    """100 format-0 points around (400500, 5600500, 300)."""
    rng = np.random.default_rng(42)
    xs = rng.uniform(400000, 401000, 100)
    ys = rng.uniform(5600000, 5601000, 100)
    zs = rng.uniform(100, 500, 100)
    intensities = rng.integers(0, 65535, 100)
    classes = rng.choice([1, 2, 3, 6], size=100)
    returns = rng.integers(1, 4, 100)
    return [
        Point(
            x=float(x),
            y=float(y),
            z=float(z),
            intensity=int(i),
            classification=int(c),
            return_number=int(r),
            number_of_returns=3,
        )
        for x, y, z, i, c, r in zip(xs, ys, zs, intensities, classes, returns)
    ]


@pytest.fixture
def read_header():
    """Function decoding the public header at the start of a byte string."""
    return unpack_header
