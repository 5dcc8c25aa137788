"""Inspect written LAS files with laspy."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import laspy
import numpy as np

from lasstream.core.bounds import Bounds


@dataclass(frozen=True)
class LasSummary:
    """What ``lasstream info`` reports about a file.

    Attributes:
        version: LAS version string like "1.4".
        point_format_id: LAS point format (0-10).
        point_count: Number of point records.
        bounds: Header bounds, or None for an empty file.
        num_vlrs: Number of VLRs.
        num_evlrs: Number of EVLRs.
        system_identifier, generating_software: Header identification strings.
    """

    version: str
    point_format_id: int
    point_count: int
    bounds: Bounds | None
    num_vlrs: int
    num_evlrs: int
    system_identifier: str
    generating_software: str


def read_summary(path: str | Path) -> LasSummary:
    """Read the header of a LAS file.

    Args:
        path: Path to a .las file.

    Returns:
        The header summary; point data is not decoded.
    """
    with laspy.open(str(path)) as reader:
        header = reader.header
        count = int(header.point_count)
        bounds = None
        if count:
            bounds = Bounds.from_arrays(*np.stack([header.mins, header.maxs]).T)
        return LasSummary(
            version=f"{header.version.major}.{header.version.minor}",
            point_format_id=header.point_format.id,
            point_count=count,
            bounds=bounds,
            num_vlrs=len(header.vlrs),
            num_evlrs=len(header.evlrs or []),
            system_identifier=header.system_identifier or "",
            generating_software=header.generating_software or "",
        )
