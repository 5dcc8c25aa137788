"""Binary form of the header block, encoded by laspy."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO

import laspy

# Byte holding the minor version in the public header block
VERSION_MINOR_OFFSET = 25


@dataclass
class RawHeader:
    """Everything in front of the point records.

    laspy writes the public header block, its padding, the VLRs and the
    bytes between the VLRs and the first point. LAS 1.0 shares the 1.1
    layout, which laspy does not know, so such headers are encoded as 1.1
    and stamped with the real minor version.

    Attributes:
        las_header: Fully configured laspy header.
        version_minor: Minor version written to the file.
    """

    las_header: laspy.LasHeader
    version_minor: int

    def to_bytes(self) -> bytes:
        with io.BytesIO() as buffer:
            self.las_header.write_to(buffer)
            data = bytearray(buffer.getvalue())
        data[VERSION_MINOR_OFFSET] = self.version_minor
        return bytes(data)

    def write_to(self, stream: BinaryIO) -> None:
        stream.write(self.to_bytes())
