"""Variable length records (VLRs) and extended VLRs (EVLRs)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterable

import laspy
from laspy.vlrs.vlrlist import VLRList

from lasstream.errors import VlrError

VLR_HEADER_SIZE = 54
EVLR_HEADER_SIZE = 60

MAX_VLR_DATA = 0xFFFF

# laspy stores user ids and descriptions null-terminated
MAX_USER_ID = 15
MAX_DESCRIPTION = 31


def _check_ascii(name: str, value: str, size: int) -> None:
    try:
        encoded = value.encode("ascii")
    except UnicodeEncodeError:
        raise VlrError(f"{name} must be ASCII, got {value!r}") from None
    if len(encoded) > size:
        raise VlrError(f"{name} {value!r} is longer than {size} characters")


@dataclass
class Vlr:
    """A variable length record.

    The same type is used for VLRs, stored between the header and the
    points, and EVLRs, stored after the points; only the on-disk header
    differs.

    Attributes:
        user_id: Registering organisation, at most 15 ASCII characters.
        record_id: Record type within ``user_id``.
        description: At most 31 ASCII characters.
        data: The record payload.
    """

    user_id: str = ""
    record_id: int = 0
    description: str = ""
    data: bytes = b""

    def len(self, extended: bool = False) -> int:
        """Size of the record on disk, header included."""
        header_size = EVLR_HEADER_SIZE if extended else VLR_HEADER_SIZE
        return header_size + len(self.data)

    def into_raw(self, extended: bool = False) -> laspy.VLR:
        """Validate the record and convert it to a laspy VLR.

        Raises:
            VlrError: If a field does not fit the record layout.
        """
        _check_ascii("User id", self.user_id, MAX_USER_ID)
        _check_ascii("Description", self.description, MAX_DESCRIPTION)
        if not 0 <= self.record_id <= 0xFFFF:
            raise VlrError(f"Record id {self.record_id} is out of range [0, 65535]")
        if not extended and len(self.data) > MAX_VLR_DATA:
            raise VlrError(
                f"VLR data is {len(self.data)} bytes, the limit is {MAX_VLR_DATA}; "
                "store it as an EVLR instead"
            )
        return laspy.VLR(
            user_id=self.user_id,
            record_id=self.record_id,
            description=self.description,
            record_data=bytes(self.data),
        )


def write_vlrs(vlrs: Iterable[Vlr], stream: BinaryIO, extended: bool = False) -> int:
    """Encode records back to back, as VLRs or EVLRs.

    Returns:
        Number of bytes written.
    """
    records = VLRList(vlr.into_raw(extended=extended) for vlr in vlrs)
    return records.write_to(stream, as_extended=extended)
