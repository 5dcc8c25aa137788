"""LAS header model, binary layout and configuration loading."""

from lasstream.header.config import header_from_dict, load_header_config
from lasstream.header.header import GpsTimeType, Header
from lasstream.header.raw import RawHeader

__all__ = ["Header", "GpsTimeType", "RawHeader", "header_from_dict", "load_header_config"]
