"""Stream I/O: the LAS writer, text input and LAS inspection."""

from lasstream.io.csv import CsvReader
from lasstream.io.writer import Writer

__all__ = ["Writer", "CsvReader"]
