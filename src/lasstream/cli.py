"""lasstream CLI — command-line interface for writing LAS files."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from lasstream._version import __version__


def cmd_info(args: argparse.Namespace) -> int:
    """Show the header of a LAS file."""
    from lasstream.io.las import read_summary

    path = args.file
    if not Path(path).exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    print(f"File: {path}")
    print(f"Size: {Path(path).stat().st_size / 1024 / 1024:.1f} MB")

    summary = read_summary(path)
    print(f"LAS version: {summary.version}")
    print(f"Point format: {summary.point_format_id}")
    print(f"Points: {summary.point_count:,}")

    if summary.bounds is not None:
        bounds = summary.bounds
        print(f"Bounds X: [{bounds.minx:.3f}, {bounds.maxx:.3f}]")
        print(f"Bounds Y: [{bounds.miny:.3f}, {bounds.maxy:.3f}]")
        print(f"Bounds Z: [{bounds.minz:.3f}, {bounds.maxz:.3f}]")

    print(f"VLRs: {summary.num_vlrs}")
    if summary.num_evlrs:
        print(f"EVLRs: {summary.num_evlrs}")
    if summary.generating_software:
        print(f"Software: {summary.generating_software}")

    return 0


def _build_header(args: argparse.Namespace, columns: list[str]):
    """Header from --config, overridden by the individual options."""
    from lasstream.core.dimensions import detect_point_format
    from lasstream.core.transform import Transform, Vector
    from lasstream.core.version import Version
    from lasstream.header import Header, load_header_config
    from lasstream.point.format import Format

    header = load_header_config(args.config) if args.config else Header()

    extra_bytes = header.point_format.extra_bytes
    if args.point_format is not None:
        header.point_format = Format.new(args.point_format, extra_bytes=extra_bytes)
    elif not args.config:
        header.point_format = Format.new(detect_point_format(columns), extra_bytes=extra_bytes)

    if args.las_version is not None:
        header.version = Version.parse(args.las_version)
    elif not args.config and header.point_format.is_extended:
        header.version = Version(1, 4)

    if args.scale is not None or args.offset is not None:
        scales = [args.scale] * 3 if args.scale is not None else [t.scale for t in header.transforms]
        offsets = args.offset if args.offset is not None else [t.offset for t in header.transforms]
        header.transforms = Vector(
            *(Transform(scale=s, offset=o) for s, o in zip(scales, offsets))
        )

    header.validate()
    return header


def cmd_convert(args: argparse.Namespace) -> int:
    """Convert delimited text to LAS."""
    from lasstream.errors import LasError
    from lasstream.io.csv import CsvReader
    from lasstream.io.writer import Writer

    input_path = args.input
    output_path = args.output

    if not Path(input_path).exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    reader = CsvReader(delimiter=args.delimiter)
    t0 = time.time()
    try:
        header = _build_header(args, reader.columns(input_path))
        with Writer.from_path(output_path, header) as writer:
            n = writer.write_all(reader.read(input_path))
    except (LasError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    elapsed = time.time() - t0

    print(f"Converted {n:,} points: {input_path} -> {output_path} ({elapsed:.1f}s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="lasstream",
        description="lasstream — streaming LAS point cloud writer",
    )
    parser.add_argument(
        "--version", action="version", version=f"lasstream {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info
    info_parser = subparsers.add_parser("info", help="Show LAS file header info")
    info_parser.add_argument("file", help="LAS file path")

    # convert
    conv_parser = subparsers.add_parser("convert", help="Convert delimited text to LAS")
    conv_parser.add_argument("input", help="Input CSV/TXT file path")
    conv_parser.add_argument("output", help="Output LAS file path")
    conv_parser.add_argument("-c", "--config", help="JSON header configuration file")
    conv_parser.add_argument("--las-version", help="LAS version, e.g. 1.2 or 1.4")
    conv_parser.add_argument("--point-format", type=int, help="LAS point format (0-10)")
    conv_parser.add_argument("--scale", type=float, help="Coordinate scale for all axes")
    conv_parser.add_argument(
        "--offset", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Coordinate offsets"
    )
    conv_parser.add_argument("-d", "--delimiter", help="Field delimiter (default: auto)")
    conv_parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "convert": cmd_convert,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
