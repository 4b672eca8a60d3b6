"""
Command-line interface.

Run with: python -m meshpreview [FILE]
Parses an MSH 2.2 file and prints what the preview would receive.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from meshpreview.config import SAMPLE_MESH_PATH
from meshpreview.logging_config import setup_logging
from meshpreview.model.errors import MshError
from meshpreview.model.msh_io import load

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshpreview",
        description="Inspect a GMSH MSH 2.2 file (ASCII or binary).",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=SAMPLE_MESH_PATH,
        help="Mesh file to parse (default: the bundled sample mesh).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser details.")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the command line."""
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING, log_file=args.log_file)

    try:
        geometry = load(args.path)
    except OSError as e:
        logger.error(f"Could not read '{args.path}': {e}")
        return 1
    except MshError as e:
        logger.error(f"Could not parse '{args.path}': {e}")
        return 1

    header = geometry.header
    print(f"file:      {args.path}")
    print(f"encoding:  {'ascii' if header.is_ascii else 'binary, ' + header.endianness.value + '-endian'}")
    print(f"vertices:  {geometry.num_vertices}")
    print(f"triangles: {geometry.num_triangles}")
    if geometry.skipped_elements:
        skipped = ", ".join(f"type {code}: {count}" for code, count in sorted(geometry.skipped_elements.items()))
        print(f"skipped:   {skipped}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
