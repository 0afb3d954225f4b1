#!/usr/bin/env python3
"""
Cut a segment out of a GPX track.

Two ways to select the segment:
- start/end: the stretch between the track points closest to two coordinates
- loop: the repeated laps of the circuit passing through the start
  coordinate (the first lap is used as the circuit template and is left out)

Usage:
    python extract_segment.py ride.gpx --start=41.3851,2.1734 --end=41.4036,2.1744
    python extract_segment.py ride.gpx --start=41.3851,2.1734 --loop [--radius=10]

The segment is written next to the input as <name>_segment.gpx unless
--out is given.

Exit codes: 0 on success, 1 for invalid input or no segment found,
2 if the input file is missing, 3 if the output cannot be written.
"""

import argparse
import logging
import sys
from typing import List, Optional

from config.settings import DEFAULT_LOOP_RADIUS, LOGGING_CONFIG, OUTPUT_SUFFIX
from core.gpx import load_gpx_from_path, output_path_for, write_segment_gpx
from core.validation import ValidationError
from services.segment_service import build_selection, extract_segment_from_track

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        prog="extract_segment",
        description="Cut a start/end stretch or the repeated laps of a circuit out of a GPX track."
    )
    parser.add_argument("gpx_file", help="Input GPX file")
    parser.add_argument("--start", required=True, help="Start coordinate lat,lon (loop anchor in --loop mode)")
    parser.add_argument("--end", default=None, help="End coordinate lat,lon")
    parser.add_argument("--loop", action="store_true", help="Extract repeated laps of the circuit through --start")
    parser.add_argument("--radius", type=float, default=DEFAULT_LOOP_RADIUS,
                        help=f"Loop detection radius in meters (default {DEFAULT_LOOP_RADIUS})")
    parser.add_argument("--out", default=None, help=f"Output GPX path (default <name>{OUTPUT_SUFFIX}.gpx)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(**{
        **LOGGING_CONFIG,
        "level": logging.DEBUG if args.verbose else LOGGING_CONFIG["level"],
    })

    try:
        selection = build_selection(start=args.start, end=args.end, loop=args.loop, radius_m=args.radius)
        track, metadata = load_gpx_from_path(args.gpx_file)
        result = extract_segment_from_track(track, selection, filename=args.gpx_file, metadata=metadata)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    out_path = args.out or output_path_for(args.gpx_file, OUTPUT_SUFFIX)
    try:
        write_segment_gpx(result.segment, out_path, metadata)
    except OSError as e:
        logger.error(f"Could not write {out_path}: {e}")
        print(f"Error: cannot write {out_path}: {e}", file=sys.stderr)
        return 3

    segment = result.segment
    print(f"GPX written: {out_path}")
    print(f"Points: {segment.point_count} "
          f"(track points {segment.index_range.start}-{segment.index_range.end} of {result.source_point_count})")
    print(f"Distance: {segment.distance_km:.3f} km, elapsed: {segment.elapsed_time:.0f} s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
