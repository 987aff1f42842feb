#!/usr/bin/env python3
"""
Command line entry point.

Usage:
  ptau-gen --g1-count 1024 --g1-chunk-length 256 --g2-count 1024 \
    [--g1-pattern out/g1_{}.bin] [--single-g2 out/tau_g2.bin] [--workers thread]

Every stream whose count is 0 is skipped.
"""

import argparse
import sys

from .config import (
    DEFAULT_CHUNK_LENGTH,
    DEFAULT_COUNT,
    FLUSH_PARTIAL_CHUNK,
    G1_PATTERN,
    G2_PATTERN,
    PAIRED_PATTERN,
    PEDERSEN_G1_PATTERN,
    PEDERSEN_G2_PATTERN,
    PLACEHOLDER,
    WORKERS,
)
from .errors import ChunkWriteError, ConfigurationError, EntropyError
from .orchestrator import Orchestrator, SingleSpec
from .stream import StreamSpec

EXIT_OK = 0
EXIT_IO = 1
EXIT_CONFIG = 2
EXIT_ENTROPY = 3
EXIT_CANCELLED = 130

# (option prefix, stream name, group, kind, default count, default pattern)
STREAMS = [
    ("g1", "G1", "g1", "powers", DEFAULT_COUNT, G1_PATTERN),
    ("g2", "G2", "g2", "powers", DEFAULT_COUNT, G2_PATTERN),
    ("paired", "G1G2", "g1g2", "powers", 0, PAIRED_PATTERN),
    ("pedersen-g1", "Pedersen G1", "g1", "pedersen", 0, PEDERSEN_G1_PATTERN),
    ("pedersen-g2", "Pedersen G2", "g2", "pedersen", 0, PEDERSEN_G2_PATTERN),
]


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="ptau-gen",
        description="Generate chunked powers-of-tau parameter files over BLS12-381",
    )
    for prefix, name, _group, _kind, count, pattern in STREAMS:
        dest = prefix.replace("-", "_")
        p.add_argument(f"--{prefix}-count", dest=f"{dest}_count", type=int, default=count,
                       help=f"Number of {name} points to generate (default: {count})")
        p.add_argument(f"--{prefix}-pattern", dest=f"{dest}_pattern", default=pattern,
                       help=f"{name} file pattern, '{{}}' becomes the chunk index (default: {pattern})")
        p.add_argument(f"--{prefix}-chunk-length", dest=f"{dest}_chunk_length", type=int,
                       default=DEFAULT_CHUNK_LENGTH,
                       help=f"Number of {name} points in each chunk (default: {DEFAULT_CHUNK_LENGTH})")
    p.add_argument("--single-g1", metavar="PATH", help="Also write G1*tau, unchunked, to PATH")
    p.add_argument("--single-g2", metavar="PATH", help="Also write G2*tau, unchunked, to PATH")
    p.add_argument("--pedersen-base-g1", metavar="PATH", help="Write the hash-derived G1 pedersen base to PATH")
    p.add_argument("--pedersen-base-g2", metavar="PATH", help="Write the hash-derived G2 pedersen base to PATH")
    p.add_argument("--workers", choices=("process", "thread"), default=WORKERS,
                   help=f"Run each stream in its own process or thread (default: {WORKERS})")
    p.add_argument("--drop-partial", action="store_true", default=not FLUSH_PARTIAL_CHUNK,
                   help="Do not write a trailing chunk shorter than the chunk length")
    p.add_argument("--quiet", "-q", action="store_true", help="No progress output")
    return p.parse_args(argv)


def build_streams(args):
    streams = []
    for prefix, name, group, kind, _count, _pattern in STREAMS:
        dest = prefix.replace("-", "_")
        count = getattr(args, f"{dest}_count")
        if count == 0:
            continue
        pattern = getattr(args, f"{dest}_pattern")
        if PLACEHOLDER not in pattern:
            raise ConfigurationError(f"{name} file pattern {pattern!r} has no '{PLACEHOLDER}' placeholder")
        streams.append(StreamSpec(name, group, count, getattr(args, f"{dest}_chunk_length"), pattern, kind))
    return streams


def build_singles(args):
    singles = []
    if args.single_g1:
        singles.append(SingleSpec("G1 tau", "g1", args.single_g1))
    if args.single_g2:
        singles.append(SingleSpec("G2 tau", "g2", args.single_g2))
    if args.pedersen_base_g1:
        singles.append(SingleSpec("G1 pedersen base", "g1", args.pedersen_base_g1, kind="pedersen_base"))
    if args.pedersen_base_g2:
        singles.append(SingleSpec("G2 pedersen base", "g2", args.pedersen_base_g2, kind="pedersen_base"))
    return singles


def main(argv=None):
    args = parse_args(argv)
    try:
        streams = build_streams(args)
        orchestrator = Orchestrator(
            streams,
            singles=build_singles(args),
            workers=args.workers,
            flush_partial=not args.drop_partial,
            quiet=args.quiet,
        )
        if not args.quiet:
            for spec in streams:
                print(f"{spec.name} chunk length: {spec.chunk_length}")
                print(f"{spec.name} file pattern: {spec.pattern}")
        summary = orchestrator.run()
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except EntropyError as e:
        print(f"fatal: {e}", file=sys.stderr)
        return EXIT_ENTROPY
    except (ChunkWriteError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO

    if summary.cancelled:
        print("Cancelled before all points were generated.", file=sys.stderr)
        return EXIT_CANCELLED
    if not args.quiet:
        for result in summary.results:
            print(f"{result.name}: {result.persisted}/{result.produced} points in {len(result.paths)} files")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
