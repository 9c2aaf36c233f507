#!/usr/bin/env python3
"""Streams a written output file through the fail-fast golden comparator."""

import argparse
import os
import sys

from failfast_golden.compare.stream import CompareStream, GoldenMismatch
from failfast_golden.snapshot.silver import empty_or_file_source

DEFAULT_CHUNK_SIZE = 4096


def iter_chunks(handle, chunk_size):
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk


def compare_file(output_path, golden_path, silver_path=os.devnull, chunk_size=DEFAULT_CHUNK_SIZE, byte_wise=False):
    """Compare ``output_path`` against ``golden_path``; raise GoldenMismatch on divergence."""
    golden = empty_or_file_source(golden_path)
    try:
        silver = open(silver_path, "wb")
    except OSError:
        golden.close()
        raise
    with CompareStream(golden, silver, close_streams=True) as stream:
        with open(output_path, "rb") as handle:
            for chunk in iter_chunks(handle, chunk_size):
                if byte_wise:
                    for b in chunk:
                        stream.write_byte(b)
                else:
                    stream.write(chunk)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compare an output file against its golden file, failing at the first divergence.")
    parser.add_argument("output", help="Path to the output (silver) file.")
    parser.add_argument("golden", help="Path to the golden file; a missing file counts as empty.")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="Bytes per comparator write.")
    parser.add_argument("--byte-wise", action="store_true", help="Write one byte at a time.")
    parser.add_argument("--silver", default=os.devnull, help="Where to mirror the compared bytes.")
    args = parser.parse_args(argv)

    if args.chunk_size <= 0:
        sys.exit("[golden] --chunk-size must be positive")

    try:
        compare_file(args.output, args.golden, args.silver, args.chunk_size, args.byte_wise)
    except GoldenMismatch as exc:
        print(
            "Golden mismatch detected at byte {} of {}:".format(exc.position, args.output),
            file=sys.stderr,
        )
        print(exc.diff, end="", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
