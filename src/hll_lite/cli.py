"""hll-lite CLI entry point.

Usage: hll-lite [--verbose] <command> ...

    count   [FILE ...]     estimate distinct lines (stdin when no files)
    merge   SKETCH ...     union of base64 sketches (or @file holding one)
    inspect SKETCH         precision, registers and estimate of one sketch
"""
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator

from hll_lite.hashing.adapters import ALGORITHMS, get_hasher
from hll_lite.sketch.hyperloglog import HyperLogLog

log = logging.getLogger(__name__)


def _add_count_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "count",
        help="Estimate the number of distinct lines in files or stdin.",
    )
    p.add_argument(
        "files", nargs="*",
        help="Input files, one item per line (default: stdin)",
    )
    p.add_argument(
        "--precision", type=int, default=14,
        help="HyperLogLog precision, 4..16 (default: 14)",
    )
    p.add_argument(
        "--hash", choices=ALGORITHMS, default="sha256",
        help="Hash applied to each line (default: sha256)",
    )
    p.add_argument(
        "--skip-blank", action="store_true",
        help="Ignore empty lines instead of counting them as an item.",
    )
    p.add_argument(
        "--emit-text", action="store_true",
        help="Also print the sketch in its base64 text form.",
    )


def _add_merge_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "merge",
        help="Merge base64 sketches and print the union estimate.",
    )
    p.add_argument(
        "sketches", nargs="+",
        help="Base64 sketches, or @path to read one from a file",
    )
    p.add_argument(
        "--emit-text", action="store_true",
        help="Also print the merged sketch in its base64 text form.",
    )


def _add_inspect_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "inspect",
        help="Describe a single base64 sketch.",
    )
    p.add_argument("sketch", help="Base64 sketch, or @path to read it from a file")


def _read_lines(files: list[str]) -> Iterator[str]:
    if not files:
        for line in sys.stdin:
            yield line.rstrip("\r\n")
        return
    for path in files:
        with open(path, encoding="utf-8") as fh:
            for line in fh:
                yield line.rstrip("\r\n")


def _load_sketch(arg: str) -> HyperLogLog:
    if arg.startswith("@"):
        with open(arg[1:], encoding="ascii") as fh:
            arg = fh.read().strip()
    return HyperLogLog.from_text(arg)


def _count_lines(sketch: HyperLogLog, lines: Iterable[str], algorithm: str,
                 skip_blank: bool) -> int:
    hasher = get_hasher(algorithm)
    seen = 0
    skipped = 0
    for line in lines:
        if skip_blank and not line:
            skipped += 1
            continue
        sketch.add_hash(hasher(line))
        seen += 1
    if skipped:
        log.info("skipped %d blank line(s)", skipped)
    return seen


def _run_count(args: argparse.Namespace) -> None:
    sketch = HyperLogLog(args.precision)
    seen = _count_lines(sketch, _read_lines(args.files), args.hash, args.skip_blank)
    log.debug("hashed %d line(s) with %s", seen, args.hash)
    print(sketch.count())
    if args.emit_text:
        print(sketch.to_text())


def _run_merge(args: argparse.Namespace) -> None:
    sketches = [_load_sketch(s) for s in args.sketches]
    total = sketches[0].copy()
    for other in sketches[1:]:
        total.merge(other)
    log.debug("merged %d sketch(es) at p=%d", len(sketches), total.precision)
    print(total.count())
    if args.emit_text:
        print(total.to_text())


def _run_inspect(args: argparse.Namespace) -> None:
    sketch = _load_sketch(args.sketch)
    print(f"precision:       {sketch.precision}")
    print(f"registers:       {sketch.num_registers}")
    print(f"zero registers:  {sketch.zero_registers()}")
    print(f"standard error:  {sketch.standard_error():.4f}")
    print(f"estimate:        {sketch.count()}")


_COMMANDS = {
    "count": _run_count,
    "merge": _run_merge,
    "inspect": _run_inspect,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hll-lite",
        description="Distinct counting in fixed memory -- pure Python, zero infrastructure.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_count_parser(subparsers)
    _add_merge_parser(subparsers)
    _add_inspect_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        return 0

    try:
        _COMMANDS[args.command](args)
    except (ValueError, OSError) as exc:
        log.debug("command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
