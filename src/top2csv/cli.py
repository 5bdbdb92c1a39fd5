"""Command-line entry points for top2csv."""

import argparse
import logging
import sys
from collections.abc import Sequence
from contextlib import ExitStack
from pathlib import Path

from top2csv.batch import convert_tree, open_stream
from top2csv.errors import FileAccessError, Top2CsvError
from top2csv.log_config import default_level, setup_logging
from top2csv.models import ConversionConfig, MetricSelector
from top2csv.parser import convert
from top2csv.presets import PRESETS, resolve_processes
from top2csv.recorder import SnapshotRecorder

logger = logging.getLogger(__name__)


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug messages."
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only show warnings and errors."
    )
    parser.add_argument(
        "--log-file", type=Path, default=None, help="Also write debug logs to this file."
    )


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = default_level()
    setup_logging(level, args.log_file)


def build_parser() -> argparse.ArgumentParser:
    """Create the parser for the top2csv command."""
    parser = argparse.ArgumentParser(
        prog="top2csv",
        description="Convert top batch logs into per-process CSV time series.",
    )
    metric = parser.add_mutually_exclusive_group(required=True)
    metric.add_argument(
        "-c",
        "--cpu",
        dest="metric",
        action="store_const",
        const=MetricSelector.CPU_PERCENT,
        help="Gather CPU usage for each process.",
    )
    metric.add_argument(
        "-m",
        "--mem",
        dest="metric",
        action="store_const",
        const=MetricSelector.MEMORY,
        help="Gather memory usage for each process.",
    )
    parser.add_argument(
        "-f",
        "--find",
        type=Path,
        default=None,
        metavar="DIR",
        help=(
            "Search for all top.log[.N] files and write outputs next to them. "
            "When --find is used, --input-file and --output-file are ignored."
        ),
    )
    parser.add_argument(
        "-i", "--input-file", type=Path, default=None, help="Input file to read from, instead of stdin."
    )
    parser.add_argument(
        "-o", "--output-file", type=Path, default=None, help="Output file to write to, instead of stdout."
    )
    parser.add_argument(
        "-p",
        "--preset",
        default=None,
        help=(
            f"Preset is one of {', '.join(repr(name) for name in PRESETS)}. "
            "Any processes specified are added to the preset."
        ),
    )
    parser.add_argument(
        "--processes",
        nargs="+",
        default=[],
        metavar="NAME",
        help="Processes to report; may also be given at the end of the command.",
    )
    parser.add_argument("names", nargs="*", metavar="NAME", help=argparse.SUPPRESS)
    _add_logging_arguments(parser)
    return parser


def resolve_config(args: argparse.Namespace) -> ConversionConfig:
    """
    Turn parsed arguments into a ConversionConfig.

    Raises:
        ConfigurationError: if the preset or the process list is invalid.
    """
    processes = resolve_processes(args.preset, [*args.processes, *args.names])
    return ConversionConfig(
        processes=processes,
        metric=args.metric,
        input_path=args.input_file,
        output_path=args.output_file,
        find_root=args.find,
    )


def run(config: ConversionConfig) -> int:
    """Run a conversion, returning the process exit code."""
    if config.find_root is not None:
        result = convert_tree(config.find_root, config.processes, config.metric)
        logger.info(
            "%d converted, %d skipped, %d failed",
            len(result.converted),
            len(result.skipped),
            len(result.failed),
        )
        return 0

    with ExitStack() as stack:
        source = sys.stdin
        target = sys.stdout
        if config.input_path is not None:
            source = stack.enter_context(open_stream(config.input_path))
        if config.output_path is not None:
            target = stack.enter_context(open_stream(config.output_path, "w"))
        rows = convert(source, target, config.processes, config.metric)
    logger.debug("Converted %d snapshots", rows)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the top2csv command."""
    args = build_parser().parse_args(argv)
    _configure_logging(args)
    try:
        return run(resolve_config(args))
    except FileAccessError as exc:
        logger.error("%s", exc)
        return 1
    except Top2CsvError as exc:
        logger.error("Error: %s", exc)
        return 1


def build_record_parser() -> argparse.ArgumentParser:
    """Create the parser for the top2csv-record command."""
    parser = argparse.ArgumentParser(
        prog="top2csv-record",
        description="Record top batch-mode snapshots of this host.",
    )
    parser.add_argument(
        "-n", "--count", type=int, default=None, help="Number of snapshots (default: until interrupted)."
    )
    parser.add_argument(
        "-d", "--delay", type=float, default=3.0, help="Seconds between snapshots (default: 3.0)."
    )
    parser.add_argument(
        "-o", "--output-file", type=Path, default=None, help="Output file to write to, instead of stdout."
    )
    _add_logging_arguments(parser)
    return parser


def main_record(argv: Sequence[str] | None = None) -> int:
    """Entry point for the top2csv-record command."""
    args = build_record_parser().parse_args(argv)
    _configure_logging(args)
    if args.count is not None and args.count < 1:
        logger.error("Error: --count must be at least 1")
        return 1

    with ExitStack() as stack:
        try:
            output = (
                stack.enter_context(open_stream(args.output_file, "w"))
                if args.output_file is not None
                else sys.stdout
            )
        except FileAccessError as exc:
            logger.error("%s", exc)
            return 1

        recorder = SnapshotRecorder(output, interval=args.delay, count=args.count)
        recorder.start()
        try:
            recorder.wait()
        except KeyboardInterrupt:
            logger.debug("Interrupted")
        finally:
            recorder.stop()
        logger.info("Recorded %d snapshots", recorder.samples_written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
