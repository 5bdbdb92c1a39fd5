"""Discovery and conversion of every top log below a directory."""

import logging
import os
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from top2csv.errors import FileAccessError, NumericParseError, StreamFormatError
from top2csv.models import MetricSelector
from top2csv.parser import convert

logger = logging.getLogger(__name__)

LOG_NAME_PATTERN = re.compile(r"top\.log(\.[0-9])?")


@dataclass(slots=True)
class BatchResult:
    """Outcome of a batch conversion."""

    converted: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


def open_stream(path: Path, mode: str = "r") -> TextIO:
    """
    Open a text file for reading or writing.

    Raises:
        FileAccessError: if the file cannot be opened.
    """
    try:
        if "w" in mode:
            return open(path, mode, encoding="utf-8", newline="")
        return open(path, mode, encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileAccessError(path, exc.strerror or str(exc)) from exc


def find_logs(root: Path) -> Iterator[Path]:
    """
    Yield every regular file below root named top.log or top.log.<digit>.

    Symlinked directories are not descended into.
    """
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, followlinks=False):
        for name in filenames:
            path = Path(dirpath) / name
            if LOG_NAME_PATTERN.fullmatch(name) and path.is_file():
                found.append(path)
    yield from sorted(found)


def output_path_for(path: Path, metric: MetricSelector) -> Path:
    """CSV path for a log: the log path with -mem.csv or -cpu.csv appended."""
    return path.with_name(path.name + metric.csv_suffix)


def convert_tree(
    root: Path, processes: Sequence[str], metric: MetricSelector
) -> BatchResult:
    """
    Convert every top log found below root, writing each CSV next to its log.

    Files that cannot be opened are skipped and files that fail to parse
    are reported; neither stops the traversal.

    Raises:
        FileAccessError: if root does not exist or is not a directory.
    """
    if not root.exists():
        raise FileAccessError(root, "no such file or directory")
    if not root.is_dir():
        raise FileAccessError(root, "not a directory")

    result = BatchResult()
    for path in find_logs(root):
        logger.info("Found: %s", path)
        destination = output_path_for(path, metric)
        try:
            source = open_stream(path)
        except FileAccessError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            result.skipped.append(path)
            continue

        with source:
            try:
                target = open_stream(destination, "w")
            except FileAccessError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                result.skipped.append(path)
                continue

            logger.info("Writing: %s", destination)
            with target:
                try:
                    rows = convert(source, target, processes, metric)
                except (StreamFormatError, NumericParseError) as exc:
                    logger.error("%s: %s", path, exc)
                    result.failed.append(path)
                    continue
            logger.debug("%s: %d rows", destination, rows)
            result.converted.append(destination)

    return result
