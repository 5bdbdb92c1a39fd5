"""Snapshot parsing engine: turns a top batch log into timestamped rows."""

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from typing import TextIO

from top2csv.emitter import CsvEmitter
from top2csv.errors import NumericParseError, StreamFormatError
from top2csv.models import MetricSelector, ParserState, Row
from top2csv.units import normalize_magnitude

logger = logging.getLogger(__name__)

PROCESS_NAME_INDEX = 11
MIN_PROCESS_TOKENS = PROCESS_NAME_INDEX + 1


def tokenize(line: str) -> list[str]:
    """Split a line into its whitespace-delimited fields."""
    return line.split()


class SnapshotBoundaryDetector:
    """
    Recognizes the "top - HH:MM:SS" lines that open a new snapshot.

    Tracks whether the first header of the stream has been seen yet;
    once it has, the detector never goes back to waiting.
    """

    def __init__(self) -> None:
        self._pattern = re.compile(r"top - ([0-2][0-9]):([0-5][0-9]):([0-5][0-9])")
        self.state = ParserState.AWAITING_FIRST_HEADER

    def reset(self) -> None:
        """Return to the initial state for a new stream."""
        self.state = ParserState.AWAITING_FIRST_HEADER

    def match(self, line: str) -> tuple[int, int, int] | None:
        """Return (hour, minute, second) if the line is a header, else None."""
        found = self._pattern.match(line)
        if found is None:
            return None
        self.state = ParserState.IN_SNAPSHOT
        hour, minute, second = (int(group) for group in found.groups())
        return hour, minute, second


class ProcessAggregator:
    """Adds the watched processes' values from data lines into a row."""

    def __init__(self, processes: Sequence[str], metric: MetricSelector) -> None:
        self._columns: dict[str, int] = {}
        for index, name in enumerate(processes):
            self._columns.setdefault(name, index)
        self._value_index = metric.token_index

    def accumulate(
        self, row: Row, tokens: Sequence[str], line_number: int | None = None
    ) -> bool:
        """
        Add the value carried by a process line to the row.

        Lines with fewer than twelve fields, and lines for processes that
        are not watched, are left alone.

        Args:
            row: The snapshot row being filled.
            tokens: Fields of the data line.
            line_number: Position of the line in the input, for diagnostics.

        Returns:
            True if the line contributed to the row.

        Raises:
            NumericParseError: if the value field is not numeric.
        """
        if len(tokens) < MIN_PROCESS_TOKENS:
            return False
        column = self._columns.get(tokens[PROCESS_NAME_INDEX])
        if column is None:
            return False
        token = tokens[self._value_index]
        try:
            value = normalize_magnitude(token)
        except NumericParseError:
            raise NumericParseError(token, line_number) from None
        row.values[column] += value
        return True


class TopLogParser:
    """Parses a stream of top log lines into snapshot rows."""

    def __init__(self, processes: Sequence[str], metric: MetricSelector) -> None:
        self._width = len(processes)
        self._detector = SnapshotBoundaryDetector()
        self._aggregator = ProcessAggregator(processes, metric)

    @property
    def state(self) -> ParserState:
        """Current parser state."""
        return self._detector.state

    def rows(self, lines: Iterable[str]) -> Iterator[Row]:
        """
        Yield each snapshot row as soon as it is complete.

        A row is complete when the next header line or the end of the
        stream is reached, so only one row is held in memory at a time.

        Raises:
            StreamFormatError: if a non-blank line precedes the first header.
            NumericParseError: if a watched process carries a bad value.
        """
        self._detector.reset()
        current = Row.empty(0, 0, 0, self._width)  # replaced by the first header

        for line_number, line in enumerate(lines, start=1):
            previous_state = self._detector.state
            timestamp = self._detector.match(line)
            if timestamp is not None:
                if previous_state is ParserState.IN_SNAPSHOT:
                    yield current
                current = Row.empty(*timestamp, self._width)
                continue

            if self._detector.state is ParserState.AWAITING_FIRST_HEADER:
                if not line.strip():
                    continue
                raise StreamFormatError(line_number, line)

            self._aggregator.accumulate(current, tokenize(line), line_number)

        if self._detector.state is ParserState.IN_SNAPSHOT:
            yield current


def convert(
    lines: Iterable[str],
    output: TextIO,
    processes: Sequence[str],
    metric: MetricSelector,
) -> int:
    """
    Convert a top log into CSV.

    Args:
        lines: Input lines, e.g. an open text file or sys.stdin.
        output: Stream receiving the CSV text.
        processes: Watched process names, in column order.
        metric: Which top column to extract.

    Returns:
        The number of data rows written.
    """
    parser = TopLogParser(processes, metric)
    emitter = CsvEmitter(output, processes, metric)
    for row in parser.rows(lines):
        emitter.write_row(row)
    emitter.close()
    return emitter.rows_written
