"""CSV serialization of parsed snapshot rows."""

import csv
import logging
from collections.abc import Sequence
from typing import TextIO

from top2csv.models import MetricSelector, Row

logger = logging.getLogger(__name__)

TIME_COLUMNS = ["Hour", "Minute", "Second"]


class CsvEmitter:
    """
    Writes snapshot rows as CSV text to an output stream.

    The header line is written once, either explicitly with write_header()
    or implicitly before the first row or on close(). Fields are never
    quoted; a delimiter inside a process name is backslash-escaped.
    """

    def __init__(
        self,
        output: TextIO,
        processes: Sequence[str],
        metric: MetricSelector,
    ) -> None:
        self._writer = csv.writer(
            output, lineterminator="\n", quoting=csv.QUOTE_NONE, escapechar="\\"
        )
        self._output = output
        self._processes = tuple(processes)
        self._precision = metric.precision
        self._header_written = False
        self._rows_written = 0

    @property
    def rows_written(self) -> int:
        """Number of data rows written so far."""
        return self._rows_written

    def write_header(self) -> None:
        """Write the column header line if it has not been written yet."""
        if self._header_written:
            return
        self._writer.writerow(TIME_COLUMNS + list(self._processes))
        self._header_written = True

    def write_row(self, row: Row) -> None:
        """Write one closed snapshot row."""
        self.write_header()
        self._writer.writerow(
            [row.hour, row.minute, row.second]
            + [self.format_value(value) for value in row.values]
        )
        self._rows_written += 1

    def format_value(self, value: float) -> str:
        """Format a value in fixed-point notation at the metric's precision."""
        return f"{value:.{self._precision}f}"

    def close(self) -> None:
        """Finish the CSV, writing the header for an empty input, and flush."""
        self.write_header()
        self._output.flush()
        logger.debug("Wrote %d rows", self._rows_written)
