"""Data models for top2csv."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class MetricSelector(Enum):
    """Metric column extracted from each process line of a top log."""

    MEMORY = "mem"
    CPU_PERCENT = "cpu"

    @property
    def token_index(self) -> int:
        """Zero-based token index of the value in a top process line."""
        return 4 if self is MetricSelector.MEMORY else 8  # VIRT / %CPU

    @property
    def precision(self) -> int:
        """Number of fractional digits printed in the CSV."""
        return 0 if self is MetricSelector.MEMORY else 1

    @property
    def csv_suffix(self) -> str:
        """Suffix appended to a log path to name its CSV in batch mode."""
        return f"-{self.value}.csv"


class ParserState(Enum):
    """States of the snapshot parser."""

    AWAITING_FIRST_HEADER = "awaiting_first_header"
    IN_SNAPSHOT = "in_snapshot"


@dataclass(slots=True)
class Row:
    """One snapshot: its timestamp and one accumulated value per watched process."""

    hour: int
    minute: int
    second: int
    values: list[float] = field(default_factory=list)

    @classmethod
    def empty(cls, hour: int, minute: int, second: int, width: int) -> "Row":
        """Create a row with `width` zero-filled values."""
        return cls(hour, minute, second, [0.0] * width)


@dataclass(slots=True, frozen=True)
class ConversionConfig:
    """Resolved command-line configuration."""

    processes: tuple[str, ...]
    metric: MetricSelector
    input_path: Path | None = None
    output_path: Path | None = None
    find_root: Path | None = None


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable sample of one process, holding the fields of a top line."""

    pid: int
    user: str
    nice: int
    virt: int  # KiB
    res: int  # KiB
    shr: int  # KiB
    status: str  # 'R', 'S', 'Z', 'D', etc.
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float
    cpu_time: float  # Seconds
    name: str
