"""Live snapshot recorder writing top batch-mode logs."""

import logging
import threading
import time
from datetime import datetime
from typing import TextIO

import psutil

from top2csv.models import ProcessSample
from top2csv.units import format_magnitude

logger = logging.getLogger(__name__)

COLUMN_TITLES = (
    "    PID USER      PR  NI    VIRT    RES    SHR S  %CPU  %MEM     TIME+ COMMAND"
)

STATUS_CODES = {
    psutil.STATUS_RUNNING: "R",
    psutil.STATUS_SLEEPING: "S",
    psutil.STATUS_DISK_SLEEP: "D",
    psutil.STATUS_STOPPED: "T",
    psutil.STATUS_TRACING_STOP: "t",
    psutil.STATUS_ZOMBIE: "Z",
    psutil.STATUS_DEAD: "X",
    psutil.STATUS_IDLE: "I",
}


def _single_token(text: str, default: str = "?") -> str:
    """Collapse whitespace so a field stays one token."""
    return "_".join(text.split()) or default


def format_uptime(seconds: float) -> str:
    """Format an uptime the way top's header does."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    clock = f"{hours:2d}:{minutes:02d}"
    if days > 0:
        unit = "day" if days == 1 else "days"
        return f"{days} {unit}, {clock}"
    return clock


def format_cpu_time(seconds: float) -> str:
    """Format accumulated CPU time as top's TIME+ column (M:SS.hh)."""
    minutes = int(seconds // 60)
    return f"{minutes}:{seconds % 60:05.2f}"


def format_header(
    now: datetime,
    uptime_seconds: float,
    users: int,
    load_avg: tuple[float, float, float],
) -> str:
    """Format the "top - HH:MM:SS" line opening a snapshot."""
    return (
        f"top - {now:%H:%M:%S} up {format_uptime(uptime_seconds)},  "
        f"{users} users,  load average: "
        f"{load_avg[0]:.2f}, {load_avg[1]:.2f}, {load_avg[2]:.2f}"
    )


def format_process_line(sample: ProcessSample) -> str:
    """Format a process as a twelve-field top line."""
    return (
        f"{sample.pid:>7} {_single_token(sample.user)[:8]:<8} "
        f"{20 + sample.nice:>3} {sample.nice:>3} "
        f"{format_magnitude(sample.virt):>7} {format_magnitude(sample.res):>6} "
        f"{format_magnitude(sample.shr):>6} {sample.status} "
        f"{sample.cpu_percent:5.1f} {sample.memory_percent:5.1f} "
        f"{format_cpu_time(sample.cpu_time):>9} {_single_token(sample.name)}"
    )


class SnapshotRecorder:
    """
    Samples the host with psutil and writes top batch-mode snapshots.

    Runs in a separate daemon thread. Each sample is written as one block
    starting with a "top - HH:MM:SS" header, so the output can be fed back
    to the converter.
    """

    def __init__(
        self,
        output: TextIO,
        interval: float = 3.0,
        count: int | None = None,
    ) -> None:
        """
        Initialize the SnapshotRecorder.

        Args:
            output: Stream receiving the snapshot log.
            interval: Delay between snapshots (in seconds). Default 3.0s.
            count: Number of snapshots to write, or None to run until stopped.
        """
        self._output = output
        self._interval = max(0.1, interval)
        self._count = count
        self._samples_written = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent()

    @property
    def interval(self) -> float:
        """Get the delay between snapshots."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the delay between snapshots."""
        self._interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def samples_written(self) -> int:
        """Number of snapshots written so far."""
        return self._samples_written

    @property
    def is_running(self) -> bool:
        """Check if the recorder thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the recording thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._record_loop,
            daemon=True,
            name="SnapshotRecorder",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the recording thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for the recorder to finish its snapshot count.

        Returns:
            True if the thread has finished.
        """
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        return not self.is_running

    def _record_loop(self) -> None:
        """Main sampling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self.write_snapshot()
            except (OSError, ValueError) as exc:
                logger.error("Cannot write snapshot: %s", exc)
                break
            except psutil.Error as exc:
                logger.warning("Snapshot skipped: %s", exc)

            if self._count is not None and self._samples_written >= self._count:
                break

            # Wait for interval seconds or until stop is requested
            self._stop_event.wait(timeout=self._interval)

    def write_snapshot(self) -> None:
        """Sample the host once and write one snapshot block."""
        lines = self.format_snapshot(datetime.now(), self._collect_processes())
        self._output.write("\n".join(lines) + "\n\n")
        self._output.flush()
        self._samples_written += 1
        logger.debug("Snapshot %d written", self._samples_written)

    def format_snapshot(self, now: datetime, processes: list[ProcessSample]) -> list[str]:
        """Build the lines of one snapshot block."""
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        running = sum(1 for proc in processes if proc.status == "R")
        sleeping = sum(1 for proc in processes if proc.status in ("S", "D", "I"))

        lines = [
            format_header(
                now,
                time.time() - psutil.boot_time(),
                len(psutil.users()),
                psutil.getloadavg(),
            ),
            f"Tasks: {len(processes)} total, {running} running, {sleeping} sleeping",
            f"%Cpu(s): {psutil.cpu_percent():.1f} us",
            f"KiB Mem : {mem.total // 1024} total, {mem.available // 1024} free, "
            f"{mem.used // 1024} used",
            f"KiB Swap: {swap.total // 1024} total, {swap.free // 1024} free, "
            f"{swap.used // 1024} used",
            "",
            COLUMN_TITLES,
        ]
        lines.extend(format_process_line(proc) for proc in processes)
        return lines

    def _collect_processes(self) -> list[ProcessSample]:
        """
        Collect samples of all running processes, busiest first.

        Handles AccessDenied and ZombieProcess errors by skipping the process.
        """
        processes: list[ProcessSample] = []

        attrs = [
            "pid",
            "name",
            "username",
            "status",
            "nice",
            "cpu_percent",
            "memory_percent",
            "memory_info",
            "cpu_times",
        ]

        for proc in psutil.process_iter(attrs=attrs):
            try:
                with proc.oneshot():
                    info = proc.info

                    mem_info = info.get("memory_info")
                    cpu_times = info.get("cpu_times")
                    cpu_time = cpu_times.user + cpu_times.system if cpu_times else 0.0

                    sample = ProcessSample(
                        pid=info.get("pid", 0),
                        user=info.get("username") or "?",
                        nice=info.get("nice") or 0,
                        virt=mem_info.vms // 1024 if mem_info else 0,
                        res=mem_info.rss // 1024 if mem_info else 0,
                        shr=getattr(mem_info, "shared", 0) // 1024 if mem_info else 0,
                        status=STATUS_CODES.get(info.get("status"), "S"),
                        cpu_percent=info.get("cpu_percent") or 0.0,
                        memory_percent=info.get("memory_percent") or 0.0,
                        cpu_time=cpu_time,
                        name=info.get("name") or "?",
                    )
                    processes.append(sample)

            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                # Process died mid-poll, access denied, or zombie
                continue

        processes.sort(key=lambda p: p.cpu_percent, reverse=True)
        return processes
