"""Tests for the SnapshotRecorder class."""

import io
import time
from datetime import datetime

from top2csv.models import MetricSelector, ProcessSample
from top2csv.parser import TopLogParser, tokenize
from top2csv.recorder import (
    SnapshotRecorder,
    format_cpu_time,
    format_header,
    format_process_line,
    format_uptime,
)


def make_sample(**overrides) -> ProcessSample:
    fields = dict(
        pid=4321,
        user="postgres",
        nice=0,
        virt=2 * 1024**2,
        res=51200,
        shr=1024,
        status="S",
        cpu_percent=12.5,
        memory_percent=1.3,
        cpu_time=75.25,
        name="dbserver",
    )
    fields.update(overrides)
    return ProcessSample(**fields)


class TestFormatting:
    """Tests for the top line formatters."""

    def test_header_is_recognized_by_parser(self):
        """Test the header carries the clock in top's format."""
        line = format_header(datetime(2024, 1, 1, 9, 5, 7), 90061.0, 2, (0.5, 0.25, 0.1))

        assert line.startswith("top - 09:05:07 up 1 day,  1:01,  2 users")
        assert line.endswith("load average: 0.50, 0.25, 0.10")

    def test_uptime(self):
        """Test uptime below and above one day."""
        assert format_uptime(3 * 3600 + 5 * 60) == " 3:05"
        assert format_uptime(86400 + 120) == "1 day,  0:02"
        assert format_uptime(2 * 86400 + 60) == "2 days,  0:01"

    def test_cpu_time(self):
        """Test TIME+ is minutes, seconds and hundredths."""
        assert format_cpu_time(75.25) == "1:15.25"
        assert format_cpu_time(0.0) == "0:00.00"

    def test_process_line_has_twelve_fields(self):
        """Test a process line puts VIRT, %CPU and COMMAND where the parser reads them."""
        tokens = tokenize(format_process_line(make_sample()))

        assert len(tokens) == 12
        assert tokens[4] == "2.0g"
        assert tokens[8] == "12.5"
        assert tokens[11] == "dbserver"

    def test_names_and_users_stay_single_tokens(self):
        """Test whitespace in names and users does not shift fields."""
        tokens = tokenize(format_process_line(make_sample(name="Web Content", user="")))

        assert len(tokens) == 12
        assert tokens[1] == "?"
        assert tokens[11] == "Web_Content"


class TestSnapshotRecorder:
    """Tests for SnapshotRecorder class."""

    def test_recorder_creation(self):
        """Test SnapshotRecorder can be instantiated."""
        recorder = SnapshotRecorder(io.StringIO())

        assert recorder.interval == 3.0
        assert not recorder.is_running
        assert recorder.samples_written == 0

    def test_interval_minimum(self):
        """Test interval has a minimum value."""
        recorder = SnapshotRecorder(io.StringIO())

        recorder.interval = 0.01
        assert recorder.interval >= 0.1

    def test_write_snapshot(self):
        """Test one snapshot block is written with a header and process lines."""
        output = io.StringIO()
        recorder = SnapshotRecorder(output)

        recorder.write_snapshot()

        lines = output.getvalue().splitlines()
        assert lines[0].startswith("top - ")
        assert any("PID USER" in line for line in lines)
        assert sum(1 for line in lines if len(line.split()) == 12) > 0
        assert recorder.samples_written == 1

    def test_collect_processes(self):
        """Test collected samples hold valid data."""
        processes = SnapshotRecorder(io.StringIO())._collect_processes()

        assert len(processes) > 0
        for proc in processes[:5]:
            assert isinstance(proc, ProcessSample)
            assert proc.pid >= 0
            assert isinstance(proc.name, str)
            assert proc.virt >= 0

    def test_recorder_start_stop(self):
        """Test SnapshotRecorder can be started and stopped."""
        recorder = SnapshotRecorder(io.StringIO(), interval=0.1)

        recorder.start()
        assert recorder.is_running

        recorder.stop()
        assert not recorder.is_running

    def test_recorder_start_idempotent(self):
        """Test starting an already running recorder is safe."""
        recorder = SnapshotRecorder(io.StringIO(), interval=0.1)

        recorder.start()
        thread1 = recorder._thread
        recorder.start()
        thread2 = recorder._thread

        assert thread1 is thread2
        recorder.stop()

    def test_daemon_thread(self):
        """Test recorder thread is a daemon thread."""
        recorder = SnapshotRecorder(io.StringIO(), interval=0.1)

        recorder.start()
        try:
            assert recorder._thread is not None
            assert recorder._thread.daemon is True
            assert recorder._thread.name == "SnapshotRecorder"
        finally:
            recorder.stop()

    def test_count_ends_recording(self):
        """Test the recorder stops by itself after the requested count."""
        recorder = SnapshotRecorder(io.StringIO(), interval=0.1, count=2)

        recorder.start()
        assert recorder.wait(timeout=30.0)
        assert recorder.samples_written == 2
        recorder.stop()

    def test_recording_converts(self):
        """Test a recorded log can be parsed back into rows."""
        output = io.StringIO()
        recorder = SnapshotRecorder(output, interval=0.1, count=2)

        recorder.start()
        recorder.wait(timeout=30.0)
        recorder.stop()

        output.seek(0)
        rows = list(TopLogParser(["python"], MetricSelector.MEMORY).rows(output))
        assert len(rows) == 2

    def test_stops_on_closed_output(self):
        """Test the thread ends when the output can no longer be written."""
        output = io.StringIO()
        output.close()
        recorder = SnapshotRecorder(output, interval=0.1)

        recorder.start()
        deadline = time.time() + 10.0
        while recorder.is_running and time.time() < deadline:
            time.sleep(0.05)

        assert not recorder.is_running
        recorder.stop()
