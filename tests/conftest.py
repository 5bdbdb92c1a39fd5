"""Shared helpers for building top logs in tests."""

import pytest


def top_header(clock: str) -> str:
    """A top batch-mode header line for the given HH:MM:SS clock."""
    return f"top - {clock} up 3 days,  4:05,  2 users,  load average: 0.15, 0.10, 0.05\n"


def process_line(
    name: str,
    virt: str = "1000",
    cpu: str = "0.0",
    pid: int = 1234,
) -> str:
    """A twelve-field top process line."""
    return f"{pid:>7} root      20   0 {virt:>7}   1000    500 S {cpu:>5}   0.1   0:00.10 {name}\n"


SUMMARY_LINES = [
    "Tasks: 120 total,   1 running, 119 sleeping,   0 stopped,   0 zombie\n",
    "%Cpu(s):  1.3 us,  0.7 sy,  0.0 ni, 97.9 id,  0.0 wa,  0.0 hi,  0.0 si,  0.0 st\n",
    "KiB Mem : 16266460 total,  9843208 free,  3017424 used,  3405828 buff/cache\n",
    "KiB Swap:  2097148 total,  2097148 free,        0 used.\n",
    "\n",
    "    PID USER      PR  NI    VIRT    RES    SHR S  %CPU  %MEM     TIME+ COMMAND\n",
]


@pytest.fixture
def sample_log() -> list[str]:
    """Two snapshots of a small host running two workers and a database."""
    return [
        top_header("10:15:00"),
        *SUMMARY_LINES,
        process_line("worker", virt="128m", cpu="12.5", pid=101),
        process_line("dbserver", virt="2048", cpu="3.0", pid=102),
        process_line("sshd", virt="900", cpu="0.0", pid=103),
        "\n",
        top_header("10:16:00"),
        *SUMMARY_LINES,
        process_line("worker", virt="130m", cpu="7.5", pid=101),
        process_line("worker", virt="2m", cpu="1.2", pid=104),
        process_line("dbserver", virt="4096", cpu="2.0", pid=102),
        "\n",
    ]
