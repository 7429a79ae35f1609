# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
utils.py — Shared utilities: label formatting, event logging and run status.
"""

import calendar
from collections import deque
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_PATH = Path("logs/city_trends.log")


def fmt_month(month: int) -> str:
    """Format a month number as a short label.

    Args:
        month: Calendar month, 1-12.

    Returns:
        Abbreviated month name like 'Jan'.
    """
    return calendar.month_abbr[month]


def fmt_metric(value: float | None, digits: int = 3) -> str:
    """Format an optional metric, using 'n/a' for unavailable values."""
    if value is None or value != value:  # NaN != NaN
        return "n/a"
    return f"{value:.{digits}f}"


def log_event(level: str, message: str, log_path: Path = DEFAULT_LOG_PATH) -> None:
    """Append a timestamped line to the log file.

    Format: ``2026-02-23 20:00:01 [WARNING] Fit unavailable for ...``

    Args:
        level: Severity label, e.g. 'INFO', 'WARNING' or 'ERROR'.
        message: Event description to log.
        log_path: Destination log file path.
    """
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(log_path, "a") as f:
            f.write(f"{timestamp} [{level}] {message}\n")
    except OSError:
        pass  # Never crash on logging failure


def log_events(level: str, messages: list[str], log_path: Path = DEFAULT_LOG_PATH) -> None:
    """Append several lines at once (one file open for a whole batch)."""
    if not messages:
        return
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(log_path, "a") as f:
            for message in messages:
                f.write(f"{timestamp} [{level}] {message}\n")
    except OSError:
        pass


def write_last_run(
    status: str,
    detail: str,
    log_dir: Path = Path("logs"),
) -> None:
    """Append a status record to logs/last_run.txt after each run.

    Format: ``2026-02-23 20:00:01|OK|1187 of 1200 groups fitted``

    Args:
        status: 'OK' or 'ERROR'.
        detail: Human-readable summary of the run outcome.
        log_dir: Directory containing last_run.txt.
    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(log_dir / "last_run.txt", "a") as f:
            f.write(f"{timestamp}|{status}|{detail.replace('|', '-')}\n")
    except OSError:
        pass


def read_last_run(log_dir: Path = Path("logs")) -> dict | None:
    """Read the most recent run record from logs/last_run.txt.

    Args:
        log_dir: Directory containing last_run.txt.

    Returns:
        Dict with keys timestamp, status, detail — or None if file is missing
        or empty.
    """
    path = log_dir / "last_run.txt"
    if not path.exists():
        return None
    try:
        with open(path) as f:
            buf: deque[str] = deque(f, maxlen=1)
        if not buf:
            return None
        last = buf[0].rstrip("\n")
        parts = last.split("|", 2)
        if len(parts) != 3:
            return None
        return {"timestamp": parts[0], "status": parts[1], "detail": parts[2]}
    except OSError:
        return None
