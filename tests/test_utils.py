# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""Tests for utils.py formatting and logging helpers."""

import math

from city_trends.utils import (
    fmt_metric,
    fmt_month,
    log_event,
    log_events,
    read_last_run,
    write_last_run,
)


# ---------------------------------------------------------------------------
# fmt_month / fmt_metric
# ---------------------------------------------------------------------------

def test_fmt_month_january():
    assert fmt_month(1) == "Jan"


def test_fmt_month_december():
    assert fmt_month(12) == "Dec"


def test_fmt_metric_rounds():
    assert fmt_metric(0.87654) == "0.877"


def test_fmt_metric_nan_is_na():
    assert fmt_metric(math.nan) == "n/a"


def test_fmt_metric_none_is_na():
    assert fmt_metric(None) == "n/a"


# ---------------------------------------------------------------------------
# log_event / log_events
# ---------------------------------------------------------------------------

def test_log_event_appends_line(tmp_path):
    log_path = tmp_path / "logs" / "city_trends.log"
    log_event("ERROR", "bad csv", log_path=log_path)
    log_event("INFO", "done", log_path=log_path)

    lines = log_path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("[ERROR] bad csv")
    assert lines[1].endswith("[INFO] done")


def test_log_events_writes_each_message(tmp_path):
    log_path = tmp_path / "city_trends.log"
    log_events("WARNING", ["a", "b", "c"], log_path=log_path)
    assert len(log_path.read_text().splitlines()) == 3


def test_log_events_empty_list_creates_nothing(tmp_path):
    log_path = tmp_path / "city_trends.log"
    log_events("WARNING", [], log_path=log_path)
    assert not log_path.exists()


def test_log_event_unwritable_path_does_not_raise(tmp_path):
    """A directory in place of the log file must not crash the run."""
    log_path = tmp_path / "is_a_dir"
    log_path.mkdir()
    log_event("ERROR", "ignored", log_path=log_path)


# ---------------------------------------------------------------------------
# write_last_run / read_last_run
# ---------------------------------------------------------------------------

def test_write_and_read_last_run(tmp_path):
    """write_last_run then read_last_run should round-trip correctly."""
    write_last_run("OK", "1200 of 1200 groups fitted", log_dir=tmp_path)
    result = read_last_run(log_dir=tmp_path)
    assert result is not None
    assert result["status"] == "OK"
    assert result["detail"] == "1200 of 1200 groups fitted"


def test_read_last_run_missing_file(tmp_path):
    """read_last_run returns None when the file does not exist."""
    result = read_last_run(log_dir=tmp_path / "nonexistent")
    assert result is None


def test_read_last_run_returns_most_recent(tmp_path):
    """read_last_run always returns the LAST line written."""
    write_last_run("OK", "fitted", log_dir=tmp_path)
    write_last_run("ERROR", "missing column", log_dir=tmp_path)
    result = read_last_run(log_dir=tmp_path)
    assert result["status"] == "ERROR"
    assert result["detail"] == "missing column"


def test_write_last_run_escapes_separator(tmp_path):
    write_last_run("ERROR", "a|b", log_dir=tmp_path)
    assert read_last_run(log_dir=tmp_path)["detail"] == "a-b"
