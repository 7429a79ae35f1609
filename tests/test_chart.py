# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""Tests for chart.py — ASCII fit table and histogram rendering."""

import math

import pandas as pd

from city_trends.chart import _bar, render_fit_table, render_histogram


TABLE = pd.DataFrame([
    {"city": "Jakarta", "country": "Indonesia", "month": 1, "n_obs": 114,
     "r_squared": 0.7123, "slope_per_decade": 0.153, "aic": 101.42},
    {"city": "Lima", "country": "Peru", "month": 7, "n_obs": 1,
     "r_squared": math.nan, "slope_per_decade": math.nan, "aic": math.nan},
])


def test_bar_full_and_empty():
    assert _bar(10, 10, 5) == "█████"
    assert _bar(0, 10, 5) == "░░░░░"


def test_bar_zero_max():
    assert _bar(3, 0, 4) == "░░░░"


def test_fit_table_rows():
    out = render_fit_table(TABLE, "Top groups")
    lines = out.splitlines()
    assert lines[0] == "Top groups"
    assert any("Jakarta, Indonesia" in line and "Jan" in line for line in lines)
    assert "0.712" in out
    assert "+0.15" in out


def test_fit_table_unavailable_shows_na():
    out = render_fit_table(TABLE, "Top groups")
    lima = next(line for line in out.splitlines() if line.startswith("Lima"))
    assert lima.count("n/a") == 3


def test_fit_table_empty():
    assert render_fit_table(TABLE.iloc[0:0], "Nothing") == "Nothing\n  (no groups)"


def test_histogram_scales_to_largest_bin():
    out = render_histogram(["a", "b"], [4, 2], "R²", bar_width=8)
    lines = out.splitlines()
    assert lines[0] == "R²"
    assert "████████" in lines[1]
    assert "████░░░░" in lines[2]
    assert lines[1].rstrip().endswith("4")


def test_histogram_empty():
    assert render_histogram([], [], "AIC") == "AIC\n  (no values)"
