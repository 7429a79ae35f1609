# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
grouping.py — Nest observations into one sub-table per (city, country, month).

Each group is a plain dict:

    {"city": "Jakarta", "country": "Indonesia", "month": 1,
     "data": DataFrame[date, year_offset, temperature]}

Groups are never rejected for being sparse; the modeler decides what it
can fit.
"""

import pandas as pd

BASE_YEAR = 1900
GROUP_KEYS = ["city", "country", "month"]
GROUP_COLUMNS = ["date", "year_offset", "temperature"]


def add_calendar_fields(observations: pd.DataFrame, base_year: int = BASE_YEAR) -> pd.DataFrame:
    """Keep rows from base_year onwards and derive month and year_offset.

    Earlier rows are dropped silently.
    """
    kept = observations[observations["date"].dt.year >= base_year].copy()
    kept["month"] = kept["date"].dt.month.astype(int)
    kept["year_offset"] = (kept["date"].dt.year - base_year).astype(int)
    return kept


def nest_groups(observations: pd.DataFrame, base_year: int = BASE_YEAR) -> list[dict]:
    """Group observations by (city, country, month).

    Args:
        observations: Output of load_observations.
        base_year: First year kept; year_offset counts years since it.

    Returns:
        List of group dicts sorted by city, country and month. Each group's
        data keeps the input row order.
    """
    kept = add_calendar_fields(observations, base_year=base_year)
    if kept.empty:
        return []

    groups = []
    for (city, country, month), rows in kept.groupby(GROUP_KEYS, sort=True):
        groups.append({
            "city":    city,
            "country": country,
            "month":   int(month),
            "data":    rows[GROUP_COLUMNS].reset_index(drop=True),
        })
    return groups


def group_label(group: dict) -> str:
    """Short identifier like 'Jakarta, Indonesia (month 1)' for messages."""
    return f"{group['city']}, {group['country']} (month {group['month']})"
