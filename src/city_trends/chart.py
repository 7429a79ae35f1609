# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
chart.py — ASCII table and histogram rendering for terminal output.

Uses only the Python standard library (os) on top of the fit table.
All rendering functions return strings ready to print.
"""

import os

import pandas as pd

from city_trends.utils import fmt_metric, fmt_month

FALLBACK_TERMINAL_WIDTH: int = 80
BAR_LABEL_RESERVE: int = 30  # characters reserved for label + value outside the bar


def render_fit_table(table: pd.DataFrame, title: str) -> str:
    """Render fit rows as a fixed-width ASCII table.

    Args:
        table: Rows from modeling.fit_table (already sorted/filtered).
        title: Header line printed above the table.

    Returns:
        Multi-line string containing the formatted table.
    """
    if table.empty:
        return f"{title}\n  (no groups)"

    city_w = max(12, max(len(f"{r.city}, {r.country}") for r in table.itertuples()))
    header_row = "  ".join([
        f"{'City':<{city_w}}", "Month", "  N", "    R²", "°C/decade", "     AIC",
    ])
    sep = "─" * len(header_row)

    lines = [title, sep, header_row, sep]
    for r in table.itertuples():
        slope = r.slope_per_decade
        slope_str = "n/a" if slope != slope else f"{slope:+.2f}"
        lines.append("  ".join([
            f"{r.city + ', ' + r.country:<{city_w}}",
            f"{fmt_month(r.month):<5}",
            f"{r.n_obs:>3}",
            f"{fmt_metric(r.r_squared):>6}",
            f"{slope_str:>9}",
            f"{fmt_metric(r.aic, digits=1):>8}",
        ]))
    lines.append(sep)
    return "\n".join(lines)


# ─────────────────────────────────────────────────────────────
# Bar chart helpers
# ─────────────────────────────────────────────────────────────

def _bar(value: float, max_value: float, bar_width: int) -> str:
    """Render a single filled/empty bar scaled to bar_width.

    Args:
        value: The data value to represent.
        max_value: The maximum value (maps to full bar width).
        bar_width: Total character width of the bar.

    Returns:
        String of '█' and '░' characters of length bar_width.
    """
    if max_value == 0:
        filled = 0
    else:
        filled = round((value / max_value) * bar_width)
    filled = max(0, min(filled, bar_width))
    return "█" * filled + "░" * (bar_width - filled)


def render_histogram(
    labels: list[str],
    counts: list[int],
    title: str,
    bar_width: int | None = None,
) -> str:
    """Render a labelled horizontal histogram, one row per bin.

    Args:
        labels: Bin labels, e.g. from report.histogram_counts.
        counts: Number of groups in each bin.
        title: Chart title printed above the bars.
        bar_width: Width of the bar in characters. Auto-detected from terminal if None.

    Returns:
        Multi-line string containing the chart.
    """
    if not counts:
        return f"{title}\n  (no values)"

    if bar_width is None:
        try:
            terminal_width = os.get_terminal_size().columns
        except OSError:
            terminal_width = FALLBACK_TERMINAL_WIDTH
        bar_width = max(10, terminal_width - BAR_LABEL_RESERVE)

    max_count = max(counts)
    label_w = max(len(lbl) for lbl in labels)
    lines = [title]
    for label, count in zip(labels, counts):
        bar = _bar(count, max_count, bar_width)
        lines.append(f"  {label:<{label_w}} │{bar}│ {count:>5}")

    return "\n".join(lines)
