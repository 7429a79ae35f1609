# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
report.py — Rank, filter and chart fitted groups, and assemble the HTML report.

No model numerics happen here; everything reads the LinearFit / SmoothFit
values attached by modeling.py. Selections that match nothing give an empty
figure with a note instead of raising.
"""

import html
from pathlib import Path

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from city_trends.utils import fmt_month

DEFAULT_R_SQUARED_THRESHOLD = 0.6
FACET_COLUMNS = 3

PLOTLY_LAYOUT = dict(
    template="plotly_white",
    font=dict(
        family="-apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif",
        color="#3a3a3c",
        size=12,
    ),
    margin=dict(l=48, r=24, t=56, b=40),
    legend=dict(bgcolor="rgba(0,0,0,0)"),
)

MONTH_COLORS = [
    "#0a84ff", "#5e5ce6", "#bf5af2", "#ff375f", "#ff453a", "#ff9f0a",
    "#ffd60a", "#32d74b", "#30b0c7", "#64d2ff", "#8e8e93", "#1c1c1e",
]

# ─────────────────────────────────────────────────────────────
# Tables
# ─────────────────────────────────────────────────────────────


def rank_by_r_squared(table: pd.DataFrame) -> pd.DataFrame:
    """Sort groups by R² descending; ties keep input order, unavailable last."""
    ranked = table.sort_values(
        "r_squared", ascending=False, kind="stable", na_position="last"
    )
    return ranked.reset_index(drop=True)


def filter_by_r_squared(
    table: pd.DataFrame,
    threshold: float = DEFAULT_R_SQUARED_THRESHOLD,
) -> pd.DataFrame:
    """Groups whose R² is strictly above threshold, ranked."""
    return rank_by_r_squared(table[table["r_squared"] > threshold])


def metric_values(table: pd.DataFrame, column: str) -> np.ndarray:
    """Available (non-NaN) values of a metric column."""
    return table[column].dropna().to_numpy(dtype=float)


def histogram_counts(
    values: np.ndarray,
    bins: int = 10,
    value_range: tuple[float, float] | None = None,
) -> tuple[list[str], list[int]]:
    """Bin values for the terminal histogram.

    Returns:
        (labels, counts) where labels look like '0.40–0.50'.
    """
    if len(values) == 0:
        return [], []
    counts, edges = np.histogram(values, bins=bins, range=value_range)
    digits = 2 if (edges[-1] - edges[0]) < 10 else 0
    labels = [
        f"{lo:.{digits}f}–{hi:.{digits}f}" for lo, hi in zip(edges[:-1], edges[1:])
    ]
    return labels, [int(c) for c in counts]


def city_groups(fitted: list[dict], city: str) -> list[dict]:
    """Fitted groups of one city (case-insensitive), ordered by month."""
    wanted = city.casefold()
    return sorted(
        (g for g in fitted if g["city"].casefold() == wanted),
        key=lambda g: (g["country"], g["month"]),
    )


# ─────────────────────────────────────────────────────────────
# Figures
# ─────────────────────────────────────────────────────────────


def empty_figure(title: str, message: str) -> go.Figure:
    """A blank figure carrying a centred note."""
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        x=0.5, y=0.5, xref="paper", yref="paper",
        showarrow=False,
        font=dict(size=14, color="#8e8e93"),
    )
    fig.update_layout(**{
        **PLOTLY_LAYOUT,
        "title": dict(text=title),
        "xaxis": dict(visible=False),
        "yaxis": dict(visible=False),
        "height": 240,
    })
    return fig


def _histogram(values: np.ndarray, title: str, x_title: str, bins: int) -> go.Figure:
    if len(values) == 0:
        return empty_figure(title, "No groups with an available fit.")
    fig = go.Figure(
        go.Histogram(
            x=values,
            nbinsx=bins,
            marker_color="rgba(10,132,255,0.7)",
            marker_line_width=0,
        )
    )
    fig.update_layout(**{
        **PLOTLY_LAYOUT,
        "title": dict(text=title),
        "xaxis": dict(title=x_title),
        "yaxis": dict(title="Groups"),
        "height": 320,
        "bargap": 0.05,
    })
    return fig


def r_squared_histogram(table: pd.DataFrame, bins: int = 20) -> go.Figure:
    """Distribution of linear-fit R² across groups."""
    return _histogram(metric_values(table, "r_squared"), "R² of linear fits", "R²", bins)


def aic_histogram(table: pd.DataFrame, bins: int = 30) -> go.Figure:
    """Distribution of smooth-fit AIC across groups."""
    return _histogram(metric_values(table, "aic"), "AIC of smooth fits", "AIC", bins)


def smooth_overlay(fitted: list[dict], city: str) -> go.Figure:
    """One smooth-trend line per month for a city, across the full date range."""
    title = f"{city}: smooth trend by month"
    groups = [g for g in city_groups(fitted, city) if g["smooth"].available]
    if not groups:
        return empty_figure(title, f"No smooth fits available for {city}.")

    fig = go.Figure()
    for g in groups:
        data = g["data"].assign(smooth=g["smooth"].fitted)
        data = data.dropna(subset=["smooth"]).sort_values("date")
        fig.add_trace(
            go.Scatter(
                x=data["date"],
                y=data["smooth"],
                name=fmt_month(g["month"]),
                mode="lines",
                line=dict(color=MONTH_COLORS[g["month"] - 1], width=2),
            )
        )
    fig.update_layout(**{
        **PLOTLY_LAYOUT,
        "title": dict(text=title),
        "xaxis": dict(title="Year"),
        "yaxis": dict(title="Average temperature", ticksuffix="°C"),
        "height": 420,
        "hovermode": "x unified",
    })
    return fig


def linear_facets(
    fitted: list[dict],
    city: str,
    min_r_squared: float = DEFAULT_R_SQUARED_THRESHOLD,
) -> go.Figure:
    """Observations and linear trend per month, for months with R² above min_r_squared."""
    title = f"{city}: linear trend, months with R² > {min_r_squared}"
    groups = [
        g for g in city_groups(fitted, city)
        if g["linear"].available and g["linear"].r_squared > min_r_squared
    ]
    if not groups:
        return empty_figure(title, f"No months of {city} have R² above {min_r_squared}.")

    cols = min(FACET_COLUMNS, len(groups))
    rows = -(-len(groups) // cols)
    fig = make_subplots(
        rows=rows,
        cols=cols,
        subplot_titles=[
            f"{fmt_month(g['month'])} (R² {g['linear'].r_squared:.2f})" for g in groups
        ],
        shared_yaxes=False,
    )
    for i, g in enumerate(groups):
        row, col = divmod(i, cols)
        data = g["data"].assign(trend=g["linear"].fitted)
        data = data.dropna(subset=["temperature"]).sort_values("date")
        fig.add_trace(
            go.Scatter(
                x=data["date"],
                y=data["temperature"],
                mode="markers",
                marker=dict(color="#8e8e93", size=4),
                name="Observed",
                showlegend=i == 0,
            ),
            row=row + 1, col=col + 1,
        )
        fig.add_trace(
            go.Scatter(
                x=data["date"],
                y=data["trend"],
                mode="lines",
                line=dict(color="#ff453a", width=2),
                name="Linear trend",
                showlegend=i == 0,
            ),
            row=row + 1, col=col + 1,
        )
    fig.update_layout(**{
        **PLOTLY_LAYOUT,
        "title": dict(text=title),
        "height": 260 * rows + 80,
    })
    fig.update_yaxes(ticksuffix="°C")
    return fig


# ─────────────────────────────────────────────────────────────
# HTML report
# ─────────────────────────────────────────────────────────────

REPORT_CSS = """
<style>
  body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
         color: #1c1c1e; max-width: 1080px; margin: 2rem auto; padding: 0 1rem; }
  h1 { letter-spacing: -0.02em; }
  h2 { margin-top: 2.5rem; font-size: 1.1rem; text-transform: uppercase;
       letter-spacing: 0.08em; color: #636366; }
  table.ct-table { border-collapse: collapse; font-size: 0.9rem; width: 100%; }
  table.ct-table th { text-align: right; padding: 6px 10px; color: #636366;
                      border-bottom: 1px solid #d1d1d6; }
  table.ct-table td { text-align: right; padding: 6px 10px;
                      border-bottom: 1px solid #f2f2f7; font-variant-numeric: tabular-nums; }
  table.ct-table th:first-child, table.ct-table td:first-child { text-align: left; }
  .ct-note { color: #8e8e93; }
</style>
"""

TABLE_COLUMNS = ["city", "country", "month", "n_obs", "r_squared", "slope_per_decade", "aic"]


def table_html(table: pd.DataFrame, limit: int | None = None) -> str:
    """Render fit rows as an HTML table (or a note when there are none)."""
    if table.empty:
        return '<p class="ct-note">No groups match.</p>'
    shown = table[TABLE_COLUMNS].head(limit) if limit else table[TABLE_COLUMNS]
    shown = shown.assign(month=shown["month"].map(fmt_month))
    return shown.to_html(
        classes="ct-table",
        index=False,
        border=0,
        float_format=lambda v: f"{v:.3f}",
        na_rep="n/a",
    )


def build_report(
    fitted: list[dict],
    table: pd.DataFrame,
    report_config: dict,
) -> str:
    """Assemble the full HTML report.

    Args:
        fitted: Output of modeling.fit_all.
        table: Output of modeling.fit_table for the same groups.
        report_config: The [report] section of the config.

    Returns:
        A standalone HTML document (plotly.js is loaded from its CDN).
    """
    threshold = report_config["r_squared_threshold"]
    trend_city = report_config["trend_city"]
    overlay_city = report_config["overlay_city"]
    top_n = report_config["top_n"]

    ranked = rank_by_r_squared(table)
    well_explained = filter_by_r_squared(table, threshold)
    n_linear = int((table["linear_status"] == "ok").sum())
    n_smooth = int((table["smooth_status"] == "ok").sum())

    figures = [
        ("Distribution of R²", r_squared_histogram(table)),
        ("Distribution of AIC", aic_histogram(table)),
        (f"Linear trends for {trend_city}", linear_facets(fitted, trend_city, threshold)),
        (f"Smooth trends for {overlay_city}", smooth_overlay(fitted, overlay_city)),
    ]
    figure_parts = []
    for i, (heading, fig) in enumerate(figures):
        figure_parts.append(f"<h2>{html.escape(heading)}</h2>")
        figure_parts.append(
            fig.to_html(full_html=False, include_plotlyjs="cdn" if i == 0 else False)
        )

    parts = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="utf-8">',
        "<title>City temperature trends</title>",
        REPORT_CSS,
        "</head><body>",
        "<h1>City temperature trends by month</h1>",
        f'<p class="ct-note">{len(table)} city-month groups; '
        f"{n_linear} linear fits and {n_smooth} smooth fits available.</p>",
        f"<h2>Top {top_n} groups by R²</h2>",
        table_html(ranked, limit=top_n),
        f"<h2>Groups with R² &gt; {threshold}</h2>",
        f'<p class="ct-note">{len(well_explained)} group(s).</p>',
        table_html(well_explained),
        *figure_parts,
        "</body></html>",
    ]
    return "\n".join(parts)


def write_report(document: str, path: Path) -> Path:
    """Write the report, creating parent directories. Returns the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document, encoding="utf-8")
    return path
