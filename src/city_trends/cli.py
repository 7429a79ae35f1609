# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
cli.py — Command-line interface for city-trends.

We use argparse (stdlib) rather than click because:
- No extra dependency to install
- Sufficient for 4 simple subcommands

Commands:
  city-trends report        — load, fit every group, print summary, write HTML
  city-trends top           — print the best-explained groups by R²
  city-trends city NAME     — print the per-month fits for one city
  city-trends status        — show the last run's outcome
"""

import argparse
from pathlib import Path

import pandas as pd

from city_trends.chart import render_fit_table, render_histogram
from city_trends.config import DEFAULT_CONFIG_PATH, load_config
from city_trends.grouping import nest_groups
from city_trends.loader import DataFormatError, load_observations
from city_trends.modeling import fit_all, fit_table, unavailable_messages
from city_trends.report import (
    build_report,
    city_groups,
    filter_by_r_squared,
    histogram_counts,
    metric_values,
    rank_by_r_squared,
    write_report,
)
from city_trends.utils import log_event, log_events, read_last_run, write_last_run


def _load_config_or_exit(args) -> dict:
    try:
        config = load_config(Path(args.config))
    except (FileNotFoundError, ValueError) as e:
        print(f"[error] {e}")
        raise SystemExit(1)
    if args.data:
        config["data"]["path"] = args.data
    return config


def run_pipeline(config: dict, cities: list[str] | None = None) -> tuple[list[dict], pd.DataFrame]:
    """Load, group and fit; returns (fitted groups, fit table).

    Args:
        config: Loaded configuration (see config.py).
        cities: If given, only groups of these cities are fitted.

    Raises:
        FileNotFoundError: If the data file does not exist.
        DataFormatError: If the data file is malformed.
    """
    log_path = Path(config["log"]["path"])
    data_path = Path(config["data"]["path"])

    print(f"[load] Reading {data_path}...")
    observations = load_observations(data_path)
    groups = nest_groups(observations, base_year=config["data"]["base_year"])
    if cities is not None:
        wanted = {c.casefold() for c in cities}
        groups = [g for g in groups if g["city"].casefold() in wanted]
    print(f"[load] {len(observations)} rows → {len(groups)} city-month groups")

    print(f"[fit] Fitting linear and smooth models to {len(groups)} groups...")
    fitted = fit_all(
        groups,
        basis_df=config["model"]["basis_df"],
        degree=config["model"]["degree"],
    )
    failures = unavailable_messages(fitted)
    log_events("WARNING", failures, log_path=log_path)
    if failures:
        print(f"[fit] {len(failures)} fit(s) unavailable — details in {log_path}")

    return fitted, fit_table(fitted)


def _run_or_exit(config: dict, cities: list[str] | None = None):
    log_path = Path(config["log"]["path"])
    try:
        return run_pipeline(config, cities=cities)
    except (FileNotFoundError, DataFormatError) as e:
        print(f"[error] {e}")
        log_event("ERROR", str(e), log_path=log_path)
        write_last_run("ERROR", str(e), log_dir=log_path.parent)
        raise SystemExit(1)


def cmd_report(args) -> None:
    """Run the whole pipeline and write the HTML report."""
    config = _load_config_or_exit(args)
    report_config = config["report"]
    log_path = Path(config["log"]["path"])

    fitted, table = _run_or_exit(config)

    labels, counts = histogram_counts(metric_values(table, "r_squared"), bins=10, value_range=(0.0, 1.0))
    print()
    print(render_histogram(labels, counts, "R² of linear fits"))
    labels, counts = histogram_counts(metric_values(table, "aic"), bins=10)
    print()
    print(render_histogram(labels, counts, "AIC of smooth fits"))
    print()
    print(render_fit_table(
        rank_by_r_squared(table).head(report_config["top_n"]),
        f"Top {report_config['top_n']} groups by R²",
    ))

    output = Path(args.output or report_config["output"])
    document = build_report(fitted, table, report_config)
    write_report(document, output)
    print(f"\n[report] Written to {output}")

    n_ok = int((table["linear_status"] == "ok").sum())
    detail = f"{n_ok} of {len(table)} groups fitted; report at {output}"
    log_event("INFO", detail, log_path=log_path)
    write_last_run("OK", detail, log_dir=log_path.parent)


def cmd_top(args) -> None:
    """Print the top-N groups by R², optionally above a minimum R²."""
    config = _load_config_or_exit(args)
    _, table = _run_or_exit(config)

    n = args.n or config["report"]["top_n"]
    if args.min_r2 is not None:
        selected = filter_by_r_squared(table, args.min_r2)
        title = f"Groups with R² > {args.min_r2} (top {n})"
    else:
        selected = rank_by_r_squared(table)
        title = f"Top {n} groups by R²"
    print()
    print(render_fit_table(selected.head(n), title))


def cmd_city(args) -> None:
    """Print every month's fit for one city."""
    config = _load_config_or_exit(args)
    fitted, table = _run_or_exit(config, cities=[args.name])

    if not city_groups(fitted, args.name):
        print(f'[error] City "{args.name}" not found in the data.')
        raise SystemExit(1)
    print()
    print(render_fit_table(table, f"{args.name}: fits by month"))


def cmd_status(args) -> None:
    """Show the last run's outcome and the log file location."""
    config = _load_config_or_exit(args)
    log_path = Path(config["log"]["path"])

    last = read_last_run(log_path.parent)
    if last:
        last_run_time = last["timestamp"]
        marker = "✅" if last["status"] == "OK" else "❌"
        last_result = f"{marker} {last['detail']}"
    else:
        last_run_time = "Never"
        last_result = "—"

    if log_path.exists():
        size_kb = log_path.stat().st_size // 1024
        log_info = f"{log_path} ({size_kb} KB)"
    else:
        log_info = f"{log_path} (not created yet)"

    sep = "─" * 45
    print("\n🌡  City Trends — Status")
    print(sep)
    print(f"  Data file:   {config['data']['path']}")
    print(f"  Last run:    {last_run_time}")
    print(f"  Last result: {last_result}")
    print(f"  Log file:    {log_info}")
    print(sep)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="city-trends",
        description="Per city and month temperature trend fits (OLS and GAM)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=str(DEFAULT_CONFIG_PATH),
        help="TOML config file. Default: config.toml",
    )
    parser.add_argument(
        "--data",
        metavar="CSV",
        default=None,
        help="Override [data].path from the config file",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    p_report = subparsers.add_parser("report", help="Fit all groups and write the HTML report")
    p_report.add_argument(
        "--output",
        metavar="PATH",
        default=None,
        help="Override [report].output",
    )

    p_top = subparsers.add_parser("top", help="Print the best-explained groups by R²")
    p_top.add_argument("--n", metavar="N", type=int, default=None, help="Rows to show")
    p_top.add_argument(
        "--min-r2",
        metavar="R2",
        type=float,
        default=None,
        help="Only groups with R² above this value, e.g. 0.6",
    )

    p_city = subparsers.add_parser("city", help="Print per-month fits for one city")
    p_city.add_argument("name", metavar="NAME", help='City name, e.g. "Jakarta"')

    subparsers.add_parser("status", help="Show last run info")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    commands = {
        "report": cmd_report,
        "top": cmd_top,
        "city": cmd_city,
        "status": cmd_status,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
