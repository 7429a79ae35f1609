# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
config.py — Load and validate the TOML configuration file.

We use tomllib (Python 3.11+ stdlib) so no extra install is needed.
The config path defaults to "config.toml" in the current working directory,
but can be overridden from the command line or in tests.
"""

import tomllib
from pathlib import Path


DEFAULT_CONFIG_PATH = Path("config.toml")

# Values used when an optional section or key is left out of config.toml.
# The cities and threshold are exploratory choices, not validated rules.
DEFAULTS: dict = {
    "data": {
        "base_year": 1900,
    },
    "model": {
        "basis_df": 10,
        "degree": 3,
    },
    "report": {
        "r_squared_threshold": 0.6,
        "trend_city": "Jakarta",
        "overlay_city": "Singapore",
        "top_n": 10,
        "output": "reports/city_trends.html",
    },
}


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> dict:
    """Load and validate a TOML configuration file.

    Args:
        path: Path to the TOML config file.

    Returns:
        Nested dict of configuration values, with optional keys filled in
        from DEFAULTS.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If required keys or sections are missing, or a value is
            out of range.
    """
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Copy config.toml.example to config.toml and point [data].path at your CSV."
        )

    with open(path, "rb") as f:
        config = tomllib.load(f)

    _validate(config)
    return with_defaults(config)


def with_defaults(config: dict) -> dict:
    """Return a copy of config with every missing optional key filled in."""
    merged = {section: dict(values) for section, values in config.items()}
    for section, values in DEFAULTS.items():
        target = merged.setdefault(section, {})
        for key, value in values.items():
            target.setdefault(key, value)
    return merged


def _validate(config: dict) -> None:
    """Validate that all required config sections and keys are present.

    Expected config schema::

        [data]
        path      = <str>     # CSV of monthly city temperatures
        base_year = <int>     # optional, first year kept (default 1900)

        [model]               # optional
        basis_df  = <int>     # B-spline basis columns for the smooth fit
        degree    = <int>     # B-spline degree

        [report]              # optional
        r_squared_threshold = <float>  # 0-1, filter for "well explained" groups
        trend_city          = <str>    # city for the faceted linear chart
        overlay_city        = <str>    # city for the smooth overlay chart
        top_n               = <int>    # rows printed by `top`
        output              = <str>    # HTML report path

        [log]
        path = <str>     # relative or absolute path to the log file

    Args:
        config: Parsed TOML config dict.

    Raises:
        ValueError: If any required section or key is absent or invalid.
    """
    required_sections = ["data", "log"]
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: [{section}]")

    if "path" not in config["data"]:
        raise ValueError("Missing required config key: [data].path")
    if "path" not in config["log"]:
        raise ValueError("Missing required config key: [log].path")

    threshold = config.get("report", {}).get("r_squared_threshold")
    if threshold is not None and not 0.0 <= threshold <= 1.0:
        raise ValueError(
            f"[report].r_squared_threshold must be between 0 and 1, got {threshold}"
        )

    model = config.get("model", {})
    degree = model.get("degree", DEFAULTS["model"]["degree"])
    basis_df = model.get("basis_df", DEFAULTS["model"]["basis_df"])
    if basis_df <= degree:
        raise ValueError(
            f"[model].basis_df ({basis_df}) must be larger than [model].degree ({degree})"
        )
