# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
loader.py — Read the monthly city temperature CSV into a typed DataFrame.

The expected input is the Berkeley Earth "major city" extract:

    dt,AverageTemperature,AverageTemperatureUncertainty,City,Country,Latitude,Longitude
    1849-01-01,26.704,1.435,Abidjan,Côte D'Ivoire,5.63N,3.23W

Only dt, AverageTemperature, City and Country are used.
"""

from pathlib import Path

import pandas as pd

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"  # zero-padded YYYY-MM-DD

# CSV header -> column name used throughout the package
REQUIRED_COLUMNS = {
    "dt": "date",
    "AverageTemperature": "temperature",
    "City": "city",
    "Country": "country",
}


class DataFormatError(ValueError):
    """Raised when the input table is missing columns or holds unparseable values."""


def load_observations(path: Path | str) -> pd.DataFrame:
    """Load the raw observation table.

    Args:
        path: Path to the CSV file.

    Returns:
        DataFrame with columns date (datetime64), temperature (float, NaN when
        missing), city (str) and country (str), in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataFormatError: If a required column is absent, the file is empty,
            or a date or temperature cannot be parsed.
    """
    path = Path(path)
    try:
        with open(path, newline="", encoding="utf-8") as f:
            raw = pd.read_csv(f, dtype={"dt": str, "City": str, "Country": str})
    except UnicodeDecodeError as e:
        raise DataFormatError(f"{path} is not UTF-8 text: {e}") from e
    except pd.errors.EmptyDataError as e:
        raise DataFormatError(f"{path} is empty") from e
    except pd.errors.ParserError as e:
        raise DataFormatError(f"{path} is not a readable CSV table: {e}") from e

    return parse_observations(raw, source=str(path))


def parse_observations(raw: pd.DataFrame, source: str = "input") -> pd.DataFrame:
    """Validate and type a raw table that uses the CSV column names."""
    missing = [col for col in REQUIRED_COLUMNS if col not in raw.columns]
    if missing:
        raise DataFormatError(
            f"{source} is missing required column(s): {', '.join(missing)}"
        )

    df = raw[list(REQUIRED_COLUMNS)].rename(columns=REQUIRED_COLUMNS)

    if not pd.api.types.is_datetime64_any_dtype(df["date"]):
        text = df["date"].dropna().astype(str)
        bad = ~text.str.fullmatch(DATE_PATTERN)
        if bad.any():
            raise DataFormatError(
                f"{source}: dates must use the {DATE_FORMAT} format (got {text[bad].iloc[0]!r})"
            )

    try:
        df["date"] = pd.to_datetime(df["date"], format=DATE_FORMAT)
    except (ValueError, TypeError) as e:
        raise DataFormatError(
            f"{source}: dates must use the {DATE_FORMAT} format ({e})"
        ) from e
    if df["date"].isna().any():
        first_bad = int(df["date"].isna().to_numpy().argmax())
        raise DataFormatError(f"{source}: row {first_bad} has no date")

    try:
        df["temperature"] = pd.to_numeric(df["temperature"]).astype(float)
    except (ValueError, TypeError) as e:
        raise DataFormatError(f"{source}: AverageTemperature must be numeric ({e})") from e

    for col in ("city", "country"):
        if df[col].isna().any():
            raise DataFormatError(f"{source}: column {col!r} has empty values")

    return df.reset_index(drop=True)
