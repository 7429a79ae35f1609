# Project: city-trends
# Owner: GreenUnicorn
# Built with: Claude (Anthropic)
"""
modeling.py — Per-group linear and smooth (GAM) fits of temperature on year_offset.

Linear fit: ordinary least squares via statsmodels.
Smooth fit: statsmodels GLMGam with a cubic B-spline basis; the penalty weight
is picked from ALPHA_GRID by minimum AIC, where

    AIC = 2 * edf - 2 * loglik    (edf = total effective degrees of freedom)

Each fit returns either a result dataclass or Unavailable(reason). One group
failing never stops the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.gam.api import BSplines, GLMGam
from statsmodels.tools.sm_exceptions import PerfectSeparationError

from city_trends.grouping import group_label

DEFAULT_BASIS_DF = 10
DEFAULT_DEGREE = 3
# Reaches far enough for a straight-line trend (edf ≈ 2) to win on noisy series.
ALPHA_GRID = np.logspace(-2, 8, 21)
TREND_THRESHOLD = 0.005  # °C per year either side of zero counts as "stable"


class FitUnavailable(Exception):
    """Raised when a group's data cannot support a fit."""


@dataclass(frozen=True)
class Unavailable:
    reason: str
    available: bool = field(default=False, init=False)


@dataclass(frozen=True)
class LinearFit:
    """OLS fit of temperature ~ year_offset.

    residuals and fitted are aligned with the group's data rows; rows without
    a temperature hold NaN.
    """
    intercept: float
    slope: float
    r_squared: float
    residuals: np.ndarray = field(repr=False)
    fitted: np.ndarray = field(repr=False)
    n_obs: int
    available: bool = field(default=True, init=False)

    @property
    def slope_per_decade(self) -> float:
        return self.slope * 10

    @property
    def trend(self) -> str:
        if self.slope > TREND_THRESHOLD:
            return "warming"
        if self.slope < -TREND_THRESHOLD:
            return "cooling"
        return "stable"


@dataclass(frozen=True)
class SmoothFit:
    """GAM fit of temperature ~ s(year_offset); fitted is aligned like LinearFit."""
    aic: float
    edf: float
    alpha: float
    fitted: np.ndarray = field(repr=False)
    n_obs: int
    available: bool = field(default=True, init=False)


def _usable_rows(data: pd.DataFrame) -> pd.DataFrame:
    return data.dropna(subset=["temperature"])


def fit_linear(data: pd.DataFrame) -> LinearFit:
    """Fit temperature = intercept + slope * year_offset by OLS.

    Rows with a missing temperature are left out of the fit.

    Constant temperature still gives a fit (slope 0, zero residuals) but its
    r_squared is NaN, since SS_total is 0.

    Raises:
        FitUnavailable: fewer than 2 usable rows or no spread in year_offset.
    """
    usable = _usable_rows(data)
    if len(usable) < 2:
        raise FitUnavailable(f"need at least 2 observations, have {len(usable)}")
    if usable["year_offset"].nunique() < 2:
        raise FitUnavailable("year_offset has no variance")

    x = usable["year_offset"].to_numpy(dtype=float)
    y = usable["temperature"].to_numpy(dtype=float)
    try:
        res = sm.OLS(y, sm.add_constant(x)).fit()
    except (ValueError, np.linalg.LinAlgError) as e:
        raise FitUnavailable(f"OLS failed: {e}") from e

    intercept, slope = (float(p) for p in res.params)
    if usable["temperature"].nunique() < 2:
        r_squared = np.nan
    else:
        r_squared = float(res.rsquared)
        if not np.isfinite(r_squared):
            raise FitUnavailable("R² is not finite")
        r_squared = min(max(r_squared, 0.0), 1.0)

    fitted = intercept + slope * data["year_offset"].to_numpy(dtype=float)
    fitted = np.where(data["temperature"].isna(), np.nan, fitted)
    residuals = data["temperature"].to_numpy(dtype=float) - fitted

    return LinearFit(
        intercept=intercept,
        slope=slope,
        r_squared=r_squared,
        residuals=residuals,
        fitted=fitted,
        n_obs=len(usable),
    )


def fit_smooth(
    data: pd.DataFrame,
    basis_df: int = DEFAULT_BASIS_DF,
    degree: int = DEFAULT_DEGREE,
) -> SmoothFit:
    """Fit a penalised B-spline GAM of temperature on year_offset.

    Raises:
        FitUnavailable: fewer distinct year_offset values than basis_df, or
            the fit fails numerically for every penalty weight.
    """
    usable = _usable_rows(data)
    distinct = usable["year_offset"].nunique()
    if distinct < basis_df:
        raise FitUnavailable(
            f"need {basis_df} distinct years for the spline basis, have {distinct}"
        )

    x = usable["year_offset"].to_numpy(dtype=float)
    y = usable["temperature"].to_numpy(dtype=float)
    const = np.ones((len(y), 1))

    try:
        basis = BSplines(x.reshape(-1, 1), df=[basis_df], degree=[degree])
    except (ValueError, np.linalg.LinAlgError) as e:
        raise FitUnavailable(f"spline basis failed: {e}") from e

    best = None
    errors = []
    for alpha in ALPHA_GRID:
        try:
            res = GLMGam(y, exog=const, smoother=basis, alpha=[alpha]).fit()
        except (
            ValueError, np.linalg.LinAlgError, FloatingPointError, PerfectSeparationError
        ) as e:
            errors.append(str(e))
            continue
        edf = float(np.sum(res.edf))
        if edf < 1.0:
            # the intercept alone is 1; less means a rank-deficient design
            errors.append(f"effective degrees of freedom {edf:.3f} below 1")
            continue
        aic = 2 * edf - 2 * float(res.llf)
        if not np.isfinite(aic):
            continue
        if best is None or aic < best[0]:
            best = (aic, edf, float(alpha), np.asarray(res.fittedvalues, dtype=float))

    if best is None:
        detail = errors[-1] if errors else "AIC not finite"
        raise FitUnavailable(f"GAM did not converge: {detail}")

    aic, edf, alpha, fitted_usable = best
    fitted = np.full(len(data), np.nan)
    fitted[data["temperature"].notna().to_numpy()] = fitted_usable

    return SmoothFit(aic=aic, edf=edf, alpha=alpha, fitted=fitted, n_obs=len(usable))


def fit_group(
    group: dict,
    basis_df: int = DEFAULT_BASIS_DF,
    degree: int = DEFAULT_DEGREE,
) -> dict:
    """Fit both models to one group.

    Returns a new dict with the group's fields plus "linear" and "smooth";
    the input dict is not modified.
    """
    try:
        linear = fit_linear(group["data"])
    except FitUnavailable as e:
        linear = Unavailable(str(e))

    try:
        smooth = fit_smooth(group["data"], basis_df=basis_df, degree=degree)
    except FitUnavailable as e:
        smooth = Unavailable(str(e))

    return {**group, "linear": linear, "smooth": smooth}


def fit_all(
    groups: list[dict],
    basis_df: int = DEFAULT_BASIS_DF,
    degree: int = DEFAULT_DEGREE,
) -> list[dict]:
    """Fit every group, in input order."""
    return [fit_group(g, basis_df=basis_df, degree=degree) for g in groups]


def unavailable_messages(fitted: list[dict]) -> list[str]:
    """One line per unavailable fit, e.g. for the run log."""
    messages = []
    for g in fitted:
        for kind in ("linear", "smooth"):
            fit = g[kind]
            if not fit.available:
                messages.append(f"{kind} fit unavailable for {group_label(g)}: {fit.reason}")
    return messages


def fit_table(fitted: list[dict]) -> pd.DataFrame:
    """Flatten fitted groups into one row per group.

    Unavailable metrics are NaN; the *_status columns hold "ok" or the reason.
    """
    rows = []
    for g in fitted:
        linear, smooth = g["linear"], g["smooth"]
        rows.append({
            "city":             g["city"],
            "country":          g["country"],
            "month":            g["month"],
            "n_obs":            int(g["data"]["temperature"].notna().sum()),
            "r_squared":        linear.r_squared if linear.available else np.nan,
            "aic":              smooth.aic if smooth.available else np.nan,
            "slope":            linear.slope if linear.available else np.nan,
            "slope_per_decade": linear.slope_per_decade if linear.available else np.nan,
            "trend":            linear.trend if linear.available else None,
            "edf":              smooth.edf if smooth.available else np.nan,
            "linear_status":    "ok" if linear.available else linear.reason,
            "smooth_status":    "ok" if smooth.available else smooth.reason,
        })
    columns = [
        "city", "country", "month", "n_obs", "r_squared", "aic", "slope",
        "slope_per_decade", "trend", "edf", "linear_status", "smooth_status",
    ]
    return pd.DataFrame(rows, columns=columns)
