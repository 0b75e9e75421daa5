"""Descriptive statistics of a fractional-frequency series."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import ConfigurationError
from .models import TrendFit, fit_linear_trend


@dataclass(frozen=True)
class SeriesStatistics:
    count: int
    min: float
    max: float
    mean: float
    median: float
    std: float
    linear_fit_coeffs: tuple[float, float]
    outliers_removed: int = 0
    avg_rate: Optional[float] = None

    @property
    def trend(self) -> TrendFit:
        slope, intercept = self.linear_fit_coeffs
        return TrendFit(slope=slope, intercept=intercept, residuals=np.empty(0))

    def as_dict(self) -> dict[str, object]:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "linear_slope": self.linear_fit_coeffs[0],
            "linear_intercept": self.linear_fit_coeffs[1],
            "outliers_removed": self.outliers_removed,
            "avg_rate": self.avg_rate,
        }


def compute_statistics(frequency: np.ndarray, time: Optional[np.ndarray]) -> SeriesStatistics:
    """Summarise *frequency* and fit a linear trend against *time*.

    The standard deviation uses the sample convention (``ddof=1``).

    Raises
    ------
    ConfigurationError
        If *time* is ``None`` (no rate and no timestamps were supplied).
    """

    if time is None:
        raise ConfigurationError("Either 'time' or 'rate' must be present to fit a trend")

    frequency = np.asarray(frequency, dtype=float)
    time = np.asarray(time, dtype=float)[: frequency.size]
    trend = fit_linear_trend(time, frequency)
    std = float(np.std(frequency, ddof=1)) if frequency.size > 1 else 0.0

    return SeriesStatistics(
        count=int(frequency.size),
        min=float(frequency.min()),
        max=float(frequency.max()),
        mean=float(frequency.mean()),
        median=float(np.median(frequency)),
        std=std,
        linear_fit_coeffs=trend.coefficients,
    )
