"""Least-squares trend fitting for frequency series."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class TrendFit:
    """Summary of a first-order least-squares fit of frequency against time."""

    slope: float
    intercept: float
    residuals: np.ndarray

    @property
    def coefficients(self) -> tuple[float, float]:
        """Coefficients in ``numpy.polyval`` order (highest power first)."""
        return (self.slope, self.intercept)

    def evaluate(self, time: np.ndarray) -> np.ndarray:
        return self.intercept + self.slope * np.asarray(time, dtype=float)


def build_design_matrix(time: np.ndarray) -> np.ndarray:
    """Return design matrix with an intercept column."""

    if time.ndim != 1:
        raise ValueError("time must be 1-D array")
    return np.column_stack([np.ones_like(time, dtype=float), time.astype(float)])


def fit_linear_trend(time: np.ndarray, values: np.ndarray) -> TrendFit:
    """Ordinary least squares fit of *values* against *time*."""

    time = np.asarray(time, dtype=float)
    values = np.asarray(values, dtype=float)
    if time.size != values.size:
        raise ValueError(f"time ({time.size}) and values ({values.size}) differ in length")

    X = build_design_matrix(time)
    beta, *_ = np.linalg.lstsq(X, values, rcond=None)
    residuals = values - X @ beta
    return TrendFit(slope=float(beta[1]), intercept=float(beta[0]), residuals=residuals)
