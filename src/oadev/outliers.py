"""Outlier rejection using a 5 x Median Absolute Deviation criterion."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .data import Sampling
from .diagnostics import DiagnosticSink
from .models import TrendFit

MAD_GAUSSIAN_SCALE = 0.6745
DEFAULT_THRESHOLD = 5.0


@dataclass(frozen=True)
class OutlierResult:
    frequency: np.ndarray
    time: np.ndarray
    flagged: int
    removed: int
    mad: float
    threshold: float

    @property
    def limit(self) -> float:
        return self.threshold * self.mad


def robust_mad(values: np.ndarray) -> float:
    """Median absolute deviation scaled to a Gaussian standard deviation."""

    values = np.asarray(values, dtype=float)
    return float(np.median(np.abs(values - np.median(values))) / MAD_GAUSSIAN_SCALE)


def reject_outliers(
    frequency: np.ndarray,
    time: np.ndarray,
    trend: TrendFit,
    sampling: Sampling,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    sink: Optional[DiagnosticSink] = None,
) -> OutlierResult:
    """Drop samples lying more than ``threshold * MAD`` away from *trend*.

    Samples are only removed when at least one lies beyond the limit around
    the median. The upper tail is removed first; the trend is then evaluated
    on the reduced time axis and the lower tail removed. The passes are not
    repeated. New arrays are returned; the inputs are left untouched.

    When the MAD is zero (at least half the samples equal the median) the
    screen is skipped and nothing is removed, since a zero limit would flag
    every sample off the median.
    """

    frequency = np.asarray(frequency, dtype=float)
    time = np.asarray(time, dtype=float)
    original_count = int(frequency.size)
    median = float(np.median(frequency))
    centered = frequency - median
    mad = robust_mad(frequency)
    limit = threshold * mad

    if mad == 0.0:
        if sink is not None:
            sink.detail("Outlier screening skipped: zero median absolute deviation")
        return OutlierResult(frequency.copy(), time.copy(), 0, 0, mad, threshold)

    flagged = int(np.count_nonzero(np.abs(centered) > limit))
    if flagged == 0:
        return OutlierResult(frequency.copy(), time.copy(), 0, 0, mad, threshold)

    if sink is not None:
        sink.summary("OUTLIERS: there appear to be %d outliers in the frequency data", flagged)

    fit_line = trend.evaluate(time) - median
    keep = centered < limit + fit_line
    time = sampling.reindex(time, keep)
    frequency = frequency[keep]
    centered = centered[keep]

    fit_line = trend.evaluate(time) - median
    keep = centered > -limit + fit_line
    time = sampling.reindex(time, keep)
    frequency = frequency[keep]

    removed = original_count - int(frequency.size)
    if sink is not None:
        sink.detail("Removed %d samples outside trend +/- %g x MAD", removed, threshold)
    return OutlierResult(frequency, time, flagged, removed, mad, threshold)
