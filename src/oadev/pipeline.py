"""High level orchestration of the overlapping Allan deviation analysis."""
from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import AnalysisConfig
from .convert import phase_from_frequency, prepare_series
from .data import Sampling, SeriesInput, UniformSampling, validate_series
from .diagnostics import DiagnosticSink
from .estimators import TauEstimate, select_estimator
from .outliers import OutlierResult, reject_outliers, robust_mad
from .results import aggregate_results
from .stats import SeriesStatistics, compute_statistics
from .tau import TauPlan, select_timestamp_taus, select_uniform_taus


@dataclass(frozen=True)
class AllanResult:
    tau: np.ndarray
    deviation: np.ndarray
    error_bar: np.ndarray
    statistics: SeriesStatistics
    best: TauEstimate
    frequency: np.ndarray
    time: np.ndarray
    sampling: Sampling
    outliers: OutlierResult
    original_count: int
    name: str = ""

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"tau": self.tau, "deviation": self.deviation, "error_bar": self.error_bar}
        )


def run_adev(
    series: SeriesInput,
    tau: Optional[Sequence[float]] = None,
    *,
    config: Optional[AnalysisConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> AllanResult:
    """Compute the overlapping Allan deviation of *series*.

    *tau* overrides ``config.tau``; when both are unset the powers of two from
    2**-10 to 2**10 seconds are tried.
    """

    config = config or AnalysisConfig()
    sink = sink or DiagnosticSink(config.verbosity_level)
    candidates = tau if tau is not None else config.tau

    series = validate_series(series)
    prepared = prepare_series(series)
    if prepared.frequency_derived:
        sink.summary(
            "Fractional frequency data generated from phase data (M=%d)", prepared.frequency.size
        )

    statistics = compute_statistics(prepared.frequency, prepared.time)
    sink.detail("Fractional frequency data statistics: %s", statistics.as_dict())

    outliers = _screen_outliers(prepared.frequency, prepared.time, statistics, prepared.sampling, config, sink)
    statistics = replace(statistics, outliers_removed=outliers.removed)
    frequency = outliers.frequency

    sampling = prepared.sampling
    phase: Optional[np.ndarray] = None
    if isinstance(sampling, UniformSampling):
        sink.summary("Regular data (%d freq data points @ %g Hz)", frequency.size, sampling.rate)
        _check_timestamp_rate(series, sampling, sink)
        if series.phase is None:
            phase = phase_from_frequency(frequency, sampling.rate, mean=statistics.mean)
            sink.summary("Phase data generated from fractional frequency data (N=%d)", phase.size)
        else:
            phase = series.phase
        plan: TauPlan = select_uniform_taus(candidates, sampling.rate, frequency.size, sink=sink)
    else:
        sink.summary("Irregular rate data (no fixed sample rate)")
        plan = select_timestamp_taus(candidates, outliers.time, sink=sink)
        assert plan.avg_gap is not None
        statistics = replace(statistics, avg_rate=1.0 / plan.avg_gap)

    estimator = select_estimator(
        sampling,
        phase=phase,
        frequency=frequency,
        plan=plan,
        workers=config.workers,
        sink=sink,
    )
    sink.summary("Calculating overlapping Allan deviation for %d tau values", len(plan))
    started = time.perf_counter()
    estimates = estimator.estimate(plan)
    sink.detail("Elapsed time for calculation: %g seconds", time.perf_counter() - started)

    results = aggregate_results(estimates)
    best = results.best
    sink.summary("Minimum overlapping ADEV value: %g at tau = %g seconds", best.deviation, best.tau)

    return AllanResult(
        tau=results.tau,
        deviation=results.deviation,
        error_bar=results.error_bar,
        statistics=statistics,
        best=best,
        frequency=frequency,
        time=outliers.time,
        sampling=sampling,
        outliers=outliers,
        original_count=statistics.count,
        name=series.name,
    )


def _screen_outliers(
    frequency: np.ndarray,
    time_axis: np.ndarray,
    statistics: SeriesStatistics,
    sampling: Sampling,
    config: AnalysisConfig,
    sink: DiagnosticSink,
) -> OutlierResult:
    if not config.outliers.enabled:
        return OutlierResult(
            frequency=frequency,
            time=time_axis,
            flagged=0,
            removed=0,
            mad=robust_mad(frequency),
            threshold=config.outliers.threshold,
        )
    return reject_outliers(
        frequency,
        time_axis,
        statistics.trend,
        sampling,
        threshold=config.outliers.threshold,
        sink=sink,
    )


def _check_timestamp_rate(series: SeriesInput, sampling: UniformSampling, sink: DiagnosticSink) -> None:
    # Timestamps are informational only when a rate is given.
    if series.timestamps is None:
        return
    avg_gap = float(np.mean(np.diff(series.timestamps)))
    if avg_gap <= 0:
        return
    avg_rate = 1.0 / avg_gap
    if abs(sampling.rate - avg_rate) > 1e-6:
        sink.detail(
            "NOTE: rate (%f Hz) does not match average timestamped sample rate (%f Hz)",
            sampling.rate,
            avg_rate,
        )
