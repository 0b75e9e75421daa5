"""Overlapping Allan deviation estimators for uniform and timestamped data."""
from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

import numpy as np

from .data import Sampling, UniformSampling
from .diagnostics import DiagnosticSink
from .tau import TauPlan


@dataclass(frozen=True)
class TauEstimate:
    tau: float
    deviation: float
    error: float
    m: int
    count: int


class OverlapEstimator(Protocol):
    """Computes one estimate per planned tau; ``None`` marks a dropped tau."""

    def estimate(self, plan: TauPlan) -> List[Optional[TauEstimate]]:
        ...


class _PerTauEstimator(ABC):
    def __init__(self, *, workers: int = 1, sink: Optional[DiagnosticSink] = None):
        self.workers = max(1, int(workers))
        self.sink = sink or DiagnosticSink("silent")

    def estimate(self, plan: TauPlan) -> List[Optional[TauEstimate]]:
        taus = [float(value) for value in plan.tau]
        groups = [int(value) for value in plan.m]
        work: Callable[[float, int], Optional[TauEstimate]] = self._estimate_one
        if self.workers <= 1 or len(taus) <= 1:
            return [work(tau, m) for tau, m in zip(taus, groups)]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(work, taus, groups))

    @abstractmethod
    def _estimate_one(self, tau: float, m: int) -> Optional[TauEstimate]:
        ...


class RegularRateEstimator(_PerTauEstimator):
    """
    Phase-based estimator for uniformly sampled data.

    The phase record is zero-padded to a multiple of ``m`` and grouped into
    blocks of ``m`` samples; the second difference across blocks yields
    ``x[i+2m] - 2 x[i+m] + x[i]`` in order, of which the first ``N - 2m``
    values are valid.
    """

    def __init__(self, phase: np.ndarray, **kwargs):
        super().__init__(**kwargs)
        self.phase = np.asarray(phase, dtype=float)

    def _estimate_one(self, tau: float, m: int) -> Optional[TauEstimate]:
        n = self.phase.size
        valid = n - 2 * m
        if valid <= 0:
            self.sink.detail("tau=%g dropped: %d phase samples cannot span 2 x %d", tau, n, m)
            return None

        blocks = -(-n // m)
        padded = np.zeros(blocks * m, dtype=float)
        padded[:n] = self.phase
        second = np.diff(padded.reshape(blocks, m), n=2, axis=0).reshape(-1)[:valid]

        deviation = float(np.sqrt(np.sum(second**2) / (2 * valid * tau**2)))
        error = deviation / float(np.sqrt(valid))
        self.sink.detail("tau=%g m=%d adev=%g", tau, m, deviation)
        return TauEstimate(tau=tau, deviation=deviation, error=error, m=m, count=valid)


class IrregularTimestampEstimator(_PerTauEstimator):
    """
    Frequency-based estimator for irregularly timestamped data.

    For every start offset ``j < m`` the series is re-zeroed and binned into
    intervals ``(tau*(k-1), tau*k]``; each bin contributes its mean frequency,
    or 0 when empty. Successive bin means are differenced and the offsets
    interleaved, so consecutive values come from neighbouring offsets.
    """

    def __init__(self, frequency: np.ndarray, time: np.ndarray, avg_gap: float, **kwargs):
        super().__init__(**kwargs)
        self.frequency = np.asarray(frequency, dtype=float)
        self.time = np.asarray(time, dtype=float)
        self.avg_gap = float(avg_gap)

    def _estimate_one(self, tau: float, m: int) -> Optional[TauEstimate]:
        total = self.frequency.size
        required = total - 2 * m + 1
        if required <= 0:
            self.sink.detail("tau=%g dropped due to timestamp irregularities", tau)
            return None

        rows = [
            self._bin_means(self.frequency[j:], self.time[j:], tau)
            for j in range(min(m, total))
        ]
        width = max(row.size for row in rows)
        grid = np.zeros((len(rows), width), dtype=float)
        for idx, row in enumerate(rows):
            grid[idx, : row.size] = row
        diffs = np.diff(grid, axis=1).ravel(order="F")

        if diffs.size < required:
            self.sink.detail("tau=%g dropped due to timestamp irregularities", tau)
            return None

        deviation = float(np.sqrt(np.sum(diffs[:required] ** 2) / (2 * required)))
        error = deviation / float(np.sqrt(total + 1))
        self.sink.detail("tau=%g m=%d adev=%g", tau, m, deviation)
        return TauEstimate(tau=tau, deviation=deviation, error=error, m=m, count=required)

    def _bin_means(self, frequency: np.ndarray, time: np.ndarray, tau: float) -> np.ndarray:
        time = time - time[0] + self.avg_gap
        bins = _bin_count(float(time[-1]), tau)
        edges = tau * np.arange(bins + 1, dtype=float)
        index = np.searchsorted(edges, time, side="left") - 1
        inside = (index >= 0) & (index < bins)
        sums = np.bincount(index[inside], weights=frequency[inside], minlength=bins)
        counts = np.bincount(index[inside], minlength=bins)
        means = np.zeros(bins, dtype=float)
        np.divide(sums, counts, out=means, where=counts > 0)
        return means


def _bin_count(t_end: float, tau: float) -> int:
    """Smallest ``k`` with ``tau * k > t_end``."""

    count = max(int(np.floor(t_end / tau)), 0)
    while tau * count <= t_end:
        count += 1
    while count > 1 and tau * (count - 1) > t_end:
        count -= 1
    return count


def select_estimator(
    sampling: Sampling,
    *,
    phase: Optional[np.ndarray],
    frequency: np.ndarray,
    plan: TauPlan,
    workers: int = 1,
    sink: Optional[DiagnosticSink] = None,
) -> OverlapEstimator:
    """Pick the estimator for the *sampling* variant."""

    if isinstance(sampling, UniformSampling):
        if phase is None:
            raise ValueError("Uniform-rate estimation requires a phase series")
        return RegularRateEstimator(phase, workers=workers, sink=sink)
    if plan.time is None or plan.avg_gap is None:
        raise ValueError("Timestamp estimation requires a timestamp tau plan")
    return IrregularTimestampEstimator(
        frequency, plan.time, plan.avg_gap, workers=workers, sink=sink
    )
