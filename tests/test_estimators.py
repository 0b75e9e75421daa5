from __future__ import annotations

import numpy as np
import pytest

from oadev.convert import phase_from_frequency
from oadev.data import TimestampSampling, UniformSampling
from oadev.estimators import (
    _PerTauEstimator,
    IrregularTimestampEstimator,
    RegularRateEstimator,
    TauEstimate,
    select_estimator,
)
from oadev.errors import EmptyResultError
from oadev.results import aggregate_results
from oadev.tau import TauPlan, round_half_up, select_timestamp_taus, select_uniform_taus


def _plan(tau: list[float], m: list[int]) -> TauPlan:
    return TauPlan(tau=np.array(tau, dtype=float), m=np.array(m), lower=0.0, upper=np.inf)


def test_regular_estimator_reproduces_nbs14(nbs14: np.ndarray, nbs14_oadev: dict[float, float]) -> None:
    phase = phase_from_frequency(nbs14, 1.0)
    plan = select_uniform_taus([1, 2], rate=1.0, count=nbs14.size)
    estimates = RegularRateEstimator(phase).estimate(plan)

    assert [item.tau for item in estimates] == [1.0, 2.0]
    assert estimates[0].deviation == pytest.approx(nbs14_oadev[1.0], rel=1e-6)
    assert estimates[1].deviation == pytest.approx(nbs14_oadev[2.0], rel=1e-6)
    assert estimates[0].count == 8
    assert estimates[0].error == pytest.approx(estimates[0].deviation / np.sqrt(8))
    assert estimates[1].error == pytest.approx(estimates[1].deviation / np.sqrt(6))


def test_regular_estimator_matches_direct_second_difference() -> None:
    rng = np.random.default_rng(11)
    phase = np.cumsum(rng.normal(size=301)) * 0.25
    rate, m = 4.0, 7
    tau = m / rate
    (estimate,) = RegularRateEstimator(phase).estimate(_plan([tau], [m]))

    second = phase[2 * m :] - 2 * phase[m:-m] + phase[: -2 * m]
    expected = np.sqrt(np.sum(second**2) / (2 * second.size * tau**2))
    assert estimate.deviation == pytest.approx(expected, rel=1e-12)


def test_regular_estimator_drops_exhausted_tau() -> None:
    phase = np.arange(5, dtype=float) ** 2
    estimates = RegularRateEstimator(phase).estimate(_plan([2.0, 3.0], [2, 3]))
    assert estimates[1] is None
    assert estimates[0] is not None
    assert estimates[0].count == 1
    assert estimates[0].deviation == pytest.approx(np.sqrt(8.0**2 / (2 * 4.0)))


def test_regular_estimator_zero_series_gives_zero() -> None:
    plan = select_uniform_taus(None, rate=1.0, count=100)
    estimates = RegularRateEstimator(phase_from_frequency(np.zeros(100), 1.0)).estimate(plan)
    assert len(estimates) == 6
    for item in estimates:
        assert item.deviation == 0.0
        assert item.error == 0.0


def test_irregular_estimator_with_uniform_timestamps_reproduces_nbs14(
    nbs14: np.ndarray, nbs14_oadev: dict[float, float]
) -> None:
    timestamps = np.arange(1, nbs14.size + 1, dtype=float)
    plan = select_timestamp_taus([1, 2], timestamps)
    estimator = IrregularTimestampEstimator(nbs14, plan.time, plan.avg_gap)
    estimates = estimator.estimate(plan)

    assert estimates[0].deviation == pytest.approx(nbs14_oadev[1.0], rel=1e-6)
    assert estimates[1].deviation == pytest.approx(nbs14_oadev[2.0], rel=1e-6)
    assert estimates[0].error == pytest.approx(estimates[0].deviation / np.sqrt(10))
    assert estimates[1].count == 6


def test_irregular_estimator_drops_degenerate_tau() -> None:
    frequency = np.array([1.0, 2.0, 1.5, 3.0, 2.5])
    time = np.array([1.0, 2.0, 3.5, 4.0, 5.0])
    estimator = IrregularTimestampEstimator(frequency, time, avg_gap=1.0)
    estimates = estimator.estimate(_plan([1.0, 3.0], [1, 3]))
    assert estimates[0] is not None
    assert estimates[1] is None


def _looped_irregular_adev(
    frequency: np.ndarray, time: np.ndarray, tau: float, m: int, avg_gap: float
) -> float:
    rows = []
    for j in range(m):
        f = frequency[j:]
        t = time[j:] - time[j] + avg_gap
        means = []
        k = 0
        while tau * k <= t[-1]:
            k += 1
            members = f[(tau * (k - 1) < t) & (t <= tau * k)]
            means.append(members.mean() if members.size else 0.0)
        rows.append(means)

    width = max(len(row) for row in rows)
    grid = [row + [0.0] * (width - len(row)) for row in rows]
    diffs = [grid[r][c + 1] - grid[r][c] for c in range(width - 1) for r in range(len(grid))]
    required = frequency.size - 2 * m + 1
    return float(np.sqrt(np.sum(np.square(diffs[:required])) / (2 * required)))


def test_irregular_estimator_counts_empty_bins_as_zero() -> None:
    rng = np.random.default_rng(21)
    frequency = rng.normal(loc=1.0, scale=0.3, size=200)
    gaps = np.ones(frequency.size - 1)
    gaps[[30, 80, 150]] = 4.0
    time = np.concatenate([[1.0], 1.0 + np.cumsum(gaps)])
    avg_gap = float(np.mean(np.diff(time)))
    taus = [2.0, 3.0, 5.0, 8.0, 16.0, 32.0]
    plan = _plan(taus, [int(value) for value in round_half_up(np.array(taus) / avg_gap)])

    estimator = IrregularTimestampEstimator(frequency, time, avg_gap)
    estimates = estimator.estimate(plan)

    # Bins of 2 s and 3 s fall inside the 4 s gaps and stay empty.
    assert 0.0 in estimator._bin_means(frequency, time, 2.0)
    for item, m in zip(estimates, plan.m):
        expected = _looped_irregular_adev(frequency, time, item.tau, int(m), avg_gap)
        assert item.deviation == pytest.approx(expected, rel=1e-12)


def test_workers_do_not_change_results() -> None:
    rng = np.random.default_rng(5)
    frequency = rng.normal(size=400)
    timestamps = np.cumsum(rng.uniform(0.5, 1.5, size=400))
    plan = select_timestamp_taus([2, 4, 8, 16, 32], timestamps)
    serial = IrregularTimestampEstimator(frequency, plan.time, plan.avg_gap).estimate(plan)
    pooled = IrregularTimestampEstimator(frequency, plan.time, plan.avg_gap, workers=4).estimate(plan)
    assert serial == pooled


def test_per_tau_base_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        _PerTauEstimator()


def test_select_estimator_dispatches_on_sampling(nbs14: np.ndarray) -> None:
    phase = phase_from_frequency(nbs14, 1.0)
    uniform_plan = select_uniform_taus([1], rate=1.0, count=nbs14.size)
    estimator = select_estimator(UniformSampling(1.0), phase=phase, frequency=nbs14, plan=uniform_plan)
    assert isinstance(estimator, RegularRateEstimator)

    timestamps = np.arange(1, 10, dtype=float)
    ts_plan = select_timestamp_taus([1], timestamps)
    estimator = select_estimator(
        TimestampSampling(timestamps), phase=None, frequency=nbs14, plan=ts_plan
    )
    assert isinstance(estimator, IrregularTimestampEstimator)


def test_aggregate_sorts_and_reports_best() -> None:
    results = aggregate_results(
        [
            TauEstimate(tau=4.0, deviation=0.5, error=0.1, m=4, count=10),
            None,
            TauEstimate(tau=1.0, deviation=1.0, error=0.2, m=1, count=16),
            TauEstimate(tau=2.0, deviation=0.7, error=0.1, m=2, count=14),
        ]
    )
    assert results.tau.tolist() == [1.0, 2.0, 4.0]
    assert results.deviation.tolist() == [1.0, 0.7, 0.5]
    assert results.best.tau == 4.0
    assert len(results) == 3


def test_aggregate_without_survivors_raises() -> None:
    with pytest.raises(EmptyResultError):
        aggregate_results([None, None])
