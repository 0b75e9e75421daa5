"""Selection of feasible averaging times."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from .diagnostics import DiagnosticSink
from .errors import NoValidTauError

DEFAULT_TAU_EXPONENTS = range(-10, 11)


@dataclass(frozen=True)
class TauPlan:
    """Feasible averaging times with their grouping sizes."""

    tau: np.ndarray
    m: np.ndarray
    lower: float
    upper: float
    avg_gap: Optional[float] = None
    max_gap: Optional[float] = None
    time: Optional[np.ndarray] = field(default=None, repr=False)

    def __len__(self) -> int:
        return int(self.tau.size)


def default_taus() -> np.ndarray:
    return np.array([2.0**k for k in DEFAULT_TAU_EXPONENTS])


def round_half_up(value: np.ndarray | float) -> np.ndarray:
    return np.floor(np.asarray(value, dtype=float) + 0.5)


def sort_taus(tau: Optional[Sequence[float]]) -> np.ndarray:
    values = default_taus() if tau is None else np.asarray(tau, dtype=float).reshape(-1)
    return np.unique(values[np.isfinite(values)])


def select_uniform_taus(
    tau: Optional[Sequence[float]],
    rate: float,
    count: int,
    *,
    sink: Optional[DiagnosticSink] = None,
) -> TauPlan:
    """Restrict *tau* to ``[1/rate, round(count/rate/2)]`` and integral groupings.

    A tau whose grouping ``rate * tau`` is not an exact integer is dropped,
    never rounded. An empty plan is valid here.
    """

    candidates = sort_taus(tau)
    step = 1.0 / rate
    halftime = float(round_half_up(step * count / 2))
    in_range = candidates[(candidates >= step) & (candidates <= halftime)]
    m = rate * in_range
    integral = m == np.round(m)
    if sink is not None:
        sink.detail("allowable tau range: %g to %g sec. (1/rate to total_time/2)", step, halftime)
        for value in in_range[~integral]:
            sink.detail("tau=%g dropped: %g samples per group is not an integer", value, rate * value)

    return TauPlan(
        tau=in_range[integral],
        m=np.round(m[integral]).astype(np.int64),
        lower=step,
        upper=halftime,
    )


def select_timestamp_taus(
    tau: Optional[Sequence[float]],
    timestamps: np.ndarray,
    *,
    sink: Optional[DiagnosticSink] = None,
) -> TauPlan:
    """Restrict *tau* to ``[max_gap, floor(t_end/2)]`` of the re-zeroed time axis.

    Raises
    ------
    NoValidTauError
        When no candidate survives.
    """

    candidates = sort_taus(tau)
    timestamps = np.asarray(timestamps, dtype=float)
    gaps = np.diff(timestamps)
    avg_gap = float(gaps.mean())
    time = timestamps - timestamps[0] + avg_gap
    max_gap = float(gaps.max())
    halftime = float(np.floor(time[-1] / 2))

    if sink is not None:
        sink.summary("End of timestamp data: %g sec", time[-1])
        sink.summary("Average rate: %g Hz (%g sec/measurement)", 1.0 / avg_gap, avg_gap)
        if not np.isclose(max_gap, avg_gap):
            sink.summary(
                "Max. gap in time record: %g sec at position %d", max_gap, int(np.argmax(gaps))
            )
        if max_gap > 5 * avg_gap:
            sink.warning("Max. gap in time record is suspiciously large (>5x the average interval)")

    selected = candidates[(candidates >= max_gap) & (candidates <= halftime)]
    if selected.size == 0:
        raise NoValidTauError(max_gap, halftime)

    return TauPlan(
        tau=selected,
        m=round_half_up(selected / avg_gap).astype(np.int64),
        lower=max_gap,
        upper=halftime,
        avg_gap=avg_gap,
        max_gap=max_gap,
        time=time,
    )
