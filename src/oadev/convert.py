"""Phase / fractional-frequency interconversion."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .data import Sampling, SeriesInput, UniformSampling


@dataclass(frozen=True)
class PreparedSeries:
    """Frequency series with its aligned time axis."""

    frequency: np.ndarray
    time: np.ndarray
    sampling: Sampling
    phase: Optional[np.ndarray]
    frequency_derived: bool


def frequency_from_phase(
    phase: np.ndarray,
    *,
    rate: float | None = None,
    timestamps: np.ndarray | None = None,
) -> np.ndarray:
    """Differentiate phase (seconds) into fractional frequency.

    Uses the rate when it is known and nonzero, otherwise the timestamp
    spacing. The result is one sample shorter than *phase*.
    """

    phase = np.asarray(phase, dtype=float)
    if rate:
        return np.diff(phase) * rate
    if timestamps is None:
        raise ValueError("frequency_from_phase requires a nonzero rate or timestamps")
    return np.diff(phase) / np.diff(np.asarray(timestamps, dtype=float))


def phase_from_frequency(frequency: np.ndarray, rate: float, *, mean: float | None = None) -> np.ndarray:
    """Integrate mean-removed frequency into phase, starting at zero.

    The result is one sample longer than *frequency*. *mean* defaults to the
    mean of *frequency*.
    """

    frequency = np.asarray(frequency, dtype=float)
    offset = float(frequency.mean()) if mean is None else mean
    phase = np.zeros(frequency.size + 1, dtype=float)
    phase[1:] = np.cumsum(frequency - offset) / rate
    return phase


def prepare_series(series: SeriesInput) -> PreparedSeries:
    """Produce the frequency series both estimators need.

    *series* must already have passed :func:`oadev.data.validate_series`.
    """

    sampling = series.sampling()
    rate = sampling.rate if isinstance(sampling, UniformSampling) else None

    if series.frequency is None:
        assert series.phase is not None
        frequency = frequency_from_phase(series.phase, rate=rate, timestamps=series.timestamps)
        derived = True
    else:
        frequency = np.asarray(series.frequency, dtype=float).reshape(-1)
        derived = False

    return PreparedSeries(
        frequency=frequency,
        time=sampling.time_axis(frequency.size),
        sampling=sampling,
        phase=series.phase,
        frequency_derived=derived,
    )
