"""Input records, sampling descriptors and CSV loading."""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from .errors import ConfigurationError, ValidationError

ArrayInput = Union[Sequence[float], np.ndarray]

PHASE_COLUMNS = ("phase",)
FREQUENCY_COLUMNS = ("frequency", "freq")
TIME_COLUMNS = ("time", "timestamp")


@dataclass(frozen=True)
class SeriesInput:
    """Phase and/or fractional-frequency samples with their sampling metadata."""

    phase: Optional[np.ndarray] = None
    frequency: Optional[np.ndarray] = None
    rate: Optional[float] = None
    timestamps: Optional[np.ndarray] = None
    name: str = ""

    @property
    def has_rate(self) -> bool:
        return self.rate is not None and self.rate != 0

    def sampling(self) -> "Sampling":
        """Return the sampling descriptor; a nonzero rate wins over timestamps."""

        if self.has_rate:
            return UniformSampling(rate=float(self.rate))  # type: ignore[arg-type]
        if self.timestamps is not None:
            return TimestampSampling(timestamps=np.asarray(self.timestamps, dtype=float))
        raise ConfigurationError("Either 'time' or 'rate' must be present to build a time axis")


@dataclass(frozen=True)
class UniformSampling:
    rate: float

    @property
    def step(self) -> float:
        return 1.0 / self.rate

    def time_axis(self, count: int) -> np.ndarray:
        return np.arange(1, count + 1, dtype=float) / self.rate

    def reindex(self, time: np.ndarray, keep: np.ndarray) -> np.ndarray:
        # A uniform axis is regenerated for the reduced sample count.
        return self.time_axis(int(np.count_nonzero(keep)))


@dataclass(frozen=True)
class TimestampSampling:
    timestamps: np.ndarray

    def time_axis(self, count: int) -> np.ndarray:
        return np.asarray(self.timestamps[:count], dtype=float)

    def reindex(self, time: np.ndarray, keep: np.ndarray) -> np.ndarray:
        return time[keep]


Sampling = Union[UniformSampling, TimestampSampling]


def validate_series(series: SeriesInput) -> SeriesInput:
    """Check *series* for completeness and finite values.

    Returns a copy whose arrays are one-dimensional float vectors.

    Raises
    ------
    ValidationError
        When phase and frequency are both missing, when neither a rate nor
        timestamps are given, when timestamp and sample counts disagree, when
        timestamps that define the time axis are not strictly increasing, or
        when any present field holds NaN/Inf.
    """

    if series.phase is None and series.frequency is None:
        raise ValidationError("missing: either 'phase' or 'frequency' must be present")
    if not series.has_rate and series.timestamps is None:
        raise ValidationError("missing: either 'rate' or 'timestamps' must be present")

    phase = _as_vector("phase", series.phase)
    frequency = _as_vector("frequency", series.frequency)
    timestamps = _as_vector("timestamps", series.timestamps)

    rate = series.rate
    if rate is not None:
        if not np.isfinite(rate):
            raise ValidationError("invalid value: rate must be finite")
        if rate < 0:
            raise ValidationError("invalid value: rate must not be negative")
        rate = float(rate)

    if timestamps is not None:
        reference_name, reference = (
            ("phase", phase) if phase is not None else ("frequency", frequency)
        )
        assert reference is not None
        if timestamps.size != reference.size:
            raise ValidationError(
                f"length mismatch: {timestamps.size} timestamps for {reference.size} {reference_name} samples"
            )
        if not series.has_rate and np.any(np.diff(timestamps) <= 0):
            raise ValidationError("invalid value: timestamps must be strictly increasing")

    return replace(series, phase=phase, frequency=frequency, timestamps=timestamps, rate=rate)


def _as_vector(name: str, values: Optional[ArrayInput]) -> Optional[np.ndarray]:
    if values is None:
        return None
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"invalid value: '{name}' must be numeric") from exc
    if arr.ndim > 1:
        if sum(dim > 1 for dim in arr.shape) > 1:
            raise ValidationError(f"invalid value: '{name}' must be a single channel")
        arr = arr.reshape(-1)
    elif arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.size < 2:
        raise ValidationError(f"invalid value: '{name}' needs at least 2 samples")
    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"invalid value: '{name}' contains NaN/Inf")
    return arr.copy()


def load_series_csv(path: str | Path, *, rate: float | None = None, name: str = "") -> SeriesInput:
    """Load a series from *path*.

    Parameters
    ----------
    path:
        CSV file with a `phase` and/or `frequency` (or `freq`) column and an
        optional `time` (or `timestamp`) column.
    rate:
        Sample rate in Hz; ``None`` or ``0`` selects timestamp-based analysis.

    Returns
    -------
    SeriesInput
        Unvalidated record; :func:`validate_series` runs inside the pipeline.
    """

    path = Path(path)
    if not path.exists():  # pragma: no cover - defensive
        raise FileNotFoundError(path)

    df = pd.read_csv(path, comment="#")
    df.columns = [str(col).strip().lower() for col in df.columns]

    phase_col = _first_present(df, PHASE_COLUMNS)
    freq_col = _first_present(df, FREQUENCY_COLUMNS)
    time_col = _first_present(df, TIME_COLUMNS)
    if phase_col is None and freq_col is None:
        raise ValidationError(
            f"missing: CSV needs one of {sorted(PHASE_COLUMNS + FREQUENCY_COLUMNS)} columns"
        )

    return SeriesInput(
        phase=df[phase_col].to_numpy(dtype=float) if phase_col else None,
        frequency=df[freq_col].to_numpy(dtype=float) if freq_col else None,
        rate=rate,
        timestamps=df[time_col].to_numpy(dtype=float) if time_col else None,
        name=name or path.stem,
    )


def _first_present(df: pd.DataFrame, candidates: Sequence[str]) -> Optional[str]:
    for column in candidates:
        if column in df.columns:
            return column
    return None
