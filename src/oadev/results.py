"""Assembly of per-tau estimates into the reported result set."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .errors import EmptyResultError
from .estimators import TauEstimate


@dataclass(frozen=True)
class ResultSet:
    tau: np.ndarray
    deviation: np.ndarray
    error_bar: np.ndarray
    estimates: tuple[TauEstimate, ...]

    @property
    def best(self) -> TauEstimate:
        """Estimate with the smallest deviation (first one on ties)."""
        return self.estimates[int(np.argmin(self.deviation))]

    def __len__(self) -> int:
        return len(self.estimates)


def aggregate_results(estimates: Iterable[Optional[TauEstimate]]) -> ResultSet:
    """Collect surviving estimates in ascending tau order.

    Raises
    ------
    EmptyResultError
        When every estimate was dropped.
    """

    kept = sorted((item for item in estimates if item is not None), key=lambda item: item.tau)
    if not kept:
        raise EmptyResultError(
            "No Allan deviation values calculated. Check that tau >= 1/rate and "
            "that tau values are divisible by 1/rate"
        )
    return ResultSet(
        tau=np.array([item.tau for item in kept], dtype=float),
        deviation=np.array([item.deviation for item in kept], dtype=float),
        error_bar=np.array([item.error for item in kept], dtype=float),
        estimates=tuple(kept),
    )
