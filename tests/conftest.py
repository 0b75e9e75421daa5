from __future__ import annotations

import numpy as np
import pytest

# NBS Monograph 140 nine-point fractional frequency test set.
NBS14_FREQUENCY = [892.0, 809.0, 823.0, 798.0, 671.0, 644.0, 883.0, 903.0, 677.0]
NBS14_OADEV = {1.0: 91.22945, 2.0: 85.95287}


@pytest.fixture
def nbs14() -> np.ndarray:
    return np.array(NBS14_FREQUENCY, dtype=float)


@pytest.fixture
def nbs14_oadev() -> dict[float, float]:
    return dict(NBS14_OADEV)
