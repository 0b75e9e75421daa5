"""Demo dataset utilities."""
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from .config import AnalysisConfig
from .data import load_series_csv
from .pipeline import AllanResult, run_adev
from .plotting import generate_plots
from .reporting import export_results

logger = logging.getLogger(__name__)


def create_demo_dataset(
    samples: int = 4096,
    rate: float = 1.0,
    sigma: float = 1e-11,
    drift: float = 1e-15,
    spikes: int = 3,
) -> pd.DataFrame:
    """White frequency noise with a slow linear drift and a few glitches."""

    rng = np.random.default_rng(42)
    time = np.arange(1, samples + 1, dtype=float) / rate
    frequency = rng.normal(scale=sigma, size=samples) + drift * time
    if spikes:
        idx = rng.choice(samples, size=spikes, replace=False)
        frequency[idx] += 50.0 * sigma
    return pd.DataFrame({"time": time, "frequency": frequency})


def run_demo(out_dir: Path, *, rate: float = 1.0) -> AllanResult:
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / "demo_data.csv"
    create_demo_dataset(rate=rate).to_csv(csv_path, index=False)

    series = load_series_csv(csv_path, rate=rate, name="demo")
    result = run_adev(series, config=AnalysisConfig())
    figure_path = None
    try:
        figure_path = generate_plots(result, out_dir)
    except RuntimeError as exc:
        # emit text report only
        logger.warning("plotting skipped: %s", exc)

    export_results(result, out_dir, figure_path=figure_path, input_path=csv_path)
    return result
