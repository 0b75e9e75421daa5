"""Plotting helpers for Allan deviation outputs."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from .pipeline import AllanResult


def generate_plots(result: AllanResult, output_dir: Path) -> Path:
    plt = _require_matplotlib()
    output_dir.mkdir(parents=True, exist_ok=True)
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    _plot_frequency(result, axes[0])
    _plot_deviation(result, axes[1])

    fig.tight_layout()
    out_path = output_dir / "adev.png"
    fig.savefig(out_path, dpi=200)
    plt.close(fig)
    return out_path


def _plot_frequency(result: AllanResult, ax) -> None:
    stats = result.statistics
    time = result.time
    centered = result.frequency - stats.median
    limit = result.outliers.limit

    ax.plot(time, centered, marker=".", linestyle="none", color="blue", label="data (centered on median)")
    ax.axhline(0.0, color="black", linestyle=":", linewidth=0.8)
    if limit > 0:
        ax.axhline(limit, color="red", label=f"{result.outliers.threshold:g}x MAD outliers")
        ax.axhline(-limit, color="red")

    span = np.array([time[0], time[-1]], dtype=float)
    trend = np.polyval(stats.linear_fit_coeffs, span) - stats.median
    ax.plot(span, trend, color="green", label=f"Linear fit ({stats.linear_fit_coeffs[0]:g})")

    title = f"Data: {result.name}" if result.name else "Data"
    ax.set_title(title)
    ax.set_xlabel("Time [sec]")
    ax.set_ylabel("freq - median(freq)")
    ax.set_xlim(span[0], span[1])
    ax.legend(loc="best")


def _plot_deviation(result: AllanResult, ax) -> None:
    ax.errorbar(result.tau, result.deviation, yerr=result.error_bar, fmt=".-", color="blue")
    ax.set_xscale("log")
    ax.set_yscale("log")
    ax.grid(True, which="both", alpha=0.3)
    ax.set_title("Overlapping Allan Deviation")
    ax.set_xlabel("tau [sec]")
    ax.set_ylabel("Overlapping sigma_y(tau)")


def _require_matplotlib() -> Any:
    home_cache = Path.home() / ".cache" / "fontconfig"
    try:
        home_cache.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError("matplotlib cannot write font cache in this environment") from exc

    try:
        import matplotlib
        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("matplotlib is required for plotting; install oadev[plot]") from exc
    except Exception as exc:  # pragma: no cover - environment issues
        raise RuntimeError(f"matplotlib initialisation failed: {exc}") from exc
    return plt
