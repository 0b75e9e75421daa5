"""Report writers for Allan deviation results."""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from .data import UniformSampling
from .pipeline import AllanResult


def export_results(
    result: AllanResult,
    output_dir: Path,
    *,
    figure_path: Path | None = None,
    input_path: Path | None = None,
) -> None:
    """Persist the deviation table, statistics and markdown report to *output_dir*."""

    output_dir.mkdir(parents=True, exist_ok=True)
    _write_adev_csv(result, output_dir)
    _write_statistics_csv(result, output_dir)
    _write_report_md(result, output_dir, figure_path=figure_path, input_path=input_path)


def _write_adev_csv(result: AllanResult, output_dir: Path) -> None:
    result.to_frame().to_csv(output_dir / "adev.csv", index=False)


def _write_statistics_csv(result: AllanResult, output_dir: Path) -> None:
    rows = [
        {"statistic": key, "value": value}
        for key, value in result.statistics.as_dict().items()
        if value is not None
    ]
    pd.DataFrame(rows).to_csv(output_dir / "statistics.csv", index=False)


def _describe_sampling(result: AllanResult) -> str:
    if isinstance(result.sampling, UniformSampling):
        return f"{result.sampling.rate:g} Hz"
    avg_rate = result.statistics.avg_rate
    return f"timestamps (average {avg_rate:.6g} Hz)" if avg_rate else "timestamps"


def _write_report_md(
    result: AllanResult,
    output_dir: Path,
    *,
    figure_path: Path | None,
    input_path: Path | None,
) -> None:
    stats = result.statistics
    lines: list[str] = []
    title = f"# Overlapping Allan Deviation: {result.name}" if result.name else "# Overlapping Allan Deviation"
    lines.append(title)
    if input_path is not None:
        lines.append(f"*Input file:* `{input_path}`  ")
    lines.append(f"*Sampling:* {_describe_sampling(result)}  ")
    lines.append(f"*Samples:* {stats.count} ({stats.outliers_removed} outliers removed)  ")
    lines.append("")

    lines.append("## Frequency statistics")
    lines.append("| Statistic | Value |")
    lines.append("| --- | ---: |")
    lines.append(f"| Mean | {stats.mean:.6g} |")
    lines.append(f"| Median | {stats.median:.6g} |")
    lines.append(f"| Std | {stats.std:.6g} |")
    lines.append(f"| Min | {stats.min:.6g} |")
    lines.append(f"| Max | {stats.max:.6g} |")
    lines.append(f"| Linear drift | {stats.linear_fit_coeffs[0]:.6g} /s |")
    lines.append("")

    lines.append("## Overlapping ADEV")
    lines.append("| tau [s] | sigma_y(tau) | 1-sigma error |")
    lines.append("| ---: | ---: | ---: |")
    for tau, deviation, error in zip(result.tau, result.deviation, result.error_bar):
        lines.append(f"| {tau:.6g} | {deviation:.6g} | {error:.3g} |")
    lines.append("")
    lines.append(
        f"Minimum overlapping ADEV: {result.best.deviation:.6g} at tau = {result.best.tau:g} s"
    )
    lines.append("")

    if figure_path is not None:
        lines.append(f"![Allan deviation plots]({figure_path.name})")
        lines.append("")

    lines.append("### Notes")
    lines.append(
        "- Error bars are 1-sigma estimates from the sample count; they usually overestimate the"
        " uncertainty of overlapping ADEV."
    )
    lines.append("- Outliers are screened with a 5x median-absolute-deviation criterion around the linear trend.")

    (output_dir / "report.md").write_text("\n".join(lines), encoding="utf-8")
