"""Command line interface for the oadev package."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import load_config
from .data import load_series_csv
from .demo import run_demo
from .diagnostics import Verbosity
from .errors import AllanError
from .pipeline import run_adev
from .plotting import generate_plots
from .reporting import export_results

app = typer.Typer(context_settings={"help_option_names": ["-h", "--help"]})

_LOG_LEVELS = {
    Verbosity.SILENT: logging.WARNING,
    Verbosity.SUMMARY: logging.INFO,
    Verbosity.DETAILED: logging.DEBUG,
}


def _configure_logging(verbosity: Verbosity) -> None:
    logging.basicConfig(level=_LOG_LEVELS[verbosity], format="%(name)s: %(message)s")


@app.command()
def calc(
    input_path: Path = typer.Option(..., "--in", help="Input CSV with phase and/or frequency data."),
    report_dir: Path = typer.Option(..., "--report", help="Output directory for reports."),
    rate: Optional[float] = typer.Option(
        None, "--rate", help="Sample rate in Hz. Omit (or 0) to use the 'time' column."
    ),
    tau: Optional[List[float]] = typer.Option(
        None, "--tau", help="Averaging time in seconds; repeat for several values."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", exists=True, readable=True, help="JSON analysis configuration."
    ),
    override: Optional[List[str]] = typer.Option(
        None, "--set", help="Configuration override (key=value), may be repeated."
    ),
    verbosity: Optional[str] = typer.Option(
        None, "--verbosity", "-v", help="silent, summary or detailed."
    ),
    plot: bool = typer.Option(True, "--plot/--no-plot", help="Render data and deviation plots."),
) -> None:
    """Compute the overlapping Allan deviation and write a report."""

    overrides = list(override or [])
    if verbosity is not None:
        overrides.append(f"verbosity={verbosity}")
    try:
        cfg = load_config(config_path, overrides or None)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _configure_logging(cfg.verbosity_level)

    try:
        series = load_series_csv(input_path, rate=rate)
        result = run_adev(series, tau or None, config=cfg)
    except AllanError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=1) from exc

    figure_path = None
    if plot:
        try:
            figure_path = generate_plots(result, report_dir)
        except RuntimeError as exc:
            typer.echo(f"[warning] plotting skipped: {exc}")

    export_results(result, report_dir, figure_path=figure_path, input_path=input_path)

    typer.echo(
        f"Minimum overlapping ADEV {result.best.deviation:.6g} at tau = {result.best.tau:g} s"
    )
    typer.echo(f"Report written to {report_dir}")


@app.command()
def demo(
    out_dir: Path = typer.Option(Path("demo_output"), "--out", help="Target directory for demo report."),
) -> None:
    """Generate a synthetic white-noise dataset and its report."""

    _configure_logging(Verbosity.SUMMARY)
    run_demo(out_dir)
    typer.echo(f"Demo dataset and report written to {out_dir}")


def run() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
