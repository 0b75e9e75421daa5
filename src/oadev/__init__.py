"""Overlapping Allan deviation toolkit."""

from importlib.metadata import PackageNotFoundError, version

from .data import SeriesInput, load_series_csv
from .errors import (
    AllanError,
    ConfigurationError,
    EmptyResultError,
    NoValidTauError,
    ValidationError,
)
from .pipeline import AllanResult, run_adev

try:  # pragma: no cover - fallback when package metadata missing
    __version__ = version("oadev")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "AllanError",
    "AllanResult",
    "ConfigurationError",
    "EmptyResultError",
    "NoValidTauError",
    "SeriesInput",
    "ValidationError",
    "load_series_csv",
    "run_adev",
]
