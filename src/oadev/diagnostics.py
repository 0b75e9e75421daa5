"""Verbosity-gated diagnostic messages routed through :mod:`logging`."""
from __future__ import annotations

import enum
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Verbosity(enum.IntEnum):
    SILENT = 0
    SUMMARY = 1
    DETAILED = 2

    @classmethod
    def parse(cls, value: "Verbosity | str | int") -> "Verbosity":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        key = str(value).strip().upper()
        if key.isdigit():
            return cls(int(key))
        try:
            return cls[key]
        except KeyError as exc:
            names = ", ".join(member.name.lower() for member in cls)
            raise ValueError(f"Unknown verbosity '{value}'. Expected one of {names}") from exc


class DiagnosticSink:
    """
    Narrow notification interface used by the analysis core.

    Summary messages go to ``logger.info`` and detailed messages to
    ``logger.debug``; anything above the configured verbosity is dropped
    before it reaches the logger.
    """

    def __init__(
        self,
        verbosity: Verbosity | str | int = Verbosity.SUMMARY,
        log: Optional[logging.Logger] = None,
    ):
        self.verbosity = Verbosity.parse(verbosity)
        self._log = log or logger

    def summary(self, message: str, *args: Any) -> None:
        if self.verbosity >= Verbosity.SUMMARY:
            self._log.info(message, *args)

    def detail(self, message: str, *args: Any) -> None:
        if self.verbosity >= Verbosity.DETAILED:
            self._log.debug(message, *args)

    def warning(self, message: str, *args: Any) -> None:
        if self.verbosity >= Verbosity.SUMMARY:
            self._log.warning(message, *args)
