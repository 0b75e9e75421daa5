"""Exception taxonomy for Allan deviation analysis."""
from __future__ import annotations


class AllanError(ValueError):
    """Base class for deterministic analysis failures."""


class ValidationError(AllanError):
    """Input record is malformed, incomplete or contains invalid values."""


class ConfigurationError(AllanError):
    """Neither a sample rate nor timestamps are available for a time axis."""


class NoValidTauError(AllanError):
    """No averaging time survived the timestamp-based range check."""

    def __init__(self, lower: float, upper: float):
        super().__init__(f"No appropriate tau values (>= {lower:g} s, <= {upper:g} s)")
        self.lower = lower
        self.upper = upper


class EmptyResultError(AllanError):
    """Every candidate tau was dropped; nothing to report."""
