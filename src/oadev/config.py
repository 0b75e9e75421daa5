from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .diagnostics import Verbosity
from .outliers import DEFAULT_THRESHOLD


@dataclass
class OutlierConfig:
    enabled: bool = True
    threshold: float = DEFAULT_THRESHOLD


@dataclass
class AnalysisConfig:
    tau: Optional[List[float]] = None  # None selects 2**-10 .. 2**10
    verbosity: str = "summary"
    workers: int = 1
    outliers: OutlierConfig = field(default_factory=OutlierConfig)

    @property
    def verbosity_level(self) -> Verbosity:
        return Verbosity.parse(self.verbosity)


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: analysis configuration must be a JSON object")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge(base[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | str | None = None, overrides: Sequence[str] | None = None) -> AnalysisConfig:
    """
    Load an analysis configuration from JSON and apply CLI-style overrides.

    Overrides are dotted `key=value` pairs, e.g.:
        ["outliers.threshold=4", "tau=[1,2,4,8]", "verbosity=detailed"]
    Without *path* the defaults are used as the base.
    """
    data = _load_json(Path(path)) if path is not None else {}
    override_data: Dict[str, Any] = {}
    for override in overrides or []:
        key, value = _parse_override(override)
        _assign_nested(override_data, key, value)
    merged = _merge(data, override_data)

    outlier_data = merged.get("outliers") or {}
    tau = merged.get("tau")
    if tau is not None:
        if isinstance(tau, (int, float)):
            tau = [tau]
        if not isinstance(tau, list):
            raise ValueError("tau must be a list of averaging times in seconds")
        tau = [float(value) for value in tau]

    config = AnalysisConfig(
        tau=tau,
        verbosity=str(merged.get("verbosity", "summary")),
        workers=int(merged.get("workers", 1)),
        outliers=OutlierConfig(
            enabled=bool(outlier_data.get("enabled", True)),
            threshold=float(outlier_data.get("threshold", DEFAULT_THRESHOLD)),
        ),
    )
    Verbosity.parse(config.verbosity)
    if config.outliers.threshold <= 0:
        raise ValueError("outliers.threshold must be positive")
    return config


def _parse_override(item: str) -> tuple[str, Any]:
    if "=" not in item:
        raise ValueError(f"Override '{item}' must use key=value syntax")
    key, raw_value = item.split("=", 1)
    key = key.strip()
    if not key:
        raise ValueError("Override key may not be empty")
    return key, _coerce_value(raw_value.strip())


def _coerce_value(raw: str) -> Any:
    if raw.lower() in {"true", "false"}:
        return raw.lower() == "true"
    try:
        if "." in raw or "e" in raw.lower():
            return float(raw)
        return int(raw)
    except ValueError:
        pass
    if raw.startswith(("[", "{")):
        return json.loads(raw)
    return raw


def _assign_nested(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    cursor = target
    parts = dotted_key.split(".")
    for part in parts[:-1]:
        cursor = cursor.setdefault(part, {})
    cursor[parts[-1]] = value
