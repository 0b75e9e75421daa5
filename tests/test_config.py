from __future__ import annotations

from pathlib import Path

import pytest

from oadev.config import AnalysisConfig, load_config
from oadev.diagnostics import Verbosity


def test_defaults_without_file() -> None:
    cfg = load_config()
    assert isinstance(cfg, AnalysisConfig)
    assert cfg.tau is None
    assert cfg.verbosity_level is Verbosity.SUMMARY
    assert cfg.workers == 1
    assert cfg.outliers.enabled is True
    assert cfg.outliers.threshold == 5.0


def test_load_config_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "analysis.json"
    cfg_path.write_text(
        """
        {
          "tau": [1, 2, 4],
          "verbosity": "silent",
          "outliers": {"enabled": true, "threshold": 5}
        }
        """,
        encoding="utf-8",
    )
    cfg = load_config(cfg_path, overrides=["outliers.threshold=4.5", "workers=3", "verbosity=detailed"])
    assert cfg.tau == [1.0, 2.0, 4.0]
    assert cfg.outliers.threshold == 4.5
    assert cfg.outliers.enabled is True
    assert cfg.workers == 3
    assert cfg.verbosity_level is Verbosity.DETAILED


def test_tau_override_accepts_json_list() -> None:
    cfg = load_config(overrides=["tau=[0.5, 1, 10]", "outliers.enabled=false"])
    assert cfg.tau == [0.5, 1.0, 10.0]
    assert cfg.outliers.enabled is False


@pytest.mark.parametrize(
    "override",
    ["threshold", "=3", "verbosity=loud", "outliers.threshold=0", "tau=abc"],
)
def test_invalid_overrides_rejected(override: str) -> None:
    with pytest.raises(ValueError):
        load_config(overrides=[override])


def test_verbosity_parse_accepts_levels() -> None:
    assert Verbosity.parse("Detailed") is Verbosity.DETAILED
    assert Verbosity.parse(0) is Verbosity.SILENT
    assert Verbosity.parse("1") is Verbosity.SUMMARY
