"""
test_main.py — Integration tests for the CLI entry point.

Tests cover:
    - Argument parsing
    - Headless run with exports into a temporary output directory
    - Missing configuration exit code
"""

import logging
import sys
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from main import _parse_args, build_session, run


def _write_config(tmp_path: Path) -> Path:
    cfg = {
        "project": {"company_name": "Test Widgets", "months_active": 6},
        "data_simulation": {"seed": 123},
        "paths": {"output_dir": str(tmp_path / "output"), "log_dir": str(tmp_path / "logs")},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


class TestParseArgs:
    """Tests for _parse_args."""

    def test_defaults(self):
        args = _parse_args([])
        assert args.config == "config.yaml"
        assert args.ticks is None
        assert args.live is False
        assert args.export_csv is None

    def test_export_csv_without_path(self):
        assert _parse_args(["--export-csv"]).export_csv == ""

    def test_live_and_ticks_are_exclusive(self, capsys):
        with pytest.raises(SystemExit) as exc:
            _parse_args(["--live", "--ticks", "30"])
        assert exc.value.code == 2
        assert "not allowed with" in capsys.readouterr().err


class TestBuildSession:
    """Tests for build_session."""

    def test_seed_override(self, tmp_path):
        session, cfg = build_session(str(_write_config(tmp_path)), seed=9, intensity=2.0)
        assert session.settings.seed == 9
        assert session.driver.intensity == 2.0
        assert session.profile.name == "Test Widgets"


class TestRun:
    """Tests for run."""

    def test_headless_run_writes_outputs(self, tmp_path):
        config = _write_config(tmp_path)
        args = _parse_args(["--config", str(config), "--ticks", "15", "--export-csv", "--excel"])
        assert run(args, logging.getLogger("test")) == 0

        out = tmp_path / "output"
        assert (out / "test_widgets_dashboard.html").exists()
        csv_path = out / "test_widgets_profit_stream.csv"
        assert csv_path.read_text().splitlines()[0] == "time,cumulativeProfit,revenue"
        assert (out / "test_widgets_snapshot.xlsx").exists()

    def test_missing_config_returns_1(self, tmp_path):
        args = _parse_args(["--config", str(tmp_path / "missing.yaml")])
        assert run(args, logging.getLogger("test")) == 1
