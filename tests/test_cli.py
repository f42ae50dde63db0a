"""Tests for sigprofile CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from sigprofile.cli import main

ENV_NAMES = ("REMOTE_URL", "REMOTE_TIMEOUT", "MAX_INSIGHTS", "REFERENCE_YEAR", "CACHE_DIR", "DATA_DIR")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(f"SIGPROFILE_{name}", raising=False)


@pytest.fixture
def bag_file(tmp_path: Path, rtx_raw: dict[str, Any]) -> Path:
    path = tmp_path / "bag.json"
    path.write_text(json.dumps(rtx_raw), encoding="utf-8")
    return path


def _invoke(*args: str):
    return CliRunner().invoke(main, list(args))


def test_analyze_json(bag_file: Path) -> None:
    """--json prints only the profile document."""
    result = _invoke("analyze", str(bag_file), "--no-remote", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["age"]["bucket"] == "22-30"
    assert data["device_tier"]["value"] == "premium (~$3,000)"
    assert data["source"] == "local"
    assert 1 <= len(data["insights"]) <= 5


def test_analyze_text_and_output_file(bag_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "profile.json"
    result = _invoke("analyze", str(bag_file), "--no-remote", "-n", "2", "-o", str(out))
    assert result.exit_code == 0, result.output
    assert "[Phase] Step 1/4" in result.stdout
    assert "occupation" in result.stdout
    assert "Software Developer" in result.stdout
    saved = json.loads(out.read_text(encoding="utf-8"))
    assert len(saved["insights"]) <= 2


def test_analyze_invalid_json(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    result = _invoke("analyze", str(bad), "--no-remote")
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_analyze_non_utf8_file(tmp_path: Path) -> None:
    binary = tmp_path / "bag.bin"
    binary.write_bytes(b"\xff\xfe\x00garbage")
    result = _invoke("analyze", str(binary), "--no-remote")
    assert result.exit_code == 1
    assert "not UTF-8 text" in result.output


def test_analyze_rejects_zero_insights(bag_file: Path) -> None:
    result = _invoke("analyze", str(bag_file), "--no-remote", "--max-insights", "0")
    assert result.exit_code == 2


def test_explain(bag_file: Path) -> None:
    result = _invoke("explain", str(bag_file), "parental_status")
    assert result.exit_code == 0, result.output
    assert "parental_status: Likely has children" in result.stdout
    assert "Bucket:      likely" in result.stdout
    assert "+18.0" in result.stdout
    assert "post-bedtime" in result.stdout


def test_explain_unknown_attribute(bag_file: Path) -> None:
    result = _invoke("explain", str(bag_file), "shoe_size")
    assert result.exit_code == 1
    assert "Unknown attribute: shoe_size" in result.output


def test_lookup_gpu() -> None:
    result = _invoke("lookup", "gpu", "NVIDIA GeForce RTX 4090")
    assert result.exit_code == 0, result.output
    assert "tier: premium" in result.stdout
    assert "msrp: 1599" in result.stdout


def test_lookup_screen() -> None:
    assert "4K Monitor" in _invoke("lookup", "screen", "3840x2160").stdout
    bad = _invoke("lookup", "screen", "wide")
    assert bad.exit_code == 1


def test_lookup_isp() -> None:
    result = _invoke("lookup", "isp", "Amazon AWS")
    assert result.exit_code == 0
    assert "value: datacenter" in result.stdout


def test_tables() -> None:
    result = _invoke("tables")
    assert result.exit_code == 0
    assert "gpus" in result.stdout


def test_check(monkeypatch: pytest.MonkeyPatch) -> None:
    result = _invoke("check")
    assert result.exit_code == 0, result.output
    assert "NOT SET (local scoring only)" in result.stdout
    assert "Ready to run!" in result.stdout

    monkeypatch.setenv("SIGPROFILE_MAX_INSIGHTS", "many")
    warned = _invoke("check")
    assert warned.exit_code == 1
    assert "SIGPROFILE_MAX_INSIGHTS" in warned.output


def test_bad_data_dir(bag_file: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SIGPROFILE_DATA_DIR", str(tmp_path / "missing"))
    result = _invoke("analyze", str(bag_file), "--no-remote")
    assert result.exit_code == 1
    assert "reference data not found" in result.output
