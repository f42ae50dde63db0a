"""Tests for the profile engine and its configuration."""

from pathlib import Path
from typing import Any

import httpx
import pytest

from sigprofile.logger import ProgressLogger
from sigprofile.models import BucketedAttribute, Profile
from sigprofile.orchestrator import EngineConfig, ProfileEngine

REMOTE_URL = "https://analyzer.test"


def _remote_profile() -> dict:
    profile = Profile(
        income=BucketedAttribute(value="$80k-$120k/year", bucket="upper-middle", confidence=55),
        insights=["From the server."],
        overall_confidence=77,
    )
    return profile.model_dump(mode="json")


def _engine(handler, **config: Any) -> ProfileEngine:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    cfg = EngineConfig(remote_url=REMOTE_URL, **config)
    return ProfileEngine(cfg, logger=ProgressLogger("test"), client=client)


class TestEngineConfig:
    """Tests for EngineConfig.from_env()."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("REMOTE_URL", "REMOTE_TIMEOUT", "MAX_INSIGHTS", "REFERENCE_YEAR", "CACHE_DIR", "DATA_DIR"):
            monkeypatch.delenv(f"SIGPROFILE_{name}", raising=False)
        config = EngineConfig.from_env()
        assert config.remote_url is None
        assert config.remote_timeout == 5.0
        assert config.max_insights == 5
        assert config.reference_year is None
        assert not config.remote_enabled

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("SIGPROFILE_REMOTE_URL", REMOTE_URL)
        monkeypatch.setenv("SIGPROFILE_REMOTE_TIMEOUT", "2.5")
        monkeypatch.setenv("SIGPROFILE_MAX_INSIGHTS", "3")
        monkeypatch.setenv("SIGPROFILE_REFERENCE_YEAR", "2025")
        monkeypatch.setenv("SIGPROFILE_CACHE_DIR", str(tmp_path))
        config = EngineConfig.from_env()
        assert config.remote_url == REMOTE_URL
        assert config.remote_timeout == 2.5
        assert config.max_insights == 3
        assert config.reference_year == 2025
        assert config.cache_dir == tmp_path
        assert config.remote_enabled

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIGPROFILE_REMOTE_TIMEOUT", "-1")
        monkeypatch.setenv("SIGPROFILE_MAX_INSIGHTS", "-2")
        monkeypatch.setenv("SIGPROFILE_REFERENCE_YEAR", "soon")
        warnings: list[str] = []
        config = EngineConfig.from_env(warnings)
        assert config.remote_timeout == 5.0
        assert config.max_insights == 5
        assert config.reference_year is None
        assert len(warnings) == 3
        assert "negative" in warnings[0]
        assert "below 1" in warnings[1]
        assert "not a valid number" in warnings[2]

    def test_zero_insights_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The insight cap must leave room for at least one line."""
        monkeypatch.setenv("SIGPROFILE_MAX_INSIGHTS", "0")
        warnings: list[str] = []
        assert EngineConfig.from_env(warnings).max_insights == 5
        assert warnings == ["SIGPROFILE_MAX_INSIGHTS='0' is below 1, using 5"]

    def test_remote_can_be_disabled(self) -> None:
        assert not EngineConfig(remote_url=REMOTE_URL, use_remote=False).remote_enabled


class TestProfileEngine:
    """Tests for ProfileEngine.profile()."""

    def test_local_only(self, rtx_raw: dict, capsys: pytest.CaptureFixture[str]) -> None:
        engine = ProfileEngine(EngineConfig(), logger=ProgressLogger("test"))
        assert engine.remote is None
        profile = engine.profile(rtx_raw)
        assert profile.source == "local"
        assert profile.age.bucket == "22-30"
        out = capsys.readouterr().out
        assert "Remote analysis disabled" in out
        assert "Source: local" in out

    def test_adopts_remote_profile(self, rtx_raw: dict, capsys: pytest.CaptureFixture[str]) -> None:
        engine = _engine(
            lambda request: httpx.Response(200, json={"success": True, "analysis": _remote_profile()})
        )
        profile = engine.profile(rtx_raw)
        assert profile.source == "remote"
        assert profile.income.bucket == "upper-middle"
        assert profile.insights == ["From the server."]
        assert "[Remote] Adopted remote profile (77% confidence)" in capsys.readouterr().out

    def test_falls_back_on_failure(self, rtx_raw: dict, capsys: pytest.CaptureFixture[str]) -> None:
        """A failed remote call is indistinguishable from local-only output."""
        engine = _engine(lambda request: httpx.Response(503))
        profile = engine.profile(rtx_raw)
        captured = capsys.readouterr()
        assert profile.source == "local"
        assert profile.income.bucket == "wealthy"
        assert "[Fallback] Using local scoring" in captured.out
        assert "Remote analysis failed: HTTP 503" in captured.err

        local = ProfileEngine(EngineConfig(), logger=ProgressLogger("test", quiet=True)).profile(rtx_raw)
        assert profile == local

    def test_malformed_remote_url_falls_back(
        self, rtx_raw: dict, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A broken SIGPROFILE_REMOTE_URL still yields the local profile."""
        monkeypatch.setenv("SIGPROFILE_REMOTE_URL", "http://[::1")
        monkeypatch.delenv("SIGPROFILE_CACHE_DIR", raising=False)
        monkeypatch.delenv("SIGPROFILE_DATA_DIR", raising=False)
        config = EngineConfig.from_env()
        assert config.remote_enabled

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.InvalidURL("Invalid port: ':1'")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        profile = ProfileEngine(config, logger=ProgressLogger("test"), client=client).profile(rtx_raw)

        captured = capsys.readouterr()
        assert profile.source == "local"
        assert profile.age.bucket == "22-30"
        assert "[Fallback] Using local scoring" in captured.out
        assert "InvalidURL" in captured.err

    def test_unwritable_cache_dir(self, rtx_raw: dict, tmp_path: Path) -> None:
        """A cache directory that cannot be created never fails the run."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        engine = ProfileEngine(
            EngineConfig(cache_dir=blocker / "cache"), logger=ProgressLogger("test", quiet=True)
        )
        profile = engine.profile(rtx_raw)
        assert profile.source == "local"
        assert engine.profile(rtx_raw) == profile

    def test_cache_hit(self, rtx_raw: dict, capsys: pytest.CaptureFixture[str]) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"success": True, "analysis": _remote_profile()})

        engine = _engine(handler)
        first = engine.profile(rtx_raw)
        capsys.readouterr()
        second = engine.profile(dict(reversed(list(rtx_raw.items()))))

        assert second == first
        assert len(calls) == 1
        assert "[Cache] hit" in capsys.readouterr().out

    def test_dropped_signals_warn(self, capsys: pytest.CaptureFixture[str]) -> None:
        engine = ProfileEngine(EngineConfig(), logger=ProgressLogger("test", quiet=True))
        profile = engine.profile({"hardware": {"cpuCores": "lots", "ram": 32}})
        assert profile.device_tier.data_points == 1
        assert "Discarded 1 malformed signal(s): hardware.cpuCores" in capsys.readouterr().err

    def test_never_raises_on_garbage(self) -> None:
        engine = ProfileEngine(EngineConfig(), logger=ProgressLogger("test", quiet=True))
        profile = engine.profile("not a bag")
        assert profile.overall_confidence == 0

    def test_reference_year(self, rtx_raw: dict) -> None:
        """A configured year depreciates hardware when the bag has no clock year."""
        engine = ProfileEngine(
            EngineConfig(reference_year=2025), logger=ProgressLogger("test", quiet=True)
        )
        assert engine.local(rtx_raw).device_tier.bucket == "high-end"
