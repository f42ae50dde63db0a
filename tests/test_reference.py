"""Tests for reference table loading and lookups."""

import shutil
from pathlib import Path

import pytest

from sigprofile.models import SignalBag
from sigprofile.reference import DATA_FILES, ReferenceData, ScoringContext, get_data_dir


class TestLoading:
    """Tests for ReferenceData.load()."""

    def test_default_is_cached(self) -> None:
        """The packaged tables load once per process."""
        assert ReferenceData.default() is ReferenceData.default()

    def test_summary_counts(self, reference: ReferenceData) -> None:
        """Every table has rows."""
        summary = reference.summary()
        assert summary["gpus"] > 20
        assert summary["countries"] > 10
        assert all(count > 0 for count in summary.values())

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing table is a configuration error."""
        with pytest.raises(FileNotFoundError):
            ReferenceData.load(tmp_path)

    def test_wrong_version_raises(self, tmp_path: Path) -> None:
        """Tables carry a version that must match."""
        source = Path(__file__).parent.parent / "src" / "sigprofile" / "data"
        for name in DATA_FILES:
            shutil.copy(source / name, tmp_path / name)
        gpus = tmp_path / "gpus.yaml"
        gpus.write_text(gpus.read_text(encoding="utf-8").replace("version: 1", "version: 99", 1))
        with pytest.raises(ValueError, match="version"):
            ReferenceData.load(tmp_path)

    def test_data_dir_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """SIGPROFILE_DATA_DIR points the loader elsewhere."""
        monkeypatch.setenv("SIGPROFILE_DATA_DIR", str(tmp_path))
        assert get_data_dir() == tmp_path
        monkeypatch.delenv("SIGPROFILE_DATA_DIR")
        assert get_data_dir().name == "data"


class TestLookups:
    """Tests for individual table lookups."""

    def test_gpu_exact_model(self, reference: ReferenceData) -> None:
        """Renderer strings match by substring, most specific row first."""
        hit = reference.gpu("ANGLE (NVIDIA, NVIDIA GeForce RTX 4090 Direct3D11)")
        assert hit.entry.tier == "premium"
        assert hit.entry.msrp == 1599
        assert not hit.is_default

    def test_gpu_fallback(self, reference: ReferenceData) -> None:
        """Unlisted GPUs fall back by vendor keyword, then to a default."""
        intel = reference.gpu("Intel Arc A770")
        assert intel.is_default
        assert intel.entry.tier == "budget"

        unknown = reference.gpu("Mystery Accelerator")
        assert unknown.is_default
        assert unknown.describe().startswith("default (")

    def test_isp_tier(self, reference: ReferenceData) -> None:
        """ISP names classify by keyword."""
        assert reference.isp_tier("Verizon Fios").entry == "premium"
        assert reference.isp_tier("Amazon AWS").entry == "datacenter"
        assert reference.isp_tier("Tiny Local ISP").is_default

    def test_city_is_case_insensitive(self, reference: ReferenceData) -> None:
        """City keys are trimmed and case-folded."""
        hit = reference.city("  san francisco ")
        assert hit.key == "San Francisco"
        assert hit.entry.col > 1.5
        assert reference.city("Nowhere").entry.col == 1.0

    def test_language_default(self, reference: ReferenceData) -> None:
        """Unknown language tags use the default row."""
        assert reference.language("de-DE").entry.region == "Germany"
        fallback = reference.language("xx-XX")
        assert fallback.is_default
        assert fallback.key == "en-US"

    def test_country(self, reference: ReferenceData) -> None:
        """Country lifestyle rows, with a global average fallback."""
        saudi = reference.country("Saudi Arabia")
        assert saudi.entry.alcohol == "low"
        assert saudi.entry.coffee == "high"
        assert reference.country("Atlantis").key == "global average"

    def test_screen_fallback_by_pixels(self, reference: ReferenceData) -> None:
        """Unlisted resolutions fall back by pixel count."""
        assert reference.screen(3840, 2160).entry.device_type == "4K Monitor"
        assert reference.screen(1000, 700).entry.device_type == "Low-res"

    def test_screen_classes(self, reference: ReferenceData) -> None:
        """Professional and budget screens by pattern or size."""
        assert reference.is_professional_screen(2560, 1440)
        assert reference.is_budget_screen(1366, 768)
        assert not reference.is_professional_screen(1366, 768)

    def test_age_band(self, reference: ReferenceData) -> None:
        """Age bands pick the last band whose minimum is reached."""
        assert reference.age_band(20, "caffeine").label == "18-24"
        assert reference.age_band(38, "caffeine").label == "35-44"
        assert reference.age_band(None, "smoking").label == "35-44"
        assert reference.age_band(None, "alcohol").label == "25-34"


class TestScoringContext:
    """Tests for the scoring clock."""

    def test_bag_year_wins(self, reference: ReferenceData) -> None:
        """The bag's own year beats the configured fallback."""
        ctx = ScoringContext(reference, reference_year=2030)
        bag = SignalBag.model_validate({"temporal": {"year": 2024}})
        assert ctx.year_for(bag) == 2024
        assert ctx.year_for(SignalBag()) == 2030
        assert ScoringContext(reference).year_for(SignalBag()) is None
