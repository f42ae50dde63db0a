"""
sigprofile reference data - versioned lookup tables loaded from YAML.

Tables live in sigprofile/data/*.yaml so they can be reviewed and updated
without touching scorer code. Every lookup either hits a table entry or
returns the table's explicit default with is_default=True; nothing here
returns None for present input.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Generic, Literal, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_VERSION = 1
DATA_FILES = ("gpus.yaml", "network.yaml", "locale.yaml", "display.yaml")

GpuTier = Literal["budget", "mid", "high", "premium"]
IspTier = Literal["enterprise", "premium", "standard", "budget", "datacenter"]
Culture = Literal["low", "moderate", "high"]

T = TypeVar("T")


def get_data_dir() -> Path:
    """Get the reference data directory (SIGPROFILE_DATA_DIR overrides)."""
    override = os.getenv("SIGPROFILE_DATA_DIR")
    if override:
        return Path(override)
    return Path(__file__).parent / "data"


def _norm(key: str) -> str:
    return key.strip().casefold()


@dataclass(frozen=True)
class TableHit(Generic[T]):
    """Result of a reference lookup."""

    entry: T
    key: str
    is_default: bool = False

    def describe(self) -> str:
        """Short provenance string for reasoning lines."""
        return f"default ({self.key})" if self.is_default else self.key


# =============================================================================
# TABLE ENTRIES
# =============================================================================


class _Entry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class GpuEntry(_Entry):
    """GPU model substring -> tier/msrp/year."""

    pattern: str
    tier: GpuTier
    msrp: int = Field(..., ge=0)
    year: int = Field(..., ge=1990, le=2100)


class GpuFallback(_Entry):
    label: str
    keywords: list[str] = Field(default_factory=list)
    tier: GpuTier
    msrp: int = Field(..., ge=0)
    year: int = Field(..., ge=1990, le=2100)

    def as_entry(self) -> GpuEntry:
        return GpuEntry(pattern=self.label, tier=self.tier, msrp=self.msrp, year=self.year)


class CityEntry(_Entry):
    """City economics; col is the cost-of-living income multiplier."""

    col: float = 1.0
    col_index: int | None = Field(default=None, ge=1, le=10)
    tech_hub: int | None = Field(default=None, ge=1, le=10)
    startups: int | None = Field(default=None, ge=1, le=10)
    income_multiplier: float | None = None
    industries: list[str] = Field(default_factory=list)

    @property
    def has_intelligence(self) -> bool:
        return self.tech_hub is not None


class LanguageEntry(_Entry):
    region: str
    education: str
    tech_adoption: int = Field(..., ge=0, le=100)
    income_tier: int = Field(..., ge=1, le=5)
    professions: list[str] = Field(default_factory=list)


class CountryLifestyle(_Entry):
    smoking: float = Field(..., ge=0, le=100)
    alcohol: Culture
    coffee: Culture


class AgeBand(_Entry):
    label: str
    min_age: int = Field(..., ge=0)
    caffeine: int
    alcohol: int
    alcohol_pattern: str
    smoking: float


class ScreenInfo(_Entry):
    device_type: str
    likely_use: str
    income: int = Field(..., ge=0, le=10)
    professional: int = Field(..., ge=0, le=10)


class ScreenFallback(ScreenInfo):
    min_pixels: int = Field(..., ge=0)


class ExtensionWeight(_Entry):
    profile: str
    weight: int
    income_mod: int = 0


# =============================================================================
# TABLE FILES
# =============================================================================


class _TableFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int

    def check_version(self, name: str) -> None:
        if self.version != SUPPORTED_VERSION:
            raise ValueError(f"{name}: unsupported table version {self.version}")


class GpuTables(_TableFile):
    gpus: list[GpuEntry]
    fallbacks: list[GpuFallback]
    default: GpuFallback


class NetworkTables(_TableFile):
    isp_tiers: dict[IspTier, list[str]]
    isp_default_tier: IspTier
    cities: dict[str, CityEntry]
    family_cities: list[str]
    singles_cities: list[str]
    transit_cities: list[str]


class LocaleTables(_TableFile):
    languages: dict[str, LanguageEntry]
    language_default: str
    countries: dict[str, CountryLifestyle]
    country_default: CountryLifestyle
    developed_countries: list[str]
    age_bands: list[AgeBand]
    age_band_defaults: dict[str, str]


class DisplayTables(_TableFile):
    screen_patterns: dict[str, list[str]]
    screens: dict[str, ScreenInfo]
    screen_fallbacks: list[ScreenFallback]
    extensions: dict[str, list[ExtensionWeight]]


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Reference table not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected a mapping at top level")
    return data


# =============================================================================
# REFERENCE DATA
# =============================================================================


class ReferenceData:
    """All lookup tables, read once and never mutated."""

    def __init__(
        self,
        gpus: GpuTables,
        network: NetworkTables,
        locale: LocaleTables,
        display: DisplayTables,
    ):
        self.gpus = gpus
        self.network = network
        self.locale = locale
        self.display = display

        self._cities = {_norm(k): (k, v) for k, v in network.cities.items()}
        self._languages = {_norm(k): (k, v) for k, v in locale.languages.items()}
        self._countries = {_norm(k): (k, v) for k, v in locale.countries.items()}
        self._screens = {_norm(k): (k, v) for k, v in display.screens.items()}
        self._developed = {_norm(c) for c in locale.developed_countries}
        self._patterns = {
            name: {_norm(r) for r in resolutions}
            for name, resolutions in display.screen_patterns.items()
        }

        if locale.language_default not in locale.languages:
            raise ValueError(f"language_default {locale.language_default!r} is not in the table")

    @classmethod
    def load(cls, data_dir: Path | None = None) -> ReferenceData:
        """Load and validate every table file.

        Raises:
            FileNotFoundError: If a table file is missing.
            ValueError: If a table has the wrong version or shape.
        """
        data_dir = data_dir or get_data_dir()
        parsed = []
        for name, model in zip(
            DATA_FILES, (GpuTables, NetworkTables, LocaleTables, DisplayTables), strict=True
        ):
            table = model.model_validate(_read_yaml(data_dir / name))
            table.check_version(name)
            parsed.append(table)
        return cls(*parsed)

    @staticmethod
    @lru_cache(maxsize=1)
    def default() -> ReferenceData:
        """Packaged tables, loaded once per process."""
        return ReferenceData.load(Path(__file__).parent / "data")

    # -------------------------------------------------------------------------
    # Free-text lookups (case-insensitive substring)
    # -------------------------------------------------------------------------

    def gpu(self, name: str) -> TableHit[GpuEntry]:
        """Look up a GPU renderer string."""
        lower = name.lower()
        for entry in self.gpus.gpus:
            if entry.pattern in lower:
                return TableHit(entry, entry.pattern)
        for fallback in self.gpus.fallbacks:
            if any(kw in lower for kw in fallback.keywords):
                return TableHit(fallback.as_entry(), fallback.label, is_default=True)
        fallback = self.gpus.default
        return TableHit(fallback.as_entry(), fallback.label, is_default=True)

    def isp_tier(self, isp: str) -> TableHit[IspTier]:
        """Classify an ISP name into a tier."""
        lower = isp.lower()
        for tier, keywords in self.network.isp_tiers.items():
            for kw in keywords:
                if kw in lower:
                    return TableHit(tier, kw)
        default = self.network.isp_default_tier
        return TableHit(default, default, is_default=True)

    def extension(self, name: str) -> TableHit[list[ExtensionWeight]] | None:
        """Profile weights for a browser extension (None if unlisted)."""
        lower = name.lower()
        for key, weights in self.display.extensions.items():
            if key.lower() in lower:
                return TableHit(weights, key)
        return None

    # -------------------------------------------------------------------------
    # Structured lookups (exact, trimmed, case-folded)
    # -------------------------------------------------------------------------

    def city(self, name: str) -> TableHit[CityEntry]:
        hit = self._cities.get(_norm(name))
        if hit:
            return TableHit(hit[1], hit[0])
        return TableHit(CityEntry(), "no city data", is_default=True)

    def language(self, tag: str) -> TableHit[LanguageEntry]:
        hit = self._languages.get(_norm(tag))
        if hit:
            return TableHit(hit[1], hit[0])
        key = self.locale.language_default
        return TableHit(self.locale.languages[key], key, is_default=True)

    def country(self, name: str) -> TableHit[CountryLifestyle]:
        hit = self._countries.get(_norm(name))
        if hit:
            return TableHit(hit[1], hit[0])
        return TableHit(self.locale.country_default, "global average", is_default=True)

    def is_developed(self, country: str) -> bool:
        return _norm(country) in self._developed

    def screen(self, width: int, height: int) -> TableHit[ScreenInfo]:
        """Screen class for a resolution, falling back by pixel count."""
        key = f"{width}x{height}"
        hit = self._screens.get(key)
        if hit:
            return TableHit(hit[1], hit[0])
        pixels = width * height
        for fallback in self.display.screen_fallbacks:
            if pixels >= fallback.min_pixels:
                info = ScreenInfo(**fallback.model_dump(exclude={"min_pixels"}))
                return TableHit(info, fallback.device_type, is_default=True)
        raise ValueError("screen_fallbacks must end with a min_pixels: 0 entry")

    def in_screen_pattern(self, pattern: str, width: int, height: int) -> bool:
        return f"{width}x{height}" in self._patterns.get(pattern, set())

    def is_professional_screen(self, width: int, height: int) -> bool:
        return self.in_screen_pattern("professional", width, height) or (
            width >= 2560 and height >= 1440
        )

    def is_budget_screen(self, width: int, height: int) -> bool:
        return self.in_screen_pattern("budget", width, height) or (width <= 1600 and height <= 900)

    # -------------------------------------------------------------------------
    # City keyword lists and age bands
    # -------------------------------------------------------------------------

    def is_family_city(self, city: str) -> bool:
        lower = city.lower()
        return any(c in lower for c in self.network.family_cities)

    def is_singles_city(self, city: str) -> bool:
        lower = city.lower()
        return any(c in lower for c in self.network.singles_cities)

    def is_transit_city(self, city: str) -> bool:
        lower = city.lower()
        return any(c in lower for c in self.network.transit_cities)

    def age_band(self, age: float | None, factor: str) -> AgeBand:
        """Lifestyle age band for an approximate age (factor default if None)."""
        if age is None:
            label = self.locale.age_band_defaults[factor]
            return next(b for b in self.locale.age_bands if b.label == label)
        band = self.locale.age_bands[0]
        for candidate in self.locale.age_bands:
            if age >= candidate.min_age:
                band = candidate
        return band

    def summary(self) -> dict[str, int]:
        """Row counts per table (for the CLI)."""
        return {
            "gpus": len(self.gpus.gpus),
            "gpu_fallbacks": len(self.gpus.fallbacks),
            "isp_keywords": sum(len(v) for v in self.network.isp_tiers.values()),
            "cities": len(self.network.cities),
            "languages": len(self.locale.languages),
            "countries": len(self.locale.countries),
            "age_bands": len(self.locale.age_bands),
            "screens": len(self.display.screens),
            "extensions": len(self.display.extensions),
        }


@dataclass(frozen=True)
class ScoringContext:
    """Reference tables plus the fallback clock every scorer receives."""

    reference: ReferenceData
    reference_year: int | None = None

    def year_for(self, bag) -> int | None:
        """Year used for hardware age: the bag's own clock wins."""
        if bag.temporal.year is not None:
            return bag.temporal.year
        return self.reference_year
