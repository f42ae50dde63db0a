"""
sigprofile data models - strict Pydantic schemas for signals and profiles.

Design principles:
- SignalBag is immutable and every leaf is optional (absent != negative)
- Collector field names are camelCase on the wire, snake_case in Python
- Malformed signals are discarded at the boundary, never propagated
- Evidence is a first-class object; reasoning is derived from it
- Profile always carries every attribute (Unknown/0 instead of omission)
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Iterator, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

UNKNOWN = "Unknown"

ProfileSource = Literal["local", "remote"]

# =============================================================================
# SIGNAL BAG (input contract from collectors)
# =============================================================================


class _SignalGroup(BaseModel):
    """Base for all signal categories: frozen, camelCase aliases, extras ignored."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BatteryStatus(_SignalGroup):
    level: float | None = Field(default=None, ge=0.0, le=1.0)
    charging: bool | None = None


class HardwareSignals(_SignalGroup):
    """GPU, CPU, memory and display facts."""

    gpu: str | None = None
    gpu_vendor: str | None = None
    cpu_cores: int | None = Field(default=None, ge=1, le=1024)
    ram: float | None = Field(default=None, gt=0, description="Device memory in GB")
    battery: BatteryStatus | None = None
    screen_width: int | None = Field(default=None, ge=1)
    screen_height: int | None = Field(default=None, ge=1)
    pixel_ratio: float | None = Field(default=None, gt=0)
    touch_support: bool | None = None
    max_touch_points: int | None = Field(default=None, ge=0)
    color_depth: int | None = Field(default=None, ge=1)
    orientation: str | None = None

    @property
    def gpu_lower(self) -> str:
        return (self.gpu or "").lower()

    @property
    def has_screen(self) -> bool:
        return self.screen_width is not None and self.screen_height is not None

    @property
    def is_apple_silicon(self) -> bool:
        gpu = self.gpu_lower
        return any(chip in gpu for chip in ("m1", "m2", "m3"))


class NetworkSignals(_SignalGroup):
    city: str | None = None
    region: str | None = None
    country: str | None = None
    isp: str | None = None
    timezone: str | None = None
    connection_type: str | None = None
    downlink: float | None = Field(default=None, ge=0)
    rtt: float | None = Field(default=None, ge=0)


class BrowserSignals(_SignalGroup):
    user_agent: str | None = None
    language: str | None = None
    languages: list[str] = Field(default_factory=list)
    platform: str | None = None
    mobile: bool | None = None
    history_length: int | None = Field(default=None, ge=0)
    cookies_enabled: bool | None = None
    vendor: str | None = None
    referrer: str | None = None

    @property
    def is_developer_variant(self) -> bool:
        ua = self.user_agent or ""
        return "Developer" in ua or "Canary" in ua

    @property
    def is_apple_vendor(self) -> bool:
        return "apple" in (self.vendor or "").lower()


class FingerprintSummary(_SignalGroup):
    fonts_detected: int | None = Field(default=None, ge=0)
    extensions_detected: list[str] = Field(default_factory=list)
    hardware_family: str | None = None
    webgpu_available: bool | None = None
    wasm_supported: bool | None = None
    gamepads: bool | None = None


class BotDetectionSignals(_SignalGroup):
    is_automated: bool | None = None
    is_headless: bool | None = None
    is_virtual_machine: bool | None = None
    incognito_mode: bool | None = None
    dev_tools_open: bool | None = None
    zero_metrics: bool | None = None


class TypingSignals(_SignalGroup):
    total_keystrokes: int | None = Field(default=None, ge=0)
    average_wpm: float | None = Field(default=None, ge=0, alias="averageWPM")
    average_hold_time: float | None = Field(default=None, ge=0)


class MouseSignals(_SignalGroup):
    total_clicks: int | None = Field(default=None, ge=0)
    rage_clicks: int | None = Field(default=None, ge=0)
    erratic_movements: int | None = Field(default=None, ge=0)
    movements: int | None = Field(default=None, ge=0)
    total_distance: float | None = Field(default=None, ge=0)
    average_velocity: float | None = Field(default=None, ge=0)


class ScrollSignals(_SignalGroup):
    scroll_events: int | None = Field(default=None, ge=0)
    max_depth: float | None = Field(default=None, ge=0)
    direction_changes: int | None = Field(default=None, ge=0)


class AttentionSignals(_SignalGroup):
    tab_switches: int | None = Field(default=None, ge=0)
    total_hidden_time: float | None = Field(default=None, ge=0)
    focus_time: float | None = Field(default=None, ge=0, description="Milliseconds")
    times_went_afk: int | None = Field(default=None, ge=0, alias="timesWentAFK")


class EmotionSignals(_SignalGroup):
    engagement: float | None = Field(default=None, ge=0, le=100)
    exit_intents: int | None = Field(default=None, ge=0)
    handedness: str | None = None


class BehavioralSignals(_SignalGroup):
    typing: TypingSignals = Field(default_factory=TypingSignals)
    mouse: MouseSignals = Field(default_factory=MouseSignals)
    scroll: ScrollSignals = Field(default_factory=ScrollSignals)
    attention: AttentionSignals = Field(default_factory=AttentionSignals)
    emotions: EmotionSignals = Field(default_factory=EmotionSignals)


class TrackingSignals(_SignalGroup):
    ad_blocker: bool | None = None
    do_not_track: bool | None = None
    global_privacy_control: bool | None = None


class CryptoSignals(_SignalGroup):
    has_any_wallet: bool | None = None
    wallets: list[str] = Field(default_factory=list)

    def has_wallet(self, name: str) -> bool:
        """Case-insensitive wallet name check."""
        needle = name.lower()
        return any(needle in w.lower() for w in self.wallets)

    @property
    def any_wallet(self) -> bool | None:
        """True/False when known, None when the collector reported nothing."""
        if self.wallets:
            return True
        return self.has_any_wallet

    @property
    def wallet_count(self) -> int:
        return len({w.lower() for w in self.wallets})


class SocialLoginSignals(_SignalGroup):
    services: list[str] = Field(default_factory=list)

    def has(self, name: str) -> bool:
        needle = name.lower()
        return any(s.lower() == needle for s in self.services)

    @property
    def known(self) -> bool:
        return bool(self.services)


class VpnSignals(_SignalGroup):
    likely: bool | None = None
    timezone_mismatch: bool | None = None
    webrtc_leak: bool | None = None


class PreferenceSignals(_SignalGroup):
    color_scheme: str | None = None
    reduced_motion: bool | None = None
    color_gamut: str | None = None
    hdr_support: bool | None = None


class TemporalSignals(_SignalGroup):
    """Local time of the visit. The only clock the engine ever reads."""

    hour: int | None = Field(default=None, ge=0, le=23)
    minute: int | None = Field(default=None, ge=0, le=59)
    day_of_week: int | None = Field(default=None, ge=0, le=6, description="0=Sunday")
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = Field(default=None, ge=1990, le=2100)
    local_timezone: str | None = None

    @property
    def is_weekend(self) -> bool | None:
        if self.day_of_week is None:
            return None
        return self.day_of_week in (0, 6)

    @property
    def is_weekday(self) -> bool | None:
        if self.day_of_week is None:
            return None
        return self.day_of_week not in (0, 6)

    @property
    def is_work_hours(self) -> bool | None:
        if self.hour is None:
            return None
        return 9 <= self.hour < 17


class StorageSignals(_SignalGroup):
    quota: float | None = Field(default=None, ge=0)
    used: float | None = Field(default=None, ge=0)
    usage_percent: float | None = Field(default=None, ge=0)

    @property
    def is_returning_visitor(self) -> bool | None:
        if self.used is None:
            return None
        return round(self.used / 1e6) > 0


class SignalBag(_SignalGroup):
    """Canonical, namespaced bag of optional facts about one client session."""

    hardware: HardwareSignals = Field(default_factory=HardwareSignals)
    network: NetworkSignals = Field(default_factory=NetworkSignals)
    browser: BrowserSignals = Field(default_factory=BrowserSignals)
    fingerprint_summary: FingerprintSummary = Field(default_factory=FingerprintSummary)
    bot_detection: BotDetectionSignals = Field(default_factory=BotDetectionSignals)
    behavioral: BehavioralSignals = Field(default_factory=BehavioralSignals)
    tracking: TrackingSignals = Field(default_factory=TrackingSignals)
    crypto: CryptoSignals = Field(default_factory=CryptoSignals)
    social_logins: SocialLoginSignals = Field(default_factory=SocialLoginSignals)
    vpn: VpnSignals = Field(default_factory=VpnSignals)
    preferences: PreferenceSignals = Field(default_factory=PreferenceSignals)
    temporal: TemporalSignals = Field(default_factory=TemporalSignals)
    storage: StorageSignals = Field(default_factory=StorageSignals)

    def to_wire(self) -> dict[str, Any]:
        """Collector-shaped JSON dict (camelCase, absent leaves dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def content_hash(self) -> str:
        """Stable SHA-256 of the canonical bag JSON."""
        canonical = json.dumps(self.to_wire(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()

    def is_empty(self) -> bool:
        return self == SignalBag()


# Bounded number of prune/revalidate passes for malformed input
MAX_PRUNE_PASSES = 25


def _drop_path(payload: Any, loc: tuple[Any, ...]) -> str | None:
    """Remove the offending key for a validation error location."""
    node = payload
    parents: list[tuple[Any, Any]] = []
    for key in loc:
        if isinstance(node, dict) and key in node:
            parents.append((node, key))
            node = node[key]
        elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
            parents.append((node, key))
            node = node[key]
        else:
            break

    # A bad list element drops the whole list; otherwise drop the deepest dict key
    for container, key in reversed(parents):
        if isinstance(container, dict):
            del container[key]
            return ".".join(str(p) for p in loc)
    return None


def parse_signal_bag(raw: Any) -> tuple[SignalBag, list[str]]:
    """
    Validate collector JSON into a SignalBag.

    Malformed or out-of-range leaves are discarded (not propagated) and
    reported back as dotted paths. Non-mapping input yields an empty bag.
    """
    if isinstance(raw, SignalBag):
        return raw, []
    if not isinstance(raw, Mapping):
        return SignalBag(), ["<root>"] if raw is not None else []

    payload = copy.deepcopy(dict(raw))
    dropped: list[str] = []
    for _ in range(MAX_PRUNE_PASSES):
        try:
            return SignalBag.model_validate(payload), dropped
        except ValidationError as exc:
            removed = False
            for err in exc.errors():
                path = _drop_path(payload, tuple(err["loc"]))
                if path:
                    dropped.append(path)
                    removed = True
            if not removed:
                break
    return SignalBag(), dropped + ["<root>"]


# =============================================================================
# SCORING PRIMITIVES
# =============================================================================


class Evidence(BaseModel):
    """One signal's scored contribution plus its justification."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    delta: float = Field(..., description="Signed contribution to the raw score")
    reason: str = Field(..., min_length=1)


class ScoreResult(BaseModel):
    """Output of one domain scorer before bucketing."""

    model_config = ConfigDict(extra="forbid")

    raw_score: float = 0.0
    data_points: int = Field(default=0, ge=0)
    evidence: list[Evidence] = Field(default_factory=list)
    facts: dict[str, Any] = Field(default_factory=dict, description="Auxiliary outputs")

    def add(self, delta: float, reason: str, counted: bool = True) -> None:
        """Record a contribution; only present, consulted signals are counted."""
        self.raw_score += delta
        self.evidence.append(Evidence(delta=delta, reason=reason))
        if counted:
            self.data_points += 1

    def note(self, reason: str, counted: bool = False) -> None:
        """Record reasoning that does not move the score."""
        self.add(0.0, reason, counted=counted)

    def clamp(self, low: float, high: float) -> None:
        self.raw_score = min(max(self.raw_score, low), high)

    @property
    def reasoning(self) -> list[str]:
        return [e.reason for e in self.evidence]


# =============================================================================
# PROFILE (output contract)
# =============================================================================


class BucketedAttribute(BaseModel):
    """A categorical profile attribute with confidence and reasoning."""

    model_config = ConfigDict(extra="forbid")

    value: str = Field(..., min_length=1, description="Display value")
    bucket: str = Field(..., min_length=1, description="Closed bucket key")
    confidence: int = Field(default=0, ge=0, le=100)
    data_points: int = Field(default=0, ge=0)
    reasoning: list[str] = Field(default_factory=list)
    evidence: list[Evidence] = Field(default_factory=list)
    details: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def unknown(cls, reasoning: list[str] | None = None) -> BucketedAttribute:
        return cls(value=UNKNOWN, bucket=UNKNOWN, confidence=0, reasoning=reasoning or [])

    @classmethod
    def failed(cls) -> BucketedAttribute:
        return cls.unknown(["scorer failed"])

    @property
    def is_unknown(self) -> bool:
        return self.bucket == UNKNOWN


def _unknown() -> BucketedAttribute:
    return BucketedAttribute.unknown()


class LifestyleHabits(BaseModel):
    """Caffeine, alcohol, smoking and travel guesses."""

    model_config = ConfigDict(extra="forbid")

    caffeine: BucketedAttribute = Field(default_factory=_unknown)
    drinks_alcohol: BucketedAttribute = Field(default_factory=_unknown)
    smokes: BucketedAttribute = Field(default_factory=_unknown)
    travel: BucketedAttribute = Field(default_factory=_unknown)


class Profile(BaseModel):
    """The assembled, immutable-per-session profile."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    age: BucketedAttribute = Field(default_factory=_unknown)
    income: BucketedAttribute = Field(default_factory=_unknown)
    occupation: BucketedAttribute = Field(default_factory=_unknown)
    education: BucketedAttribute = Field(default_factory=_unknown)
    device_tier: BucketedAttribute = Field(default_factory=_unknown)
    parental_status: BucketedAttribute = Field(default_factory=_unknown)
    stress_level: BucketedAttribute = Field(default_factory=_unknown)
    sleep_schedule: BucketedAttribute = Field(default_factory=_unknown)
    mood: BucketedAttribute = Field(default_factory=_unknown)
    lifestyle_habits: LifestyleHabits = Field(default_factory=LifestyleHabits)
    personality_flags: BucketedAttribute = Field(default_factory=_unknown)
    interests: BucketedAttribute = Field(default_factory=_unknown)
    household: BucketedAttribute = Field(default_factory=_unknown)
    authenticity: BucketedAttribute = Field(default_factory=_unknown)
    work_style: BucketedAttribute = Field(default_factory=_unknown)
    spending: BucketedAttribute = Field(default_factory=_unknown)

    overall_confidence: int = Field(default=0, ge=0, le=100)
    insights: list[str] = Field(default_factory=list)
    source: ProfileSource = "local"

    def attributes(self) -> Iterator[tuple[str, BucketedAttribute]]:
        """Yield (dotted name, attribute) for every bucketed dimension."""
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, BucketedAttribute):
                yield name, value
            elif isinstance(value, LifestyleHabits):
                for habit in LifestyleHabits.model_fields:
                    yield f"{name}.{habit}", getattr(value, habit)

    def attribute(self, dotted: str) -> BucketedAttribute:
        """Look up an attribute by dotted name (e.g. 'lifestyle_habits.smokes')."""
        for name, attr in self.attributes():
            if name == dotted:
                return attr
        raise KeyError(dotted)
