"""
sigprofile lifestyle - caffeine, alcohol, smoking and travel habits.

The regional table is the dominant prior; age band factors and
occupational/behavioural adjustments are layered on top. Each habit is
clamped to a bounded probability-like score and rendered as a phrase that
names its top one or two contributing signals.
"""

from __future__ import annotations

from .buckets import (
    ALCOHOL_BUCKETS,
    CAFFEINE_BUCKETS,
    CONFIDENCE,
    SMOKING_BUCKETS,
    TRAVEL_BUCKETS,
    approx_age,
    to_attribute,
)
from .models import BucketedAttribute, LifestyleHabits, ScoreResult, SignalBag
from .reference import CountryLifestyle, ScoringContext, TableHit

TECH_WORDS = ("developer", "engineer", "programmer")
CREATIVE_WORDS = ("creative", "designer", "writer")
TRAVEL_WORDS = ("consult", "sales", "executive", "business")
MOBILE_WORK_WORDS = ("remote", "freelance")


class Upstream:
    """Already-assessed attributes the lifestyle scorers read."""

    def __init__(
        self,
        age: BucketedAttribute | None = None,
        income: BucketedAttribute | None = None,
        occupation: BucketedAttribute | None = None,
        device_tier: BucketedAttribute | None = None,
        developer: bool = False,
    ):
        self.age = None if age is None or age.is_unknown else age
        self.income = None if income is None or income.is_unknown else income
        self.occupation = None if occupation is None or occupation.is_unknown else occupation
        self.device_tier = None if device_tier is None or device_tier.is_unknown else device_tier
        self.developer = developer

    @property
    def approx_age(self) -> int | None:
        return approx_age(self.age) if self.age else None

    @property
    def occupation_text(self) -> str:
        return self.occupation.value.lower() if self.occupation else ""

    @property
    def income_class(self) -> str | None:
        """Collapsed income: high, medium or low."""
        if self.income is None:
            return None
        bucket = self.income.bucket
        if bucket in ("high", "wealthy"):
            return "high"
        if bucket in ("low", "poverty"):
            return "low"
        return "medium"


def _region(bag: SignalBag, ctx: ScoringContext) -> TableHit[CountryLifestyle] | None:
    if not bag.network.country:
        return None
    return ctx.reference.country(bag.network.country)


def _region_base(region: TableHit[CountryLifestyle] | None, ctx: ScoringContext) -> CountryLifestyle:
    return region.entry if region else ctx.reference.locale.country_default


def _signals(result: ScoreResult) -> list[str]:
    return result.facts.setdefault("signals", [])


def _signal(result: ScoreResult, delta: float, signal: str, counted: bool = True) -> None:
    result.add(delta, signal, counted=counted)
    _signals(result).append(signal)


# =============================================================================
# CAFFEINE
# =============================================================================


def score_caffeine(bag: SignalBag, ctx: ScoringContext, up: Upstream) -> ScoreResult:
    band = ctx.reference.age_band(up.approx_age, "caffeine")
    result = ScoreResult(raw_score=band.caffeine)
    _signals(result)
    if up.age:
        result.note(f"Age band {band.label} caffeine base {band.caffeine}", counted=True)

    hour = bag.temporal.hour
    if hour is not None:
        if 5 <= hour < 8:
            _signal(result, 15, "early morning browsing")
        elif hour >= 22 or hour < 4:
            _signal(result, 20, "late night activity")
        elif 14 <= hour < 16:
            _signal(result, 10, "afternoon slump time")
        else:
            result.note(f"Browsing at {hour}:00", counted=True)

    occupation = up.occupation_text
    if occupation:
        if any(w in occupation for w in TECH_WORDS):
            _signal(result, 25, "tech worker (high caffeine industry)")
        elif "student" in occupation:
            _signal(result, 15, "student lifestyle")
        elif any(w in occupation for w in CREATIVE_WORDS):
            _signal(result, 15, "creative profession")
        else:
            result.note(f"Occupation {up.occupation.value}", counted=True)

    wpm = bag.behavioral.typing.average_wpm
    if wpm is not None and wpm > 70:
        _signal(result, 10, "fast typing speed")
    erratic = bag.behavioral.mouse.erratic_movements
    if erratic is not None and erratic > 10:
        _signal(result, 5, "jittery mouse movements")
    if up.developer:
        _signal(result, 15, "developer profile")

    region = _region(bag, ctx)
    if region:
        if region.entry.coffee == "high":
            _signal(result, 10, f"{bag.network.country} has high coffee culture")
        else:
            result.note(f"{region.describe()} has {region.entry.coffee} coffee culture", counted=True)

    result.clamp(10, 95)
    return result


def caffeine_phrase(score: float, signals: list[str]) -> str:
    if score >= 75:
        return f"Highly likely ({', '.join(signals[:2]) or 'statistical average'})"
    if score >= 55:
        return f"Likely ({signals[0] if signals else 'statistical average'})"
    if score >= 35:
        return "Moderate consumption likely"
    return "Lower than average consumption"


# =============================================================================
# ALCOHOL
# =============================================================================


def score_alcohol(bag: SignalBag, ctx: ScoringContext, up: Upstream) -> ScoreResult:
    band = ctx.reference.age_band(up.approx_age, "alcohol")
    result = ScoreResult(raw_score=band.alcohol)
    _signals(result)
    result.facts["pattern"] = band.alcohol_pattern
    if up.age:
        result.note(f"Age band {band.label} alcohol base {band.alcohol}", counted=True)

    region = _region(bag, ctx)
    if region:
        country = bag.network.country
        culture = region.entry.alcohol
        result.facts["low_culture"] = culture == "low"
        if culture == "high":
            _signal(result, 15, f"{country} drinking culture")
        elif culture == "low":
            _signal(result, -30, f"{country} low alcohol culture")
        else:
            result.note(f"{region.describe()} has a moderate drinking culture", counted=True)

    t = bag.temporal
    hour, day = t.hour, t.day_of_week
    if hour is not None and day is not None:
        if t.is_weekend and 18 <= hour < 23:
            _signal(result, 15, "weekend evening")
        elif day == 5 and hour >= 17:
            _signal(result, 20, "Friday happy hour time")
        elif t.is_weekday and 21 <= hour <= 23:
            _signal(result, 5, "weeknight wind-down")
        if t.is_weekday and 9 <= hour <= 17:
            result.add(-5, "Working hours")

    income = up.income_class
    if income == "high":
        _signal(result, 10, "higher income (social drinking)")
    elif income == "low":
        result.add(-5, "Lower income")

    referrer = (bag.browser.referrer or "").lower()
    if "facebook" in referrer or "instagram" in referrer:
        _signal(result, 5, "social media active")

    result.clamp(5, 85)
    return result


def alcohol_phrase(result: ScoreResult, country: str | None) -> tuple[str, str]:
    """(display value, bucket); a low-alcohol culture always reads Unlikely."""
    if result.facts.get("low_culture"):
        return f"Unlikely ({country} cultural factors)", "unlikely"
    score = result.raw_score
    signals = result.facts["signals"]
    bucket = ALCOHOL_BUCKETS.label(score)
    if score >= 70:
        return f"Likely social drinker ({signals[0] if signals else result.facts['pattern']})", bucket
    if score >= 50:
        return f"Possibly ({signals[0] if signals else 'moderate probability'})", bucket
    if score >= 30:
        return "Occasional at most", bucket
    return "Unlikely or very light", bucket


# =============================================================================
# SMOKING
# =============================================================================


def score_smoking(bag: SignalBag, ctx: ScoringContext, up: Upstream) -> ScoreResult:
    band = ctx.reference.age_band(up.approx_age, "smoking")
    region = _region(bag, ctx)
    base = _region_base(region, ctx)
    result = ScoreResult(raw_score=base.smoking * band.smoking)
    _signals(result)

    def scale(factor: float, signal: str | None, reason: str) -> None:
        before = result.raw_score
        after = before * factor
        result.add(after - before, reason)
        if signal:
            _signals(result).append(signal)

    if region:
        result.note(f"{region.describe()} adult smoking rate {base.smoking:g}%", counted=True)
    if up.age:
        result.note(f"Age band {band.label} multiplier x{band.smoking:g}", counted=True)

    income = up.income_class
    if region and ctx.reference.is_developed(bag.network.country or ""):
        if income == "high":
            scale(0.5, "high income (lower smoking rates)", "High income in a developed country")
        elif income == "low":
            scale(1.4, "income correlation", "Lower income in a developed country")

    occupation = up.occupation_text
    if up.developer or any(w in occupation for w in ("developer", "engineer", "tech")):
        scale(0.6, "tech industry (lower rates)", "Tech workers smoke less")

    if up.age and band.label in ("18-24", "25-34"):
        _signals(result).append("younger generation (declining smoking rates)")

    result.clamp(2, 50)
    return result


def smoking_phrase(score: float, signals: list[str]) -> str:
    if score >= 25:
        extra = f", {signals[0]}" if signals else ""
        return f"Possible ({round(score)}% regional rate{extra})"
    if score >= 15:
        return f"Unlikely ({signals[0] if signals else 'below average probability'})"
    if score >= 8:
        return f"Very unlikely ({', '.join(signals[:2]) or 'low probability'})"
    return "Highly unlikely (multiple low-risk factors)"


# =============================================================================
# TRAVEL
# =============================================================================


def score_travel(bag: SignalBag, ctx: ScoringContext, up: Upstream) -> ScoreResult:
    result = ScoreResult(raw_score=30)
    _signals(result)

    income = up.income_class
    if income == "high":
        _signal(result, 35, "high disposable income")
    elif income == "medium":
        _signal(result, 15, "moderate income")
    elif income == "low":
        _signal(result, -10, "budget constraints")

    languages = bag.browser.languages
    if len(languages) >= 3:
        _signal(result, 20, f"speaks {len(languages)}+ languages")
    elif len(languages) == 2:
        _signal(result, 10, "bilingual")

    if up.device_tier and up.device_tier.bucket == "premium":
        _signal(result, 10, "premium device")

    occupation = up.occupation_text
    if any(w in occupation for w in TRAVEL_WORDS):
        _signal(result, 20, "travel-heavy profession")
    elif any(w in occupation for w in MOBILE_WORK_WORDS):
        _signal(result, 15, "location-independent work")

    local_tz = bag.temporal.local_timezone
    network_tz = bag.network.timezone
    if local_tz and network_tz:
        if network_tz.split("/")[0] not in local_tz:
            _signal(result, 15, "timezone mismatch (possible travel)")
        else:
            result.note("Browser timezone matches network location", counted=True)

    result.clamp(10, 95)
    return result


def travel_phrase(score: float, signals: list[str]) -> str:
    if score >= 75:
        return f"Frequently ({', '.join(signals[:2])})"
    if score >= 55:
        return f"Regularly ({signals[0] if signals else 'moderate indicators'})"
    if score >= 40:
        return f"Occasionally ({signals[0] if signals else 'some travel likely'})"
    if score >= 25:
        return "Rarely (limited indicators)"
    return f"Prioritizes local ({signals[0] if signals else 'low travel indicators'})"


# =============================================================================
# ASSESSMENT
# =============================================================================


def assess_lifestyle(bag: SignalBag, ctx: ScoringContext, up: Upstream | None = None) -> LifestyleHabits:
    up = up or Upstream()
    params = CONFIDENCE["lifestyle"]

    caffeine = score_caffeine(bag, ctx, up)
    bucket = CAFFEINE_BUCKETS.label(caffeine.raw_score)
    caffeine_attr = to_attribute(
        caffeine, caffeine_phrase(caffeine.raw_score, caffeine.facts["signals"]), bucket, params,
        {"score": f"{caffeine.raw_score:.0f}"},
    )

    alcohol = score_alcohol(bag, ctx, up)
    value, bucket = alcohol_phrase(alcohol, bag.network.country)
    alcohol_attr = to_attribute(alcohol, value, bucket, params, {"score": f"{alcohol.raw_score:.0f}"})

    smoking = score_smoking(bag, ctx, up)
    bucket = SMOKING_BUCKETS.label(smoking.raw_score)
    smoking_attr = to_attribute(
        smoking, smoking_phrase(smoking.raw_score, smoking.facts["signals"]), bucket, params,
        {"score": f"{smoking.raw_score:.0f}"},
    )

    travel = score_travel(bag, ctx, up)
    bucket = TRAVEL_BUCKETS.label(travel.raw_score)
    travel_attr = to_attribute(
        travel, travel_phrase(travel.raw_score, travel.facts["signals"]), bucket, params,
        {"score": f"{travel.raw_score:.0f}"},
    )

    return LifestyleHabits(
        caffeine=caffeine_attr,
        drinks_alcohol=alcohol_attr,
        smokes=smoking_attr,
        travel=travel_attr,
    )
