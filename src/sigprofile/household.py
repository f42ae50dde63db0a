"""
sigprofile household - parental status and living situation.

Both scorers consume the upstream age and income attributes. An Unknown
upstream attribute is treated as absent: age-gated rules fall back to a
neutral assumed age and income rules are skipped.
"""

from __future__ import annotations

from .buckets import CONFIDENCE, PARENTAL_BUCKETS, approx_age, to_attribute
from .models import BucketedAttribute, ScoreResult, SignalBag
from .reference import ScoringContext

# Age assumed for gating when the age attribute is Unknown
ASSUMED_AGE = 30

HIGH_INCOME = frozenset({"high", "wealthy"})
MIDDLE_INCOME = frozenset({"upper-middle", "middle", "lower-middle"})
LOW_INCOME = frozenset({"low", "poverty"})

PARENTAL_STATUS = {
    "very_likely": "Very likely has children",
    "likely": "Likely has children",
    "probably": "Probably has children",
    "possibly": "Possibly has children",
    "uncertain": "May or may not have children",
    "less_likely": "Less likely to have children",
    "unlikely": "Unlikely to have children",
    "very_unlikely": "Very unlikely to have children",
}

# (lowest age inclusive, delta, reason), youngest band first
AGE_BASE = (
    (0, -40, "Age under 22 is statistically unlikely to have children"),
    (22, -15, "Age 22-25 is a less common parenting age"),
    (26, 5, "Age 26-29 is entering prime parenting years"),
    (30, 20, "Age 30-39 is the peak parenting age range"),
    (40, 25, "Age 40-49 very likely has children, possibly older"),
    (50, 15, "Age 50+ likely has adult or teenage children"),
)


def _income_bucket(income: BucketedAttribute | None) -> str | None:
    if income is None or income.is_unknown:
        return None
    return income.bucket


def _between(age: int, low: int, high: int) -> bool:
    return low <= age <= high


# =============================================================================
# PARENTAL STATUS
# =============================================================================


def score_parental(
    bag: SignalBag,
    ctx: ScoringContext,
    age: BucketedAttribute | None = None,
    income: BucketedAttribute | None = None,
) -> ScoreResult:
    """Signed parent likelihood in [-100, 100]."""
    result = ScoreResult()
    known_age = approx_age(age) if age is not None else None
    a = known_age if known_age is not None else ASSUMED_AGE
    level = _income_bucket(income)

    t = bag.temporal
    hour, minute, day = t.hour, t.minute or 0, t.day_of_week
    weekday = t.is_weekday is True
    weekend = t.is_weekend is True
    attention = bag.behavioral.attention
    tabs = attention.tab_switches
    mouse = bag.behavioral.mouse
    hw = bag.hardware

    # Age foundation
    if known_age is not None:
        for low, delta, reason in reversed(AGE_BASE):
            if known_age >= low:
                result.add(delta, reason)
                break

    # Income x age
    if level in HIGH_INCOME:
        if _between(a, 30, 50):
            result.add(15, "High income at a prime age is a strong family formation indicator")
        elif 25 <= a < 30:
            result.add(8, "High income in the late twenties")
    elif level in MIDDLE_INCOME:
        if _between(a, 28, 45):
            result.add(10, "Middle income in prime years suggests a family")
    elif level in LOW_INCOME:
        if a >= 28:
            result.add(5, "Lower income past 28 with some family likelihood")

    if hour is not None and weekday:
        if 9 <= hour < 15 and _between(a, 28, 50):
            result.add(12, "Weekday school-hours browsing suggests kids may be at school")
        if 15 <= hour < 18 and _between(a, 28, 45) and tabs is not None and tabs > 8:
            result.add(8, "After-school multitasking suggests managing children")
        if (20 <= hour < 22 or (hour == 22 and minute <= 30)) and _between(a, 26, 50):
            result.add(18, "Weeknight 20:00-22:30 browsing matches the post-bedtime window")
            if tabs is not None and tabs < 3:
                result.add(5, "Focused evening browsing suggests precious quiet time", counted=False)
        if ((hour == 22 and minute > 30) or hour == 23) and _between(a, 30, 50):
            result.add(8, "Late weeknight browsing suggests possible older children")
        if 5 <= hour < 7 and _between(a, 26, 45):
            result.add(15, "Early weekday morning suggests young children waking early")
        if 0 <= hour < 4 and _between(a, 28, 40):
            result.add(-12, "Small-hours weeknight browsing is unusual for parents of young kids")

    if hour is not None and weekend:
        if 6 <= hour < 9 and _between(a, 26, 45):
            result.add(15, "Early weekend morning activity suggests young children")
        if 10 <= hour < 12 and _between(a, 30, 50):
            result.add(5, "Late weekend morning at home")
        if 13 <= hour < 17 and _between(a, 28, 50):
            if attention.focus_time is not None and attention.focus_time > 300_000:
                result.add(-5, "Long focused weekend afternoon suggests no young kids")
            elif tabs is not None and tabs > 5:
                result.add(10, "Interrupted weekend browsing suggests child supervision")
        if day == 6 and 19 <= hour < 22 and _between(a, 28, 50) and level not in HIGH_INCOME:
            result.add(8, "Home on Saturday evening, possibly family time")
        if day == 6 and hour >= 23 and _between(a, 28, 42):
            result.add(-8, "Late Saturday night is less common for young parents")

    if hour is not None and day == 5 and 18 <= hour < 22 and _between(a, 28, 50):
        result.add(10, "Home on Friday evening suggests family obligations")

    # School calendar
    if hour is not None and t.month is not None and weekday and _between(a, 28, 50):
        summer = 6 <= t.month <= 8
        school_time = t.month >= 9 or t.month <= 5
        if summer and 9 <= hour < 17 and tabs is not None and tabs > 6:
            result.add(10, "Interrupted summer weekday suggests kids home from school")
        if school_time and 9 <= hour < 14:
            result.add(8, "School-year daytime availability suggests school-age children")

    # Interruption patterns
    if tabs is not None and tabs > 10 and (attention.times_went_afk or 0) > 2 and _between(a, 25, 50):
        result.add(8, "Frequently interrupted browsing suggests caretaker duties")
    if (
        attention.focus_time is not None
        and attention.focus_time < 120_000
        and (mouse.movements or 0) > 50
        and _between(a, 26, 50)
    ):
        result.add(5, "Brief interrupted sessions suggest a busy household")
    if hour is not None and 17 <= hour < 19 and _between(a, 26, 50):
        if (mouse.rage_clicks or 0) > 0 or (mouse.erratic_movements or 0) > 8:
            result.add(10, "Stressed behaviour around dinner time suggests managing kids")
    if (
        hour is not None
        and 21 <= hour <= 23
        and weekday
        and tabs is not None
        and tabs < 3
        and (bag.behavioral.scroll.scroll_events or 0) > 10
        and _between(a, 28, 50)
    ):
        result.add(12, "Calm late-evening reading suggests quiet time post-bedtime")

    # Device
    if hw.touch_support and (hw.max_touch_points or 0) >= 5:
        if hour is not None and weekday and 9 <= hour < 18 and _between(a, 26, 50):
            result.add(6, "Touch device during the day suggests an on-the-go parent")
    battery = hw.battery
    if battery and battery.level is not None and battery.level < 0.3 and battery.charging is False:
        if _between(a, 26, 50):
            result.add(5, "Low battery, not charging, suggests someone away from a desk")
    if (
        hw.touch_support
        and hw.screen_width is not None
        and 768 <= hw.screen_width <= 1366
        and _between(a, 28, 50)
    ):
        result.add(8, "Tablet-class device, common in households with children")

    # Social logins
    logins = bag.social_logins
    if logins.known:
        if logins.has("facebook") and a >= 28:
            result.add(12, "Facebook login, heavily used by parents for school and family")
        count = sum(logins.has(s) for s in ("google", "facebook", "twitter"))
        if count >= 2 and _between(a, 30, 50):
            result.add(6, "Several social accounts suggest a family-connected user")

    # Location
    city = bag.network.city
    if city:
        if ctx.reference.is_family_city(city) and a >= 28:
            result.add(10, f"{city} is a family-friendly suburban area")
        if ctx.reference.is_singles_city(city) and a < 40:
            result.add(-8, f"{city} skews toward a younger, single demographic")

    result.clamp(-100, 100)
    result.facts["approx_age"] = a
    return result


def parental_status_text(bucket: str, bag: SignalBag, age: int) -> str:
    """Status sentence plus the time-window suffix that matched."""
    status = PARENTAL_STATUS[bucket]
    t = bag.temporal
    hour = t.hour
    weekday = t.is_weekday is True

    if bucket == "very_likely":
        if age >= 40:
            status = "Very likely has children (possibly teenagers)"
        elif age < 35:
            status = "Very likely has young children"
    elif bucket == "likely" and hour is not None and weekday and 20 <= hour <= 22:
        status = "Likely has children (evening browsing pattern)"

    if hour is not None and ("Likely" in status or "Probably" in status):
        if weekday and 5 <= hour < 7:
            status += " (early riser with kids)"
        elif weekday and 20 <= hour <= 22:
            status += " (post-bedtime browser)"
        elif t.is_weekend is True and 6 <= hour < 9:
            status += " (no sleeping in with kids)"
    return status


def assess_parental(
    bag: SignalBag,
    ctx: ScoringContext,
    age: BucketedAttribute | None = None,
    income: BucketedAttribute | None = None,
) -> BucketedAttribute:
    result = score_parental(bag, ctx, age, income)
    bucket = PARENTAL_BUCKETS.label(result.raw_score)
    value = parental_status_text(bucket, bag, result.facts["approx_age"])
    details = {"score": f"{result.raw_score:.0f}", "approx_age": str(result.facts["approx_age"])}
    return to_attribute(result, value, bucket, CONFIDENCE["parental_status"], details)


# =============================================================================
# HOUSEHOLD
# =============================================================================

HOMEOWNER_TEXT = {
    "likely_homeowner": "Likely homeowner",
    "renting_or_recent": "Renting or recently purchased",
    "possibly_owns": "Possibly owns, likely renting",
    "renter": "Renter",
    "likely_renting": "Likely renting",
}

HIGH_COL = 1.4


def score_household(
    bag: SignalBag,
    ctx: ScoringContext,
    age: BucketedAttribute | None = None,
    income: BucketedAttribute | None = None,
) -> ScoreResult:
    """Homeowner class plus car, social type, pet and life situation facts."""
    result = ScoreResult()
    known_age = approx_age(age) if age is not None else None
    a = known_age if known_age is not None else ASSUMED_AGE
    level = _income_bucket(income)

    if level is not None:
        if level in HIGH_INCOME:
            if a >= 32:
                homeowner = "likely_homeowner"
                result.add(0, "High income plus age suggests homeownership")
            else:
                homeowner = "renting_or_recent"
                result.add(0, "High income but young, renting or recently bought")
        elif level == "upper-middle":
            homeowner = "possibly_owns"
            result.add(0, "Upper-middle income, ownership possible")
        elif level in LOW_INCOME:
            homeowner = "renter"
            result.add(0, "Lower income suggests renting")
        else:
            homeowner = "likely_renting"
            result.add(0, "Middle income suggests renting")
        result.facts["homeowner"] = homeowner

    city = bag.network.city
    if city:
        if ctx.reference.is_transit_city(city):
            if level in HIGH_INCOME:
                car = "Possibly (urban but high income)"
            else:
                car = "Likely no car (urban location)"
            result.add(0, f"{city} is a transit-friendly city")
        elif level in LOW_INCOME:
            car = "Unknown (may rely on public transit)"
            result.add(0, "Lower income outside a transit city")
        else:
            car = "Likely owns a vehicle"
            result.add(0, f"{city} is car-dependent")
        result.facts["car_owner"] = car

    attention = bag.behavioral.attention
    if attention.tab_switches is not None:
        if attention.tab_switches > 10:
            social = "Social multitasker"
            result.add(0, "High tab switching suggests active communication habits")
        elif attention.tab_switches < 3 and (attention.focus_time or 0) > 60_000:
            social = "Focused introvert"
            result.add(0, "Few tab switches with long focus")
        else:
            social = "Balanced"
            result.add(0, "Moderate tab switching")
        result.facts["social_type"] = social

    situation = ""
    if city:
        col = ctx.reference.city(city).entry.col
        situation = f"{city} (high cost of living)" if col > HIGH_COL else f"{city} area"
    if level in HIGH_INCOME:
        situation = f"{situation}, comfortable lifestyle" if situation else "Comfortable lifestyle"
    if bag.vpn.likely:
        situation = f"{situation} (possibly remote/traveling)" if situation else "Location obscured (VPN)"
        result.add(0, "VPN in use")
    if situation:
        result.facts["life_situation"] = situation

    return result


def assess_household(
    bag: SignalBag,
    ctx: ScoringContext,
    age: BucketedAttribute | None = None,
    income: BucketedAttribute | None = None,
) -> BucketedAttribute:
    result = score_household(bag, ctx, age, income)
    homeowner = result.facts.get("homeowner")
    if homeowner is None:
        # Homeownership is the headline; without income there is nothing to bucket
        return BucketedAttribute.unknown(result.reasoning)

    details = {"pet_owner": "Unknown (no pet-related signals)"}
    for key in ("car_owner", "social_type", "life_situation"):
        if key in result.facts:
            details[key] = result.facts[key]
    return to_attribute(
        result, HOMEOWNER_TEXT[homeowner], homeowner, CONFIDENCE["household"], details
    )
