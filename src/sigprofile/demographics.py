"""
sigprofile demographics - age, income, occupation/education and device value.

Each score_* function is pure: (bag, context[, upstream]) -> ScoreResult.
Each assess_* companion buckets the result into a BucketedAttribute.
"""

from __future__ import annotations

from .buckets import (
    AGE_BUCKETS,
    CONFIDENCE,
    DEVICE_BUCKETS,
    INCOME_BUCKETS,
    INCOME_ESTIMATES,
    round_to_hundred,
    to_attribute,
)
from .models import BucketedAttribute, ScoreResult, SignalBag
from .reference import GpuEntry, ScoringContext, TableHit
from .referrer import analyze_referrer

# =============================================================================
# SHARED SIGNAL HELPERS
# =============================================================================


def hour_bucket(hour: int) -> str:
    """Coarse time-of-day bucket."""
    if 5 <= hour < 7:
        return "early_morning"
    if 7 <= hour < 9:
        return "morning"
    if 9 <= hour < 17:
        return "work_hours"
    if 17 <= hour < 19:
        return "afternoon"
    if 19 <= hour < 22:
        return "evening"
    if hour >= 22 or hour < 1:
        return "night"
    return "late_night"


def gpu_hit(bag: SignalBag, ctx: ScoringContext) -> TableHit[GpuEntry] | None:
    if not bag.hardware.gpu:
        return None
    return ctx.reference.gpu(bag.hardware.gpu)


def gpu_years_old(bag: SignalBag, ctx: ScoringContext, entry: GpuEntry) -> int | None:
    year = ctx.year_for(bag)
    if year is None:
        return None
    return max(0, year - entry.year)


def short_gpu(name: str, words: int = 3) -> str:
    return " ".join(name.split()[:words])


def is_apple(bag: SignalBag) -> bool:
    return bag.browser.is_apple_vendor or bag.hardware.is_apple_silicon


def is_gaming_gpu(bag: SignalBag) -> bool:
    gpu = bag.hardware.gpu_lower
    return any(g in gpu for g in ("rtx", "gtx", "radeon", "rx "))


def is_work_hours_weekday(bag: SignalBag) -> bool:
    t = bag.temporal
    return bool(t.is_work_hours and t.is_weekday)


def fast_typist(bag: SignalBag, threshold: float = 60) -> bool:
    wpm = bag.behavioral.typing.average_wpm
    return wpm is not None and wpm > threshold


def wallet_count(bag: SignalBag) -> int:
    return bag.crypto.wallet_count


# =============================================================================
# AGE
# =============================================================================

# Enhanced-heuristic nudges, positive = younger
SOCIAL_AGE_NUDGES = {
    "facebook_only": -1.0,
    "reddit_twitter_no_facebook": 1.0,
    "github": 0.5,
}
# Referrer age indicators are in years (positive = older)
AGE_INDICATOR_SCALE = 10
# Locale tech adoption plus referrer tech indicator
TECH_SOPHISTICATION = 120


def score_age(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Signed age score; positive leans younger."""
    result = ScoreResult()
    hw = bag.hardware

    if bag.temporal.hour is not None:
        bucket = hour_bucket(bag.temporal.hour)
        if bucket in ("late_night", "night"):
            result.add(2, "Late-night browsing leans toward a younger visitor")
        elif bucket == "early_morning":
            result.add(-2, "Early-morning browsing leans toward an older visitor")

    gpu = gpu_hit(bag, ctx)
    if gpu:
        lower = hw.gpu_lower
        if gpu.entry.tier in ("premium", "high"):
            if "rtx 4" in lower or "rx 7" in lower:
                result.add(1, "Current-generation gaming GPU suggests a younger enthusiast")
            elif "quadro" in lower or "a100" in lower:
                result.add(-1, "Workstation GPU suggests an established career")
            else:
                result.add(0, f"High-end GPU ({gpu.describe()}) with no generational lean")
        elif gpu.entry.tier == "budget" and hw.cpu_cores is not None and hw.cpu_cores < 4:
            result.add(-1, "Budget GPU on a low-core machine", counted=False)

    if hw.is_apple_silicon:
        result.add(-0.5, "Apple Silicon skews toward creative and professional users")

    if len(bag.browser.languages) > 2:
        result.add(0.5, "Several browser languages suggest a younger or international visitor")

    if bag.crypto.any_wallet:
        result.add(2, "Crypto wallet presence suggests a tech-forward visitor under 40")
        if bag.crypto.has_wallet("phantom") or bag.crypto.has_wallet("solflare"):
            result.add(1, "Solana-family wallet skews under 35", counted=False)

    if bag.tracking.ad_blocker:
        result.add(0.5, "Ad blocker use skews younger")

    if bag.bot_detection.dev_tools_open:
        result.add(1, "Open DevTools suggests a tech professional, likely 22-38")

    if bag.browser.is_developer_variant:
        result.add(1, "Developer browser build suggests 22-35")

    if hw.has_screen:
        w, h = hw.screen_width, hw.screen_height
        if ctx.reference.is_professional_screen(w, h):
            if w >= 3440:
                result.add(-0.5, "Ultrawide or larger professional display")
            else:
                result.add(0, "Professional-class display")
        elif ctx.reference.is_budget_screen(w, h):
            if gpu and gpu.entry.tier != "budget":
                result.add(1, "Decent GPU on a budget screen, money went to the tower")
            else:
                result.add(0, "Budget-class display")

    wpm = bag.behavioral.typing.average_wpm
    if wpm is not None and wpm > 0:
        keystrokes = bag.behavioral.typing.total_keystrokes or 0
        if wpm > 70:
            result.add(1, "Fast typing suggests a digital native")
        elif wpm < 30 and keystrokes > 20:
            result.add(-1, "Slow, deliberate typing")

    if hw.touch_support and (hw.max_touch_points or 0) > 5:
        result.add(0.5, "Touch-first device skews younger")

    logins = bag.social_logins
    if logins.known:
        fb, tw, rd, gh = (logins.has(s) for s in ("facebook", "twitter", "reddit", "github"))
        if fb and not (tw or rd or gh):
            result.add(SOCIAL_AGE_NUDGES["facebook_only"], "Facebook-only login skews 35+")
        if gh:
            result.add(SOCIAL_AGE_NUDGES["github"], "GitHub login suggests developer ages 22-42")
        if (rd or tw) and not fb:
            result.add(
                SOCIAL_AGE_NUDGES["reddit_twitter_no_facebook"],
                "Reddit/Twitter without Facebook skews younger",
            )

    ref = analyze_referrer(bag.browser.referrer)
    if ref and ref.is_direct:
        ref = None
    if ref and ref.age_indicator:
        lean = "younger" if ref.age_indicator < 0 else "older"
        result.add(-ref.age_indicator / AGE_INDICATOR_SCALE, f"Referrer skews {lean} ({ref.describe()})")

    tech = ref.tech_indicator if ref else 0
    if bag.browser.languages:
        tech += ctx.reference.language(bag.browser.languages[0]).entry.tech_adoption
    if tech > TECH_SOPHISTICATION:
        result.add(1, f"High tech sophistication (locale and referrer score {tech})", counted=False)

    result.facts["normalized"] = result.raw_score / max(result.data_points, 1)
    return result


def assess_age(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_age(bag, ctx)
    normalized = result.facts["normalized"]
    label = AGE_BUCKETS.label(normalized)
    return to_attribute(
        result, label, label, CONFIDENCE["age"], {"normalized_score": f"{normalized:.2f}"}
    )


# =============================================================================
# INCOME
# =============================================================================

GPU_TIER_INCOME = {"premium": 25, "high": 15, "mid": 0, "budget": -10}
ISP_TIER_INCOME = {"enterprise": 20, "premium": 10, "budget": -10}
SCREEN_INCOME_MIDPOINT = 5
SCREEN_INCOME_STEP = 3
LANGUAGE_INCOME_MIDPOINT = 3
LANGUAGE_INCOME_STEP = 4
HIGH_COL_INDEX = 8


def score_income(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Income score on a 0-100 scale, baseline 50."""
    result = ScoreResult(raw_score=50)
    hw = bag.hardware
    ref = ctx.reference

    gpu = gpu_hit(bag, ctx)
    if gpu:
        tier = gpu.entry.tier
        reasons = {
            "premium": f"Premium GPU ({short_gpu(hw.gpu or '')}) indicates high disposable income",
            "high": "High-end GPU indicates above-average income",
            "mid": "Mid-range GPU suggests middle income",
            "budget": "Budget or integrated GPU suggests cost-consciousness",
        }
        result.add(GPU_TIER_INCOME[tier], reasons[tier])

        years = gpu_years_old(bag, ctx, gpu.entry)
        if years is not None:
            if years >= 5:
                result.add(-5, f"GPU is {years} years old, suggesting budget constraints")
            elif years <= 1:
                result.add(10, "Latest-generation hardware shows willingness to spend")
            else:
                result.add(0, f"GPU is {years} years old")

    if hw.has_screen:
        screen = ref.screen(hw.screen_width, hw.screen_height)
        info = screen.entry
        result.add(
            (info.income - SCREEN_INCOME_MIDPOINT) * SCREEN_INCOME_STEP,
            f"{info.device_type} display ({info.likely_use}, income indicator {info.income}/10)",
        )
        if hw.pixel_ratio is not None and hw.pixel_ratio >= 2:
            result.add(5, "High-DPI display costs more", counted=False)
        if hw.color_depth is not None and hw.color_depth >= 30:
            result.add(5, "10-bit color display", counted=False)

    cores = hw.cpu_cores
    if cores is not None:
        if cores >= 16:
            result.add(15, f"{cores}-core CPU suggests a high-end workstation")
        elif cores >= 8:
            result.add(5, "8+ core CPU suggests a capable machine")
        elif cores <= 4:
            result.add(-5, f"{cores}-core CPU suggests an entry-level machine")
        else:
            result.add(0, f"{cores}-core CPU")

    ram = hw.ram
    if ram is not None:
        if ram >= 32:
            result.add(10, f"{ram:g}GB RAM indicates a professional-grade system")
        elif ram >= 16:
            result.add(3, f"{ram:g}GB RAM")
        elif ram <= 8:
            result.add(-5, f"{ram:g}GB RAM suggests a budget system")
        else:
            result.add(0, f"{ram:g}GB RAM")

    if bag.network.isp:
        tier = ref.isp_tier(bag.network.isp)
        result.facts["isp_tier"] = tier.entry
        if tier.entry == "datacenter":
            result.add(0, "Datacenter IP suggests a VPN or developer, income not inferred")
        elif tier.entry in ISP_TIER_INCOME:
            result.add(ISP_TIER_INCOME[tier.entry], f"{tier.entry.title()}-tier ISP ({tier.describe()})")
        else:
            result.add(0, f"Standard ISP ({tier.describe()})")

    city_name = bag.network.city
    col = 1.0
    if city_name:
        city = ref.city(city_name)
        col = city.entry.col
        index = city.entry.col_index
        expensive = index >= HIGH_COL_INDEX if index is not None else col > 1.3
        if expensive and result.raw_score > 40:
            result.add(10, f"High cost of living area ({city_name}) needs a higher income to sustain")
        elif col < 0.7 and result.raw_score > 60:
            result.add(5, f"High apparent income in low-cost {city_name}", counted=False)
    elif bag.browser.languages:
        lang = ref.language(bag.browser.languages[0])
        tier = lang.entry.income_tier
        result.add(
            (tier - LANGUAGE_INCOME_MIDPOINT) * LANGUAGE_INCOME_STEP,
            f"{lang.entry.region} locale ({lang.describe()}, income tier {tier}/5)",
        )
    result.facts["col_multiplier"] = col

    referrer = analyze_referrer(bag.browser.referrer)
    if referrer and not referrer.is_direct and referrer.income_indicator:
        result.add(
            referrer.income_indicator,
            f"Arrived via {referrer.label}, a professional audience ({referrer.describe()})",
        )

    if is_apple(bag):
        result.add(8, "Apple ecosystem indicates higher spending power")

    if bag.tracking.ad_blocker and bag.tracking.do_not_track:
        result.add(3, "Ad blocker plus Do Not Track correlates with professional awareness")

    for ext in bag.fingerprint_summary.extensions_detected:
        hit = ref.extension(ext)
        if not hit:
            continue
        mod = sum(w.income_mod for w in hit.entry)
        if mod:
            result.add(mod, f"{hit.key} extension shifts income by {mod:+d}")

    result.clamp(0, 100)
    return result


def assess_income(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_income(bag, ctx)
    level = INCOME_BUCKETS.label(result.raw_score)
    estimate = INCOME_ESTIMATES[level]
    if result.facts["col_multiplier"] > 1:
        estimate = f"{estimate} ({bag.network.city} adjusted)"
    return to_attribute(
        result, estimate, level, CONFIDENCE["income"], {"score": f"{result.raw_score:.0f}"}
    )


# =============================================================================
# OCCUPATION + EDUCATION
# =============================================================================

OCCUPATIONS = (
    "Software Developer",
    "Designer/Creative",
    "Gamer/Streamer",
    "Crypto/Finance",
    "Office Worker",
    "Student",
    "Freelancer/Remote Worker",
)
GENERAL_PROFESSIONAL = "General professional"

OFFICE_BASE = 30
TECH_REFERRER = 45
REGIONAL_WEIGHT = 5
REGIONAL_FIELDS = {
    "finance": "Crypto/Finance",
    "design": "Designer/Creative",
    "creative": "Designer/Creative",
    "fashion": "Designer/Creative",
    "entertainment": "Designer/Creative",
    "gaming": "Gamer/Streamer",
}
PROFESSIONAL_DISPLAY = 7
PAIR_RATIO = 0.8
CONFIDENT_SCORE = 50
MIN_SCORE = 30

HIGH_INCOME = {"upper-middle", "high", "wealthy"}
LOW_INCOME = {"poverty", "low"}


def score_occupation(
    bag: SignalBag,
    ctx: ScoringContext,
    income: BucketedAttribute | None = None,
) -> ScoreResult:
    """Accumulate one score per occupation candidate.

    facts["scores"] holds the per-candidate totals in declared order and
    facts["ranking"] the stable descending order after the income tie-break.
    """
    result = ScoreResult()
    scores = dict.fromkeys(OCCUPATIONS, 0.0)
    hw = bag.hardware
    fp = bag.fingerprint_summary
    t = bag.temporal
    ref = ctx.reference

    def vote(label: str, delta: float, reason: str) -> None:
        scores[label] += delta
        result.add(delta, f"{label}: {reason}")

    ua = bag.browser.user_agent or ""
    gpu = gpu_hit(bag, ctx)
    tier = gpu.entry.tier if gpu else None
    screen = (hw.screen_width, hw.screen_height) if hw.has_screen else None

    # Developer
    if bag.bot_detection.dev_tools_open:
        vote("Software Developer", 40, "DevTools open")
    if any(v in ua for v in ("Developer", "Canary", "Nightly")):
        vote("Software Developer", 30, "developer browser build")
    if hw.cpu_cores is not None and hw.cpu_cores >= 8:
        vote("Software Developer", 15, f"{hw.cpu_cores} CPU cores")
    if hw.ram is not None and hw.ram >= 16:
        vote("Software Developer", 10, f"{hw.ram:g}GB RAM")
    if fp.wasm_supported and fp.webgpu_available:
        vote("Software Developer", 10, "WebAssembly and WebGPU available")
    if fast_typist(bag):
        vote("Software Developer", 15, f"{bag.behavioral.typing.average_wpm:g} WPM typing")
    for ext in fp.extensions_detected:
        hit = ref.extension(ext)
        if hit:
            weight = sum(w.weight for w in hit.entry if w.profile == "developer")
            if weight:
                vote("Software Developer", weight, f"{hit.key} extension")
    referrer = analyze_referrer(bag.browser.referrer)
    if referrer and not referrer.is_direct and referrer.tech_indicator >= TECH_REFERRER:
        vote("Software Developer", 15, f"arrived via {referrer.label} (tech indicator {referrer.tech_indicator})")

    # Designer
    if hw.pixel_ratio is not None and hw.pixel_ratio >= 2:
        vote("Designer/Creative", 20, "high-DPI display")
    if hw.color_depth is not None and hw.color_depth >= 30:
        vote("Designer/Creative", 15, "10-bit color depth")
    if gpu and ("quadro" in hw.gpu_lower or hw.is_apple_silicon):
        vote("Designer/Creative", 25, "creative workstation GPU")
    if screen:
        display = ref.screen(*screen).entry
        if display.professional >= PROFESSIONAL_DISPLAY:
            vote("Designer/Creative", 15, f"professional display ({display.device_type})")

    # Gamer
    if tier == "premium":
        vote("Gamer/Streamer", 30, "premium GPU")
    elif tier == "high":
        vote("Gamer/Streamer", 20, "high-end GPU")
    if fp.gamepads:
        vote("Gamer/Streamer", 15, "gamepad API in use")
    if screen and screen[0] >= 2560 and screen[1] >= 1440:
        vote("Gamer/Streamer", 10, "1440p or larger display")
    if t.hour is not None and (t.hour >= 22 or t.hour < 3):
        vote("Gamer/Streamer", 10, "late-night session")

    # Crypto / finance
    if bag.crypto.any_wallet:
        vote("Crypto/Finance", 40, "crypto wallet detected")
        if wallet_count(bag) >= 2:
            vote("Crypto/Finance", 20, "multiple wallets suggest an active trader")

    # Office worker
    if is_work_hours_weekday(bag):
        vote("Office Worker", 20, "weekday work-hours browsing")
    if screen and ref.is_budget_screen(*screen):
        vote("Office Worker", 10, "budget screen, likely a company laptop")
    platform = (bag.browser.platform or "").lower()
    if "win" in platform and gpu is None:
        vote("Office Worker", 10, "stock Windows machine")

    # Student
    if screen and ref.is_budget_screen(*screen):
        vote("Student", 10, "budget screen")
    if tier == "budget":
        vote("Student", 15, "budget GPU")
    if t.hour is not None and (t.hour >= 23 or t.hour < 4):
        vote("Student", 10, "late-night study hours")
    if len(bag.browser.languages) > 2:
        vote("Student", 10, "several languages, possibly an international student")

    # Freelancer
    if t.hour is not None and t.day_of_week is not None:
        if not t.is_work_hours and t.is_weekday:
            vote("Freelancer/Remote Worker", 15, "weekday browsing outside office hours")
        if t.is_work_hours and t.is_weekend:
            vote("Freelancer/Remote Worker", 10, "weekend daytime browsing")
    if tier in ("mid", "high"):
        isp_tier = ref.isp_tier(bag.network.isp).entry if bag.network.isp else None
        if isp_tier != "enterprise":
            vote("Freelancer/Remote Worker", 15, "good hardware on a non-enterprise connection")

    # Regional industries from the primary locale and the city
    fields: list[str] = []
    if bag.browser.languages:
        fields.extend(ref.language(bag.browser.languages[0]).entry.professions)
    if bag.network.city:
        fields.extend(ref.city(bag.network.city).entry.industries[:2])
    fields = list(dict.fromkeys(fields))
    for name in fields:
        if name in REGIONAL_FIELDS:
            vote(REGIONAL_FIELDS[name], REGIONAL_WEIGHT, f"{name} is a common regional industry")
    result.facts["regional_fields"] = fields

    # The office baseline only counts once any signal was consulted
    if result.data_points:
        scores["Office Worker"] += OFFICE_BASE
        result.note(f"Office Worker: baseline {OFFICE_BASE}")

    ranking = sorted(OCCUPATIONS, key=lambda label: -scores[label])
    if income is not None and len(ranking) > 1 and scores[ranking[0]] == scores[ranking[1]]:
        tied = [label for label in ranking if scores[label] == scores[ranking[0]]]
        if "Student" in tied and len(tied) > 1:
            if income.bucket in HIGH_INCOME and ranking[0] == "Student":
                ranking.remove("Student")
                ranking.insert(len(tied) - 1, "Student")
                result.note(f"Tie broken by {income.bucket} income: Student demoted")
            elif income.bucket in LOW_INCOME and ranking[0] != "Student":
                ranking.remove("Student")
                ranking.insert(0, "Student")
                result.note(f"Tie broken by {income.bucket} income: Student preferred")

    result.facts["scores"] = scores
    result.facts["ranking"] = ranking
    result.raw_score = scores[ranking[0]]
    return result


def occupation_label(scores: dict[str, float], ranking: list[str]) -> tuple[str, str]:
    """(display value, bucket) from ranked candidate scores."""
    top, second = ranking[0], ranking[1]
    top_score, second_score = scores[top], scores[second]

    if top_score < MIN_SCORE:
        return GENERAL_PROFESSIONAL, GENERAL_PROFESSIONAL

    if second_score > 0 and second_score >= top_score * PAIR_RATIO:
        return f"{top} / {second}", top
    if top_score < CONFIDENT_SCORE:
        return f"Likely {top}", top
    return top, top


def assess_occupation(
    bag: SignalBag,
    ctx: ScoringContext,
    income: BucketedAttribute | None = None,
) -> BucketedAttribute:
    result = score_occupation(bag, ctx, income)
    if result.data_points == 0:
        return BucketedAttribute.unknown()
    scores, ranking = result.facts["scores"], result.facts["ranking"]
    value, bucket = occupation_label(scores, ranking)
    details = {label: f"{scores[label]:g}" for label in ranking}
    if result.facts["regional_fields"]:
        details["regional_fields"] = ", ".join(result.facts["regional_fields"])
    return to_attribute(result, value, bucket, CONFIDENCE["occupation"], details)


REGIONAL_EDUCATION = {"high", "very_high", "high_stem", "high_tech", "higher_average"}


def score_education(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Education guess from the first matching rule; facts hold label and role."""
    result = ScoreResult()
    hw = bag.hardware
    github = bag.social_logins.has("github")
    devtools = bool(bag.bot_detection.dev_tools_open)
    apple = hw.is_apple_silicon
    wide = hw.screen_width is not None and hw.screen_width >= 2560
    gaming = is_gaming_gpu(bag)

    def pick(label: str, role: str, *reasons: str) -> ScoreResult:
        for reason in reasons:
            result.add(1, reason)
        result.facts["label"] = label
        result.facts["role"] = role
        return result

    if github and devtools:
        if apple and wide:
            return pick("BS/MS Computer Science", "Senior Software Engineer",
                        "GitHub login", "DevTools open", "Apple Silicon on a large display")
        if gaming and (hw.ram or 0) >= 32:
            return pick("Computer Science degree", "Full-Stack Developer",
                        "GitHub login", "DevTools open", "gaming GPU with 32GB+ RAM")
        return pick("Tech-related degree", "Software Developer", "GitHub login", "DevTools open")

    if github:
        if apple:
            return pick("Bachelor's degree", "Product Manager / Tech PM", "GitHub login", "Apple Silicon")
        return pick("Bachelor's degree", "Technical Writer or PM", "GitHub login without DevTools")

    if devtools:
        if fast_typist(bag):
            return pick("Coding bootcamp", "Junior Developer / Bootcamp grad",
                        "DevTools open without GitHub", "fast typing")
        return pick("Self-taught", "Tech hobbyist / Learning to code", "DevTools open without GitHub")

    if bag.crypto.any_wallet:
        if wallet_count(bag) >= 2:
            return pick("Finance or tech background", "Crypto Trader / DeFi User", "multiple crypto wallets")
        return pick("Various", "Crypto enthusiast", "crypto wallet")

    if bag.social_logins.has("reddit"):
        if bag.tracking.ad_blocker and fast_typist(bag):
            return pick("Bachelor's degree", "Tech industry professional",
                        "Reddit login", "ad blocker", "fast typing")
        return pick("College educated", "Knowledge worker", "Reddit login")

    if apple:
        if wide:
            return pick("Design or related degree", "Creative professional / Designer",
                        "Apple Silicon", "large display")
        return pick("Bachelor's degree", "Professional / Business user", "Apple Silicon")

    if gaming:
        hour = bag.temporal.hour
        if hour is not None and (hour >= 22 or hour < 8):
            return pick("Various", "Gamer / Content creator", "gaming GPU", "off-hours session")
        return pick("Tech education", "Tech enthusiast / IT professional", "gaming GPU")

    if (hw.cpu_cores or 0) >= 12 and (hw.ram or 0) >= 32:
        return pick("Technical degree", "Power user / Technical professional", "12+ cores and 32GB+ RAM")

    t = bag.temporal
    if t.hour is not None and t.day_of_week is not None and 9 <= t.hour <= 17 and t.is_weekday:
        return pick("College educated", "Office worker", "weekday office-hours browsing")

    if bag.browser.languages:
        lang = ctx.reference.language(bag.browser.languages[0])
        if lang.entry.education in REGIONAL_EDUCATION:
            return pick("Post-secondary likely (regional)", "General consumer",
                        f"{lang.entry.region} education level ({lang.describe()})")

    return result


def assess_education(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_education(bag, ctx)
    label = result.facts.get("label")
    if not label:
        return BucketedAttribute.unknown()
    return to_attribute(result, label, label, CONFIDENCE["education"], {"role": result.facts["role"]})


# =============================================================================
# DEVICE VALUE
# =============================================================================

SYSTEM_BASE = 400
APPLE_MARKUP = 1.4
MAX_DEPRECIATION = 0.6
DEPRECIATION_PER_YEAR = 0.15


def device_age(bag: SignalBag, ctx: ScoringContext) -> str | None:
    """new/recent/older/legacy from GPU release year, else from core count."""
    gpu = gpu_hit(bag, ctx)
    if gpu:
        years = gpu_years_old(bag, ctx, gpu.entry)
        if years is not None:
            if years <= 1:
                return "new"
            if years <= 3:
                return "recent"
            if years <= 5:
                return "older"
            return "legacy"
    if bag.hardware.cpu_cores is None and gpu is None:
        return None
    return "recent" if (bag.hardware.cpu_cores or 0) >= 8 else "older"


def score_device(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Additive dollar estimate of the visitor's hardware."""
    result = ScoreResult()
    hw = bag.hardware

    gpu = gpu_hit(bag, ctx)
    if gpu:
        value = float(gpu.entry.msrp)
        years = gpu_years_old(bag, ctx, gpu.entry)
        if years is not None:
            value *= 1 - min(years * DEPRECIATION_PER_YEAR, MAX_DEPRECIATION)
        result.add(value, f"GPU {short_gpu(hw.gpu or '', 4)} (~${round(value)} current value)")

    base = float(SYSTEM_BASE)
    consulted = False
    if hw.cpu_cores is not None:
        consulted = True
        if hw.cpu_cores >= 16:
            base += 600
            result.add(600, f"{hw.cpu_cores}-core CPU suggests a high-end processor")
        elif hw.cpu_cores >= 8:
            base += 300
            result.add(300, f"{hw.cpu_cores}-core CPU")
        elif hw.cpu_cores >= 6:
            base += 150
            result.add(150, f"{hw.cpu_cores}-core CPU")
        else:
            result.add(0, f"{hw.cpu_cores}-core CPU adds nothing")

    if hw.ram is not None:
        consulted = True
        extra = 400 if hw.ram >= 64 else 200 if hw.ram >= 32 else 80 if hw.ram >= 16 else 0
        base += extra
        result.add(extra, f"{hw.ram:g}GB RAM")

    if hw.screen_width is not None:
        consulted = True
        if hw.screen_width >= 3840:
            base += 400
            result.add(400, "4K display adds to system value")
        elif hw.screen_width >= 2560:
            base += 200
            result.add(200, "1440p-class display")
        else:
            result.add(0, f"{hw.screen_width}px wide display")

    if hw.pixel_ratio is not None:
        consulted = True
        if hw.pixel_ratio >= 2:
            base += 150
            result.add(150, "High-DPI panel costs more")
        else:
            result.add(0, f"{hw.pixel_ratio:g}x pixel ratio")

    if is_apple(bag):
        consulted = True
        markup = base * (APPLE_MARKUP - 1)
        base += markup
        result.add(markup, "Apple ecosystem adds a premium")

    if consulted or gpu:
        result.add(SYSTEM_BASE, f"Minimum system cost ${SYSTEM_BASE}", counted=False)

    total = sum(e.delta for e in result.evidence)
    result.raw_score = total
    result.facts["estimate"] = total
    result.facts["rounded"] = round_to_hundred(total)
    result.facts["age"] = device_age(bag, ctx)
    return result


def assess_device(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_device(bag, ctx)
    rounded = result.facts["rounded"]
    tier = DEVICE_BUCKETS.label(rounded)
    details = {"estimate": f"${rounded:,}"}
    if result.facts["age"]:
        details["age"] = result.facts["age"]
    return to_attribute(result, f"{tier} (~${rounded:,})", tier, CONFIDENCE["device_tier"], details)
