"""
sigprofile personality - profile flags, interests, authenticity, work style and spending.
"""

from __future__ import annotations

from .buckets import CONFIDENCE, to_attribute
from .models import BucketedAttribute, ScoreResult, SignalBag
from .reference import ScoringContext
from .referrer import analyze_referrer

FLAG_THRESHOLD = 50

FLAG_NAMES = {
    "developer": "Developer",
    "gamer": "Gamer",
    "designer": "Designer",
    "power_user": "Power user",
    "privacy_conscious": "Privacy conscious",
    "tech_savvy": "Tech savvy",
    "mobile_user": "Mobile user",
}

# =============================================================================
# PROFILE FLAGS
# =============================================================================


def score_flags(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """One 0-100 score per flag; facts["flags"] maps flag -> score."""
    result = ScoreResult()
    scores = dict.fromkeys(FLAG_NAMES, 0.0)
    hw = bag.hardware
    fp = bag.fingerprint_summary
    tracking = bag.tracking
    wpm = bag.behavioral.typing.average_wpm
    cores = hw.cpu_cores or 0
    returning = bag.storage.is_returning_visitor is True

    def vote(flag: str, delta: float, reason: str) -> None:
        scores[flag] += delta
        result.add(delta, f"{FLAG_NAMES[flag]}: {reason}")

    if bag.browser.is_developer_variant:
        vote("developer", 40, "developer browser build")
    if bag.bot_detection.dev_tools_open:
        vote("developer", 35, "DevTools open")
    if cores >= 8:
        vote("developer", 15, f"{cores} CPU cores")
    if fp.wasm_supported and fp.webgpu_available:
        vote("developer", 10, "WebAssembly and WebGPU")
    if wpm is not None and wpm > 60:
        vote("developer", 15, "fast typing")
    if returning and scores["developer"] > 30:
        vote("developer", 5, "returning visitor")

    gpu = ctx.reference.gpu(hw.gpu) if hw.gpu else None
    if gpu and gpu.entry.tier in ("premium", "high"):
        if "quadro" not in hw.gpu_lower and "a100" not in hw.gpu_lower:
            vote("gamer", 40, "gaming-class GPU")
    if cores >= 8 and (hw.ram or 0) >= 16:
        vote("gamer", 25, "8+ cores with 16GB+ RAM")
    if fp.gamepads:
        vote("gamer", 20, "gamepad API in use")
    if (hw.screen_width or 0) >= 2560:
        vote("gamer", 10, "large display")

    if (hw.pixel_ratio or 0) >= 2:
        vote("designer", 20, "high-DPI display")
    if (hw.color_depth or 0) >= 30:
        vote("designer", 20, "10-bit color")
    if "quadro" in hw.gpu_lower or hw.is_apple_silicon:
        vote("designer", 30, "creative workstation GPU")
    if hw.has_screen and ctx.reference.is_professional_screen(hw.screen_width, hw.screen_height):
        vote("designer", 15, "professional display")

    history = bag.browser.history_length
    if cores >= 8:
        vote("power_user", 20, f"{cores} CPU cores")
    if (hw.ram or 0) >= 16:
        vote("power_user", 20, "16GB+ RAM")
    if history is not None and history > 10:
        vote("power_user", 15, "deep session history")
        if history > 50:
            vote("power_user", 10, "very deep session history")
    if wpm is not None and wpm > 50:
        vote("power_user", 20, "proficient typing")
    if tracking.ad_blocker:
        vote("power_user", 10, "ad blocker")
    if returning:
        vote("power_user", 5, "returning visitor")

    if tracking.ad_blocker:
        vote("privacy_conscious", 35, "ad blocker")
    if tracking.do_not_track:
        vote("privacy_conscious", 20, "Do Not Track")
    if tracking.global_privacy_control:
        vote("privacy_conscious", 25, "Global Privacy Control")
    if bag.crypto.any_wallet:
        vote("privacy_conscious", 15, "crypto wallet")

    if fp.webgpu_available:
        vote("tech_savvy", 15, "WebGPU")
    if fp.wasm_supported:
        vote("tech_savvy", 10, "WebAssembly")
    if bag.crypto.any_wallet:
        vote("tech_savvy", 20, "crypto wallet")
    if cores >= 8:
        vote("tech_savvy", 15, f"{cores} CPU cores")
    if scores["developer"] > 50:
        vote("tech_savvy", 25, "developer signals")
    if tracking.ad_blocker:
        vote("tech_savvy", 10, "ad blocker")

    if bag.browser.mobile is not None:
        scores["mobile_user"] = 95 if bag.browser.mobile else 5
        result.note(f"Mobile user: browser reports mobile={bag.browser.mobile}", counted=True)

    result.facts["flags"] = {name: min(score, 100) for name, score in scores.items()}
    result.facts["traits"] = personality_traits(bag)
    return result


def personality_traits(bag: SignalBag) -> dict[str, bool]:
    tracking = bag.tracking
    fp = bag.fingerprint_summary
    return {
        "cautious": bool(tracking.ad_blocker or tracking.do_not_track),
        "privacy_focused": bool(
            tracking.ad_blocker and (tracking.do_not_track or tracking.global_privacy_control)
        ),
        "early_adopter": bool(fp.webgpu_available or fp.wasm_supported),
    }


def detected(flags: dict[str, float]) -> list[str]:
    return [name for name, score in flags.items() if score >= FLAG_THRESHOLD]


def assess_flags(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_flags(bag, ctx)
    flags = result.facts["flags"]
    found = detected(flags)
    value = ", ".join(FLAG_NAMES[f] for f in found) if found else "No strong profile flags"
    details = {name: f"{score:g}" for name, score in flags.items()}
    details["detected"] = ",".join(found)
    for trait, present in result.facts["traits"].items():
        details[trait] = "yes" if present else "no"
    return to_attribute(
        result, value, "detected" if found else "none", CONFIDENCE["personality_flags"], details
    )


def flag_detected(flags: BucketedAttribute | None, name: str) -> bool:
    """True when an assessed flags attribute lists the flag as detected."""
    if flags is None or flags.is_unknown:
        return False
    return name in flags.details.get("detected", "").split(",")


# =============================================================================
# INTERESTS
# =============================================================================

INTEREST_FLAGS = {"gamer": "gaming", "designer": "design", "developer": "development"}


def score_interests(
    bag: SignalBag, ctx: ScoringContext, flags: BucketedAttribute | None = None
) -> ScoreResult:
    result = ScoreResult()
    interests: list[str] = []

    def interest(name: str, reason: str) -> None:
        if name not in interests:
            interests.append(name)
            result.add(1, reason)

    crypto = bag.crypto
    if any(crypto.has_wallet(w) for w in ("phantom", "metamask", "coinbase")):
        interest("cryptocurrency", "Crypto wallet installed")
    if bag.tracking.ad_blocker:
        interest("privacy", "Ad blocker installed")
    if bag.fingerprint_summary.webgpu_available:
        interest("modern web technologies", "WebGPU available")
    for flag, name in INTEREST_FLAGS.items():
        if flag_detected(flags, flag):
            interest(name, f"{FLAG_NAMES[flag]} profile detected")

    ref = analyze_referrer(bag.browser.referrer)
    if ref and not ref.is_direct:
        for name in ref.interests:
            interest(name.replace("_", " "), f"Referrer suggests {name.replace('_', ' ')}")
        if not ref.interests:
            result.note("Referrer carried no interest signal", counted=True)

    result.facts["interests"] = interests
    return result


def assess_interests(
    bag: SignalBag, ctx: ScoringContext, flags: BucketedAttribute | None = None
) -> BucketedAttribute:
    result = score_interests(bag, ctx, flags)
    interests = result.facts["interests"]
    value = ", ".join(interests) if interests else "No clear interests"
    return to_attribute(
        result,
        value,
        "detected" if interests else "none",
        CONFIDENCE["interests"],
        {"count": str(len(interests))},
    )


# =============================================================================
# AUTHENTICITY
# =============================================================================


def score_authenticity(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Human score (raw_score, baseline 100) with fraud risk in facts."""
    result = ScoreResult(raw_score=100)
    fraud = 0
    bot = bag.bot_detection
    mouse = bag.behavioral.mouse

    for flag, human, risk, reason in (
        (bot.is_automated, -40, 30, "Automation framework detected"),
        (bot.is_headless, -30, 25, "Headless browser detected"),
        (bot.zero_metrics, -20, 15, "Zeroed browser metrics"),
    ):
        if flag is not None:
            if flag:
                result.add(human, reason)
                fraud += risk
            else:
                result.note(f"No {reason.split(' detected')[0].lower()}", counted=True)

    if bot.is_virtual_machine:
        fraud += 10
        result.note("Running in a virtual machine", counted=True)

    for value, threshold, reason in (
        (mouse.total_clicks, 5, "Natural clicking"),
        (mouse.movements, 100, "Organic mouse movement"),
        (bag.behavioral.typing.total_keystrokes, 10, "Real keystrokes"),
        (bag.behavioral.scroll.scroll_events, 5, "Scrolling activity"),
    ):
        if value is not None and value > threshold:
            result.add(5, reason)

    if bag.social_logins.has("google") or bag.social_logins.has("facebook"):
        result.add(5, "Logged in to a major social account")

    if bag.tracking.ad_blocker:
        fraud += 5
    if bag.vpn.likely:
        fraud += 5
        result.note("Likely VPN", counted=True)
    if bag.vpn.timezone_mismatch:
        fraud += 5
        result.note("Timezone does not match IP location", counted=True)

    result.clamp(0, 100)
    result.facts["fraud_risk"] = min(fraud, 100)
    return result


def authenticity_bucket(human: float, fraud: int) -> str:
    if human < 40:
        return "automated"
    if human < 70 or fraud >= 40:
        return "uncertain"
    return "human"


def assess_authenticity(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_authenticity(bag, ctx)
    human = result.raw_score
    fraud = result.facts["fraud_risk"]
    bucket = authenticity_bucket(human, fraud)
    value = f"{bucket.title()} (human score {human:.0f}, fraud risk {fraud})"
    details = {"human_score": f"{human:.0f}", "fraud_risk": str(fraud)}
    return to_attribute(result, value, bucket, CONFIDENCE["authenticity"], details)


# =============================================================================
# WORK STYLE + SPENDING
# =============================================================================

WORK_STYLES = {
    "remote_developer": "Remote developer, flexible hours",
    "standard_hours": "Standard 9-5",
    "night_owl": "Night owl / Irregular hours",
    "weekend_worker": "Weekend worker",
    "flexible": "Flexible schedule",
}


def assess_work_style(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = ScoreResult()
    t = bag.temporal
    hour = t.hour

    if bag.social_logins.has("github") and bag.bot_detection.dev_tools_open:
        style = "remote_developer"
        result.add(0, "GitHub login with DevTools open")
    elif hour is None:
        return BucketedAttribute.unknown()
    elif 9 <= hour <= 17 and t.is_weekend is False:
        style = "standard_hours"
        result.add(0, "Weekday office-hours visit")
    elif hour >= 22 or hour < 6:
        style = "night_owl"
        result.add(0, f"Active at {hour}:00")
    elif t.is_weekend and 9 <= hour <= 17:
        style = "weekend_worker"
        result.add(0, "Weekend daytime activity")
    else:
        style = "flexible"
        result.add(0, f"Active at {hour}:00 outside a fixed pattern")

    return to_attribute(result, WORK_STYLES[style], style, CONFIDENCE["work_style"])


SHOPPING_STYLES = {
    "premium": ("premium_buyer", "Premium buyer"),
    "high-end": ("quality_focused", "Quality-focused"),
    "mid-range": ("value_conscious", "Value-conscious"),
    "low-end": ("budget_conscious", "Budget-conscious"),
}

MAX_BRANDS = 5


def brand_affinity(bag: SignalBag) -> list[str]:
    brands: list[str] = []
    gpu = bag.hardware.gpu_lower
    ua = bag.browser.user_agent or ""

    if any(b in gpu for b in ("nvidia", "geforce", "rtx", "gtx")):
        brands.append("NVIDIA")
    if "amd" in gpu or "radeon" in gpu:
        brands.append("AMD")
    if "intel" in gpu and "apple" not in gpu:
        brands.append("Intel")
    if "apple" in gpu or bag.hardware.is_apple_silicon:
        brands.append("Apple")
    if "Chrome" in ua and "Edg" not in ua:
        brands.append("Google")
    if "Firefox" in ua:
        brands.append("Mozilla/Firefox")
    if "Safari" in ua and "Chrome" not in ua:
        brands.append("Apple")
    if "Edg" in ua:
        brands.append("Microsoft")
    if bag.crypto.has_wallet("phantom"):
        brands.append("Solana ecosystem")
    if bag.crypto.has_wallet("metamask"):
        brands.append("Ethereum ecosystem")

    return list(dict.fromkeys(brands))[:MAX_BRANDS]


def assess_spending(
    bag: SignalBag, ctx: ScoringContext, device_tier: BucketedAttribute | None = None
) -> BucketedAttribute:
    if device_tier is None or device_tier.is_unknown:
        return BucketedAttribute.unknown()

    result = ScoreResult()
    bucket, style = SHOPPING_STYLES[device_tier.bucket]
    result.add(0, f"{device_tier.bucket} device suggests a {style.lower()} shopper")
    brands = brand_affinity(bag)
    if brands:
        result.add(0, f"Brand signals: {', '.join(brands)}")
    details = {"brand_affinity": ", ".join(brands)} if brands else {}
    return to_attribute(result, style, bucket, CONFIDENCE["spending"], details)
