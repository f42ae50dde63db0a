"""
sigprofile insights - template-driven narrative lines about a profile.

Two passes produce candidates: an enhanced pass keyed on combinations
(referrer, accounts, city, parental pattern) and a base pass keyed on
individual signals. Candidates are concatenated, deduplicated by exact
string, capped, and topped up with one deterministic summary line.
"""

from __future__ import annotations

from collections.abc import Callable

from .models import Profile, SignalBag
from .reference import ScoringContext
from .referrer import ReferrerAnalysis, analyze_referrer

DEFAULT_MAX_INSIGHTS = 5

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

ABOVE_AVERAGE_INCOME = {"upper-middle", "high", "wealthy"}
LIKELY_PARENT = {"very_likely", "likely"}
SPARSE_SUMMARY = "Too few signals to sketch a profile of this visit."


def hour_label(hour: int) -> str:
    """12-hour clock label, e.g. 0 -> '12am', 21 -> '9pm'."""
    if hour == 0:
        return "12am"
    if hour < 12:
        return f"{hour}am"
    if hour == 12:
        return "12pm"
    return f"{hour - 12}pm"


def _short(name: str, words: int = 3) -> str:
    return " ".join(name.split()[:words])


# =============================================================================
# ENHANCED PASS
# =============================================================================


def enhanced_insights(bag: SignalBag, profile: Profile, ctx: ScoringContext) -> list[str]:
    out: list[str] = []
    ref = analyze_referrer(bag.browser.referrer)
    logins = bag.social_logins

    if ref and not ref.is_direct:
        if ref.search_query:
            out.append(f'You searched for "{ref.search_query}", so we know exactly how you found this page.')
        elif ref.platform == "hackernews":
            out.append("You came from Hacker News, which marks you as a tech professional or enthusiast.")
        elif ref.platform == "reddit":
            where = f" (r/{ref.subreddit})" if ref.subreddit else ""
            out.append(f"You clicked through from Reddit{where}, which says a lot about your interests.")
        elif ref.platform == "linkedin":
            out.append("You came from LinkedIn, in career-focused networking mode.")
        elif ref.campaign:
            out.append(
                f'You arrived through the "{ref.campaign}" campaign ({ref.source}/{ref.medium}), '
                "so someone paid to bring you here."
            )

    if bag.bot_detection.dev_tools_open:
        out.append("Developer tools are open: you are examining this page's code.")

    if logins.has("github") and logins.has("google"):
        out.append("Your GitHub and Google accounts point to a tech professional.")

    city = bag.network.city
    if city:
        hit = ctx.reference.city(city)
        entry = hit.entry
        if not hit.is_default and entry.has_intelligence:
            hub = "major tech hub" if (entry.tech_hub or 0) >= 8 else "growing tech city"
            if (entry.startups or 0) >= 9:
                hub += " packed with startups"
            cost = "high" if (entry.income_multiplier or 0) > 1.3 else "moderate"
            out.append(f"You're in {hit.key}, a {hub} with {cost} cost of living.")

    if bag.crypto.any_wallet:
        out.append("Your crypto wallet places you in the web3 and DeFi ecosystem.")

    if profile.parental_status.bucket in LIKELY_PARENT:
        hour = bag.temporal.hour
        pattern = "post-bedtime evening" if hour is not None and 20 <= hour <= 22 else "timing"
        out.append(f"Your browsing pattern ({pattern}) suggests you likely have children.")

    if bag.tracking.ad_blocker:
        out.append("You use an ad blocker, like many tech-savvy users who value privacy.")

    hw = bag.hardware
    if profile.income.bucket in ABOVE_AVERAGE_INCOME and hw.has_screen:
        screen = ctx.reference.screen(hw.screen_width, hw.screen_height)
        out.append(
            f"Your {screen.entry.device_type} display and hardware suggest an above-average income bracket."
        )

    return out


# =============================================================================
# BASE PASS
# =============================================================================


def _referrer_line(bag: SignalBag, profile: Profile, ref: ReferrerAnalysis) -> str | None:
    logins = bag.social_logins
    t = bag.temporal
    if ref.is_direct:
        return "Direct visit with no referrer: a typed URL, a bookmark, or a browser hiding where you came from."
    if ref.search_query:
        return f'Your search for "{ref.search_query}" brought you here, and that query is now in your search history.'
    if ref.subreddit:
        return f"You clicked through from r/{ref.subreddit}; that subreddit alone hints at your interests."
    if ref.mentions("reddit"):
        tail = "and you're logged in" if logins.has("reddit") else "clicking through links in your feed"
        return f"You came here from Reddit, {tail}."
    if ref.mentions("hackernews", "ycombinator"):
        pay = "$150k+" if profile.income.bucket in ("high", "wealthy") else "$80k+"
        return f"Hacker News readers are mostly tech and startup people; many earn {pay} a year."
    if ref.mentions("twitter", "x.com"):
        how = "logged into your account" if logins.has("twitter") else "scrolling your timeline"
        return f"You found this via Twitter/X while {how}."
    if ref.mentions("google"):
        return "Google search brought you here, and Google already keeps a fuller profile than this one."
    if ref.mentions("linkedin"):
        at_work = t.hour is not None and 9 <= t.hour <= 17 and t.is_weekday is True
        mode = "networking during work hours" if at_work else "job hunting or personal branding"
        return f"You came from LinkedIn, {mode}."
    if ref.mentions("tiktok"):
        return "TikTok sent you here; its feed already knows your attention span and interests."
    return None


def _social_line(bag: SignalBag) -> str | None:
    logins = bag.social_logins
    if not logins.known:
        return None
    services = [
        name for name in ("Google", "Facebook", "Twitter", "GitHub", "Reddit") if logins.has(name)
    ]
    if len(services) >= 3:
        return f"You're logged into {len(services)} services ({', '.join(services)}); your identity is connected across them."
    if logins.has("github") and logins.has("google"):
        return "GitHub and Google are both logged in, a near-certain developer."
    if logins.has("github"):
        return "A GitHub login marks you as a developer with a public contribution history."
    if logins.has("facebook") and not (logins.has("twitter") or logins.has("reddit")):
        return "Only Facebook is logged in, which statistically points to the 35+ age bracket."
    if logins.has("reddit"):
        return "A Reddit login suggests you're deep in internet culture."
    return None


def _time_context(bag: SignalBag) -> str:
    t = bag.temporal
    hour = t.hour
    weekend = t.is_weekend is True
    coding = bag.social_logins.has("github") or bool(bag.bot_detection.dev_tools_open)

    if 1 <= hour < 5:
        if coding:
            return "deep in a coding session, out of passion or against a deadline."
        return "awake at an hour that suggests insomnia or a different timezone than your IP."
    if 5 <= hour < 7:
        return "up before most alarms: kids, an early workout, or another timezone."
    if 9 <= hour < 17 and not weekend:
        return "browsing during standard work hours."
    if 20 <= hour <= 22 and not weekend:
        return "in the classic weeknight wind-down window."
    if weekend and 10 <= hour < 12:
        return "either sleeping in or already hours into a busy weekend."
    if weekend and 13 <= hour < 17:
        return f"spending a {DAY_NAMES[t.day_of_week]} afternoon online."
    if hour >= 22:
        return "scrolling late at night."
    return "browsing at fairly normal hours."


def _time_line(bag: SignalBag) -> str | None:
    t = bag.temporal
    if t.hour is None or t.day_of_week is None:
        return None
    where = f" in {bag.network.city}" if bag.network.city else ""
    return f"It's {hour_label(t.hour)} on {DAY_NAMES[t.day_of_week]}{where}, and you're {_time_context(bag)}"


def _gpu_line(bag: SignalBag, ctx: ScoringContext) -> str | None:
    gpu = bag.hardware.gpu
    if not gpu:
        return None
    hit = ctx.reference.gpu(gpu)
    lower = gpu.lower()
    if hit.entry.tier == "premium" and not hit.is_default:
        return f"Your {_short(gpu)} means you had ${hit.entry.msrp}+ to spend on graphics alone."
    if hit.entry.tier == "high" and not hit.is_default:
        return f"A {_short(gpu)} is solid hardware: a practical enthusiast, not a show-off."
    if "intel" in lower or "uhd" in lower:
        return f"Integrated graphics ({_short(gpu)}) suggest a work laptop or a preference for portability."
    return None


def _screen_line(bag: SignalBag) -> str | None:
    hw = bag.hardware
    if not hw.has_screen:
        return None
    if hw.screen_width >= 3840:
        density = f" at {hw.pixel_ratio:g}x density" if hw.pixel_ratio else ""
        return f"Your {hw.screen_width}x{hw.screen_height} display{density} is seriously high-end."
    if (hw.screen_width, hw.screen_height) == (1366, 768):
        return "1366x768 is the classic budget laptop resolution, often a work-issued machine."
    return None


def _behavior_line(bag: SignalBag) -> str | None:
    mouse = bag.behavioral.mouse
    if (mouse.rage_clicks or 0) > 2:
        return f"We counted {mouse.rage_clicks} rage clicks; something frustrated you."
    if (mouse.erratic_movements or 0) > 15:
        return f"{mouse.erratic_movements} erratic mouse movements suggest you're searching for something."
    if (
        mouse.total_clicks is not None
        and mouse.total_clicks < 3
        and (mouse.movements or 0) > 500
    ):
        return "Lots of mouse movement but barely any clicks: a careful, skeptical reader."
    return None


def _privacy_line(bag: SignalBag) -> str | None:
    tracking = bag.tracking
    if tracking.ad_blocker and bag.crypto.any_wallet:
        return "An ad blocker and a crypto wallet: privacy-minded, yet this page still profiled you."
    if tracking.ad_blocker:
        return "Your ad blocker did not stop browser fingerprinting."
    if tracking.ad_blocker is False and tracking.do_not_track is False:
        return "No ad blocker and Do Not Track disabled: every site you visit can profile you."
    return None


def _crypto_line(bag: SignalBag) -> str | None:
    crypto = bag.crypto
    phantom, metamask = crypto.has_wallet("phantom"), crypto.has_wallet("metamask")
    if phantom and metamask:
        return "Phantom and MetaMask together: you're diversified across Solana and Ethereum."
    if phantom:
        return "A Phantom wallet marks you as a Solana user."
    if metamask:
        return "MetaMask is installed, your gateway to Ethereum DeFi."
    return None


def _battery_line(bag: SignalBag) -> str | None:
    battery = bag.hardware.battery
    if battery is None or battery.level is None or battery.charging is None:
        return None
    pct = round(battery.level * 100)
    if battery.level < 0.15 and not battery.charging:
        return f"Your battery is at {pct}% and not charging; you're far from an outlet."
    if battery.level > 0.95 and battery.charging:
        return f"Battery at {pct}% and still plugged in: this is probably your primary desk."
    return None


def _isp_line(bag: SignalBag, ctx: ScoringContext) -> str | None:
    isp = bag.network.isp
    if not isp:
        return None
    tier = ctx.reference.isp_tier(isp).entry
    if tier == "datacenter":
        return f"Your IP belongs to a datacenter ({isp}): a VPN, a proxy or a cloud instance."
    if tier == "enterprise":
        return f"Enterprise-grade internet from {isp}: a corporate office or a business line at home."
    return None


def base_insights(bag: SignalBag, profile: Profile, ctx: ScoringContext) -> list[str]:
    ref = analyze_referrer(bag.browser.referrer)
    builders: list[Callable[[], str | None]] = [
        lambda: _referrer_line(bag, profile, ref) if ref else None,
        lambda: _social_line(bag),
        lambda: _time_line(bag),
        lambda: _gpu_line(bag, ctx),
        lambda: _screen_line(bag),
        lambda: _behavior_line(bag),
        lambda: _privacy_line(bag),
        lambda: _crypto_line(bag),
        lambda: _battery_line(bag),
        lambda: _isp_line(bag, ctx),
    ]
    out = [line for line in (build() for build in builders) if line]

    tabs = bag.behavioral.attention.tab_switches
    if tabs is not None and tabs > 15:
        out.append(f"{tabs} tab switches this session: your attention is split many ways.")
    if bag.bot_detection.dev_tools_open:
        out.append("DevTools are open, which only a small share of visitors ever do.")
    return out


# =============================================================================
# SUMMARY + ASSEMBLY
# =============================================================================


def summary_insight(bag: SignalBag, profile: Profile) -> str:
    """One deterministic line built from the profile's top attributes."""
    parts = []
    if not profile.age.is_unknown:
        parts.append(f"aged {profile.age.value}")
    if not profile.occupation.is_unknown:
        parts.append(f"working as {profile.occupation.value.lower()}")
    if not profile.income.is_unknown:
        parts.append(f"earning {profile.income.value}")
    if not parts:
        return SPARSE_SUMMARY

    basis = []
    if bag.hardware.cpu_cores:
        basis.append(f"{bag.hardware.cpu_cores}-core CPU")
    if bag.network.city:
        basis.append(f"{bag.network.city} location")
    basis.append("browsing patterns")
    return f"Based on your {', '.join(basis)}, we estimate a visitor {', '.join(parts)}."


def generate_insights(
    bag: SignalBag,
    profile: Profile,
    ctx: ScoringContext,
    max_insights: int = DEFAULT_MAX_INSIGHTS,
) -> list[str]:
    """Ranked, deduplicated, capped insights; never empty."""
    candidates = enhanced_insights(bag, profile, ctx) + base_insights(bag, profile, ctx)
    insights = list(dict.fromkeys(candidates))[:max_insights]
    if len(insights) < max_insights:
        summary = summary_insight(bag, profile)
        if summary not in insights:
            insights.append(summary)
    if not insights:
        insights.append(summary_insight(bag, profile))
    return insights
