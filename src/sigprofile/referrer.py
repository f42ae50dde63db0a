"""
sigprofile referrer analysis - what the arrival URL says about a visitor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlparse

SEARCH_HOSTS = ("google.", "bing.", "duckduckgo.", "yahoo.")
QUERY_PARAMS = ("q", "query", "p")

SUBREDDIT_INTERESTS: dict[str, tuple[str, ...]] = {
    "development": ("programming", "webdev", "javascript", "python", "learnprogramming", "cscareerquestions"),
    "cryptocurrency": ("cryptocurrency", "bitcoin", "ethereum", "defi", "solana"),
    "privacy": ("privacy", "privacytoolsio", "degoogle"),
    "gaming": ("gaming", "pcgaming", "buildapc", "pcmasterrace"),
    "finance": ("personalfinance", "investing", "financialindependence", "fire"),
}

PLATFORM_NAMES = {
    "hackernews": "Hacker News",
    "reddit": "Reddit",
    "twitter": "Twitter/X",
    "facebook": "Facebook",
    "linkedin": "LinkedIn",
    "tiktok": "TikTok",
    "youtube": "YouTube",
}

_SUBREDDIT_RE = re.compile(r"/r/([^/]+)")


@dataclass
class ReferrerAnalysis:
    """Parsed traffic source with interest and demographic nudges."""

    raw: str
    source: str = "direct"
    medium: str = "none"
    campaign: str = ""
    search_query: str = ""
    subreddit: str = ""
    platform: str = ""
    tech_indicator: int = 0
    age_indicator: int = 0
    income_indicator: int = 0
    interests: list[str] = field(default_factory=list)
    signals: list[str] = field(default_factory=list)

    @property
    def is_direct(self) -> bool:
        return self.raw in ("", "Direct")

    @property
    def label(self) -> str:
        """Human name of the traffic source."""
        if self.platform:
            return PLATFORM_NAMES.get(self.platform, self.platform)
        return f"{self.source}/{self.medium}"

    def describe(self) -> str:
        """Collected signals as one reasoning fragment."""
        return "; ".join(self.signals) if self.signals else self.label

    def mentions(self, *needles: str) -> bool:
        """Case-insensitive substring check on the raw referrer."""
        lower = self.raw.lower()
        return any(n in lower for n in needles)


def _first_param(params: dict[str, list[str]], names: tuple[str, ...]) -> str:
    for name in names:
        values = params.get(name)
        if values and values[0]:
            return values[0]
    return ""


def _analyze_search(result: ReferrerAnalysis, host: str, params: dict[str, list[str]]) -> None:
    result.source = "search"
    result.medium = "organic"

    query = _first_param(params, QUERY_PARAMS)
    if query:
        result.search_query = query
        result.signals.append(f'Search query: "{query}"')
        q = query.lower()
        if any(w in q for w in ("code", "programming", "developer")):
            result.interests.append("development")
            result.tech_indicator += 30
        if any(w in q for w in ("crypto", "bitcoin", "ethereum")):
            result.interests.append("cryptocurrency")
            result.tech_indicator += 20
        if any(w in q for w in ("design", "ui", "ux")):
            result.interests.append("design")

    if "duckduckgo." in host:
        result.tech_indicator += 25
        result.interests.append("privacy")
        result.signals.append("DuckDuckGo user (privacy-conscious)")


def _analyze_reddit(result: ReferrerAnalysis, path: str) -> None:
    result.source = "social"
    result.medium = "reddit"
    result.platform = "reddit"
    result.tech_indicator += 35
    result.age_indicator -= 8
    result.interests.append("internet_culture")
    result.signals.append("Came from Reddit")

    match = _SUBREDDIT_RE.search(path)
    if not match:
        return
    subreddit = match.group(1).lower()
    result.subreddit = subreddit
    result.signals.append(f"From r/{subreddit}")

    if subreddit in SUBREDDIT_INTERESTS["development"]:
        result.interests.append("development")
        result.tech_indicator += 20
        result.income_indicator += 10
    if subreddit in SUBREDDIT_INTERESTS["cryptocurrency"]:
        result.interests.append("cryptocurrency")
        result.tech_indicator += 15
    if subreddit in SUBREDDIT_INTERESTS["privacy"]:
        result.interests.append("privacy")
        result.tech_indicator += 25
    if subreddit in SUBREDDIT_INTERESTS["gaming"]:
        result.interests.append("gaming")
        result.tech_indicator += 15
    if subreddit in SUBREDDIT_INTERESTS["finance"]:
        result.interests.append("finance")
        result.income_indicator += 15
        result.age_indicator += 5


def _social(result: ReferrerAnalysis, platform: str, signal: str) -> None:
    result.source = "social"
    result.medium = platform
    result.platform = platform
    result.signals.append(signal)


def analyze_referrer(referrer: str | None) -> ReferrerAnalysis | None:
    """Classify a referrer URL. Returns None when the collector sent none."""
    if referrer is None:
        return None

    result = ReferrerAnalysis(raw=referrer)
    if result.is_direct:
        result.signals.append("Direct visit or referrer blocked")
        return result

    parsed = urlparse(referrer)
    if not parsed.scheme or not parsed.netloc:
        # Not a URL; keyword match only
        if result.mentions("google"):
            result.source, result.medium = "search", "organic"
        elif result.mentions("reddit"):
            result.source, result.medium = "social", "reddit"
            result.platform = "reddit"
            result.tech_indicator += 30
        return result

    host = parsed.netloc.lower()
    params = parse_qs(parsed.query)

    for key, attr, label in (
        ("utm_source", "source", "UTM source"),
        ("utm_medium", "medium", "UTM medium"),
        ("utm_campaign", "campaign", "Campaign"),
    ):
        value = _first_param(params, (key,))
        if value:
            setattr(result, attr, value)
            result.signals.append(f"{label}: {value}")

    if any(h in host for h in SEARCH_HOSTS):
        _analyze_search(result, host, params)

    if "reddit.com" in host or result.mentions("reddit"):
        _analyze_reddit(result, parsed.path)

    if "news.ycombinator.com" in host or "hn.algolia.com" in host:
        _social(result, "hackernews", "Came from Hacker News (tech professional)")
        result.tech_indicator += 50
        result.income_indicator += 15
        result.interests.extend(["technology", "startups"])

    if "twitter.com" in host or "x.com" in host:
        _social(result, "twitter", "Came from Twitter/X")
        result.tech_indicator += 15
        result.interests.append("news")

    if "facebook.com" in host or "fb.com" in host:
        _social(result, "facebook", "Came from Facebook")
        result.age_indicator += 10

    if "linkedin.com" in host:
        _social(result, "linkedin", "Came from LinkedIn (professional)")
        result.income_indicator += 10
        result.age_indicator += 5
        result.interests.extend(["career", "professional_networking"])

    if "tiktok.com" in host:
        _social(result, "tiktok", "Came from TikTok (younger demographic)")
        result.age_indicator -= 15

    if "youtube.com" in host:
        _social(result, "youtube", "Came from YouTube")
        if _first_param(params, ("v",)):
            result.signals.append("From YouTube video content")

    if "github.com" in host or "gitlab.com" in host:
        result.source, result.medium = "tech", "repository"
        result.tech_indicator += 60
        result.income_indicator += 15
        result.interests.extend(["development", "open_source"])
        result.signals.append("Came from GitHub/GitLab (developer)")

    if "stackoverflow.com" in host or "stackexchange.com" in host:
        result.source, result.medium = "tech", "q&a"
        result.tech_indicator += 45
        result.interests.append("development")
        result.signals.append("Came from Stack Overflow (problem-solving developer)")

    if "dev.to" in host or "medium.com" in host or "hashnode." in host:
        result.source, result.medium = "content", "blog"
        result.tech_indicator += 30
        result.interests.extend(["reading", "learning"])
        result.signals.append("Came from tech blog platform")

    if "email" in _first_param(params, ("ref",)):
        result.medium = "email"
        result.signals.append("Came from email newsletter")

    if "producthunt.com" in host:
        result.source, result.medium = "tech", "producthunt"
        result.tech_indicator += 40
        result.income_indicator += 10
        result.interests.extend(["tech_products", "startups", "early_adopter"])
        result.signals.append("Came from Product Hunt (early adopter)")

    return result
