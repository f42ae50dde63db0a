"""
sigprofile remote - client for a remote analyzer serving POST /api/analyze.

The remote service runs the same computation server-side. Its answer is
either a full Profile or the older flat analysis shape, which is mapped
onto Profile buckets here. Anything else is a RemoteAnalysisError.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .buckets import BUCKET_SETS, in_closed_set
from .models import BucketedAttribute, LifestyleHabits, Profile, SignalBag
from .personality import WORK_STYLES, authenticity_bucket

ANALYZE_PATH = "/api/analyze"
DEFAULT_TIMEOUT = 5.0

REMOTE_REASON = "Reported by remote analyzer"
PROFILE_CORE = ("age", "income", "occupation", "overall_confidence")


class RemoteAnalysisError(Exception):
    """Remote analyzer unreachable or returned an unusable answer."""


# =============================================================================
# LEGACY FLAT ANALYSIS SHAPE
# =============================================================================


class _LegacyGroup(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LegacyPersonalLife(_LegacyGroup):
    relationship_status: str = "Unknown"
    has_children: str = "Unknown"
    living_arrangement: str = "Unknown"
    pet_owner: str = "Unknown"


class LegacyMentalState(_LegacyGroup):
    current_mood: str = "Unknown"
    stress_level: str = "Unknown"
    focus_level: str = "Unknown"


class LegacyLifestyle(_LegacyGroup):
    sleep_schedule: str = "Unknown"
    work_life_balance: str = "Unknown"
    tech_attitude: str = "Unknown"


class LegacyAnalysis(_LegacyGroup):
    """The flat analysis object older analyzer deployments return."""

    human_score: float = Field(..., ge=0, le=100)
    fraud_risk: float = Field(..., ge=0, le=100)
    device_tier: str
    device_value: str = ""
    age_range: str = "Unknown"
    income_level: str = "unknown"
    occupation: str = "Unknown"
    education: str = "Unknown"
    life_situation: str = "Unknown"
    work_style: str = "Unknown"
    personal_life: LegacyPersonalLife = Field(default_factory=LegacyPersonalLife)
    mental_state: LegacyMentalState = Field(default_factory=LegacyMentalState)
    lifestyle: LegacyLifestyle = Field(default_factory=LegacyLifestyle)
    interests: list[str] = Field(default_factory=list)
    creepy_insights: list[str] = Field(default_factory=list)
    profile_summary: str = ""
    confidence: float = Field(default=0, ge=0, le=100)

    def to_profile(self) -> Profile:
        """Map the flat fields onto Profile buckets; unmappable ones become Unknown."""
        conf = int(self.confidence)

        def attr(value: str, bucket: str | None, details: dict[str, str] | None = None):
            if bucket is None:
                return BucketedAttribute.unknown([f"{REMOTE_REASON}: {value}"])
            return BucketedAttribute(
                value=value or bucket,
                bucket=bucket,
                confidence=conf,
                reasoning=[REMOTE_REASON],
                details=details or {},
            )

        def closed(name: str, value: str) -> str | None:
            return value if value in BUCKET_SETS[name] else None

        tier = closed("device_tier", self.device_tier)
        device_text = f"{self.device_tier} ({self.device_value})" if self.device_value else self.device_tier
        income = LEGACY_INCOME.get(self.income_level.lower())
        human = authenticity_bucket(self.human_score, int(self.fraud_risk))
        work = {text: key for key, text in WORK_STYLES.items()}.get(self.work_style)
        interests = [i for i in self.interests if i]

        return Profile(
            age=attr(self.age_range, closed("age", self.age_range)),
            income=attr(self.income_level, income),
            occupation=attr(self.occupation, closed("occupation", self.occupation)),
            education=attr(self.education, closed("education", self.education)),
            device_tier=attr(device_text, tier),
            parental_status=BucketedAttribute.unknown(
                [f"{REMOTE_REASON}: {self.personal_life.has_children}"]
            ),
            stress_level=attr(self.mental_state.stress_level, _stress(self.mental_state.stress_level)),
            sleep_schedule=attr(self.lifestyle.sleep_schedule, _sleep(self.lifestyle.sleep_schedule)),
            mood=attr(self.mental_state.current_mood, closed("mood", self.mental_state.current_mood)),
            lifestyle_habits=LifestyleHabits(),
            personality_flags=BucketedAttribute.unknown(),
            interests=attr(
                ", ".join(interests) or "No clear interests", "detected" if interests else "none"
            ),
            household=BucketedAttribute.unknown(
                [f"{REMOTE_REASON}: {self.personal_life.living_arrangement}"]
            ),
            authenticity=attr(
                f"{human.title()} (human score {self.human_score:.0f}, fraud risk {self.fraud_risk:.0f})",
                human,
                {"human_score": f"{self.human_score:.0f}", "fraud_risk": f"{self.fraud_risk:.0f}"},
            ),
            work_style=attr(self.work_style, work),
            spending=BucketedAttribute.unknown(),
            overall_confidence=conf,
            insights=list(self.creepy_insights),
            source="remote",
        )


LEGACY_INCOME = {"low": "low", "medium": "middle", "high": "high"}


def _stress(text: str) -> str | None:
    lower = text.lower()
    if lower == "unknown":
        return None
    if "high" in lower:
        return "high"
    if "medium" in lower:
        return "medium"
    return "low"


def _sleep(text: str) -> str | None:
    lower = text.lower()
    if lower == "unknown":
        return None
    if "night" in lower:
        return "late"
    if "early" in lower:
        return "early"
    return "normal"


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def _check_buckets(profile: Profile) -> None:
    for name, attr in profile.attributes():
        if not in_closed_set(name, attr.bucket):
            raise RemoteAnalysisError(f"remote bucket {attr.bucket!r} not allowed for {name}")


def parse_analysis(analysis: Any) -> Profile:
    """
    Turn the `analysis` member of a response into a Profile.

    Raises:
        RemoteAnalysisError: If it matches neither the Profile schema nor
            the legacy flat shape.
    """
    if not isinstance(analysis, dict) or not analysis:
        raise RemoteAnalysisError("analysis missing from response")

    # Without the core attributes only the legacy shape can apply
    missing = [key for key in PROFILE_CORE if key not in analysis]
    try:
        if missing:
            profile = LegacyAnalysis.model_validate(analysis).to_profile()
        else:
            profile = Profile.model_validate(analysis)
    except ValidationError as e:
        if missing:
            detail = f"missing {', '.join(missing)}"
        else:
            first = e.errors()[0]
            detail = f"{'.'.join(str(p) for p in first['loc'])}: {first['msg']}"
        raise RemoteAnalysisError(f"analysis does not match the profile schema ({detail})") from e

    _check_buckets(profile)
    return profile.model_copy(update={"source": "remote"})


# =============================================================================
# CLIENT
# =============================================================================


class RemoteAnalyzer:
    """POSTs a SignalBag to `<base_url>/api/analyze` and returns a Profile."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{ANALYZE_PATH}"

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        reraise=True,
    )
    def _post_with_retry(self, payload: dict[str, Any]) -> httpx.Response:
        """POST once; transport errors (including timeouts) are retried."""
        if self._client is not None:
            return self._client.post(self.endpoint, json=payload, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.endpoint, json=payload)

    def analyze(self, bag: SignalBag) -> Profile:
        """
        Run the remote analysis for one bag.

        Raises:
            RemoteAnalysisError: On a malformed endpoint URL, transport
                failure, timeout, non-2xx
                status, non-JSON body, `success` not true, or an analysis
                that cannot be read as a Profile.
        """
        try:
            resp = self._post_with_retry(bag.to_wire())
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError) as e:
            raise RemoteAnalysisError(f"{type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise RemoteAnalysisError(f"HTTP {resp.status_code} from {self.endpoint}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteAnalysisError("response is not JSON") from e

        if not isinstance(data, dict) or data.get("success") is not True:
            error = data.get("error") if isinstance(data, dict) else None
            raise RemoteAnalysisError(f"analysis unsuccessful{f': {error}' if error else ''}")

        return parse_analysis(data.get("analysis"))
