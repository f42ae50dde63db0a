"""
sigprofile bucketizer - clamp raw scores and map them to closed label sets.

All bucket tables and confidence parameters are module constants. Changing a
weight here changes output for every profile.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from .models import UNKNOWN, BucketedAttribute, ScoreResult

# =============================================================================
# GENERIC BUCKETING
# =============================================================================


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def bucketize(
    raw: float,
    valid_range: tuple[float, float],
    breakpoints: list[float],
    labels: list[str],
) -> str:
    """Clamp, then pick a label by binary search over ascending breakpoints.

    A score equal to a breakpoint falls in the upper bucket.
    """
    if len(labels) != len(breakpoints) + 1:
        raise ValueError("need exactly one more label than breakpoints")
    value = clamp(raw, *valid_range)
    return labels[bisect_right(breakpoints, value)]


@dataclass(frozen=True)
class BucketTable:
    """Breakpoints plus labels for one dimension."""

    valid_range: tuple[float, float]
    breakpoints: list[float]
    labels: list[str]

    def label(self, raw: float) -> str:
        return bucketize(raw, self.valid_range, self.breakpoints, self.labels)


@dataclass(frozen=True)
class ConfidenceParams:
    base: int
    gain: int
    cap: int

    def __call__(self, data_points: int) -> int:
        return confidence(data_points, self.base, self.gain, self.cap)


def confidence(data_points: int, base: int, gain: int, cap: int) -> int:
    """Saturating confidence, non-decreasing in data_points; 0 without evidence."""
    if data_points <= 0:
        return 0
    return int(min(cap, base + data_points * gain))


# =============================================================================
# BUCKET TABLES
# =============================================================================

# Age score is signed (positive = younger) and normalized by data points
AGE_BUCKETS = BucketTable(
    valid_range=(-4.0, 4.0),
    breakpoints=[-2.0, -1.0, -0.5, 0.5, 1.0, 2.0],
    labels=["50+", "40-55", "32-45", "28-38", "25-34", "22-30", "16-24"],
)

AGE_MIDPOINTS = {
    "16-24": 20,
    "22-30": 26,
    "25-34": 29,
    "28-38": 33,
    "32-45": 38,
    "40-55": 47,
    "50+": 55,
}

INCOME_BUCKETS = BucketTable(
    valid_range=(0.0, 100.0),
    breakpoints=[15, 30, 45, 58, 70, 85],
    labels=["poverty", "low", "lower-middle", "middle", "upper-middle", "high", "wealthy"],
)

INCOME_ESTIMATES = {
    "poverty": "<$15k/year",
    "low": "$15k-$30k/year",
    "lower-middle": "$30k-$50k/year",
    "middle": "$50k-$80k/year",
    "upper-middle": "$80k-$120k/year",
    "high": "$120k-$200k/year",
    "wealthy": "$200k+/year",
}

PARENTAL_BUCKETS = BucketTable(
    valid_range=(-100.0, 100.0),
    breakpoints=[-40, -25, -10, 5, 15, 30, 50],
    labels=[
        "very_unlikely",
        "unlikely",
        "less_likely",
        "uncertain",
        "possibly",
        "probably",
        "likely",
        "very_likely",
    ],
)

# Applied to the device estimate rounded to the nearest $100
DEVICE_BUCKETS = BucketTable(
    valid_range=(0.0, 1_000_000.0),
    breakpoints=[700, 1500, 3000],
    labels=["low-end", "mid-range", "high-end", "premium"],
)

STRESS_BUCKETS = BucketTable(
    valid_range=(0.0, 1_000.0),
    breakpoints=[25, 50],
    labels=["low", "medium", "high"],
)

CAFFEINE_BUCKETS = BucketTable((10, 95), [35, 55, 75], ["low", "moderate", "likely", "highly_likely"])
ALCOHOL_BUCKETS = BucketTable((5, 85), [30, 50, 70], ["unlikely", "occasional", "possibly", "likely"])
SMOKING_BUCKETS = BucketTable(
    (2, 50), [8, 15, 25], ["highly_unlikely", "very_unlikely", "unlikely", "possible"]
)
TRAVEL_BUCKETS = BucketTable(
    (10, 95), [25, 40, 55, 75], ["local", "rarely", "occasionally", "regularly", "frequently"]
)

# =============================================================================
# CONFIDENCE PARAMETERS
# =============================================================================

CONFIDENCE = {
    "age": ConfidenceParams(35, 8, 85),
    "income": ConfidenceParams(30, 7, 75),
    "occupation": ConfidenceParams(25, 10, 85),
    "education": ConfidenceParams(20, 8, 70),
    "device_tier": ConfidenceParams(30, 10, 85),
    "parental_status": ConfidenceParams(30, 5, 85),
    "household": ConfidenceParams(25, 8, 70),
    "stress_level": ConfidenceParams(30, 10, 80),
    "sleep_schedule": ConfidenceParams(50, 10, 60),
    "mood": ConfidenceParams(30, 15, 80),
    "lifestyle": ConfidenceParams(25, 8, 70),
    "personality_flags": ConfidenceParams(30, 8, 90),
    "interests": ConfidenceParams(30, 8, 85),
    "authenticity": ConfidenceParams(40, 10, 95),
    "work_style": ConfidenceParams(30, 15, 75),
    "spending": ConfidenceParams(30, 10, 75),
}

# Closed bucket key sets per profile attribute ("Unknown" is always allowed)
BUCKET_SETS: dict[str, frozenset[str]] = {
    "age": frozenset(AGE_BUCKETS.labels),
    "income": frozenset(INCOME_BUCKETS.labels),
    "occupation": frozenset(
        {
            "Software Developer",
            "Designer/Creative",
            "Gamer/Streamer",
            "Crypto/Finance",
            "Office Worker",
            "Student",
            "Freelancer/Remote Worker",
            "General professional",
        }
    ),
    "education": frozenset(
        {
            "BS/MS Computer Science",
            "Computer Science degree",
            "Tech-related degree",
            "Bachelor's degree",
            "Coding bootcamp",
            "Self-taught",
            "Finance or tech background",
            "College educated",
            "Design or related degree",
            "Tech education",
            "Technical degree",
            "Various",
            "Post-secondary likely (regional)",
        }
    ),
    "device_tier": frozenset(DEVICE_BUCKETS.labels),
    "parental_status": frozenset(PARENTAL_BUCKETS.labels),
    "stress_level": frozenset(STRESS_BUCKETS.labels),
    "sleep_schedule": frozenset({"early", "normal", "late", "irregular"}),
    "mood": frozenset(
        {"frustrated", "slightly_frustrated", "anxious_searching", "focused", "disengaged", "neutral"}
    ),
    "lifestyle_habits.caffeine": frozenset(CAFFEINE_BUCKETS.labels),
    "lifestyle_habits.drinks_alcohol": frozenset(ALCOHOL_BUCKETS.labels),
    "lifestyle_habits.smokes": frozenset(SMOKING_BUCKETS.labels),
    "lifestyle_habits.travel": frozenset(TRAVEL_BUCKETS.labels),
    "personality_flags": frozenset({"detected", "none"}),
    "interests": frozenset({"detected", "none"}),
    "household": frozenset(
        {"likely_homeowner", "renting_or_recent", "possibly_owns", "renter", "likely_renting"}
    ),
    "authenticity": frozenset({"human", "uncertain", "automated"}),
    "work_style": frozenset(
        {"remote_developer", "standard_hours", "night_owl", "weekend_worker", "flexible"}
    ),
    "spending": frozenset(
        {"premium_buyer", "quality_focused", "value_conscious", "budget_conscious"}
    ),
}


def in_closed_set(name: str, bucket: str) -> bool:
    """True if bucket is allowed for the attribute (Unknown always is)."""
    return bucket == UNKNOWN or bucket in BUCKET_SETS[name]


def round_to_hundred(value: float) -> int:
    """Round half up to the nearest $100."""
    return int(value / 100 + 0.5) * 100


def to_attribute(
    result: ScoreResult,
    value: str,
    bucket: str,
    params: ConfidenceParams,
    details: dict[str, str] | None = None,
) -> BucketedAttribute:
    """Wrap a scored result; zero data points always means Unknown/0."""
    if result.data_points == 0:
        return BucketedAttribute.unknown(result.reasoning)
    return BucketedAttribute(
        value=value,
        bucket=bucket,
        confidence=params(result.data_points),
        data_points=result.data_points,
        reasoning=result.reasoning,
        evidence=list(result.evidence),
        details=details or {},
    )


def approx_age(age: BucketedAttribute) -> int | None:
    """Midpoint of the age bucket, None when age is Unknown."""
    return AGE_MIDPOINTS.get(age.bucket)
