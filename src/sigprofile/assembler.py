"""
sigprofile assembler - run every scorer in dependency order and build a Profile.
"""

from collections.abc import Callable
from typing import TypeVar

from .demographics import (
    assess_age,
    assess_device,
    assess_education,
    assess_income,
    assess_occupation,
)
from .household import assess_household, assess_parental
from .insights import DEFAULT_MAX_INSIGHTS, SPARSE_SUMMARY, generate_insights
from .lifestyle import Upstream, assess_lifestyle
from .logger import ProgressLogger
from .models import BucketedAttribute, LifestyleHabits, Profile, SignalBag
from .personality import (
    assess_authenticity,
    assess_flags,
    assess_interests,
    assess_spending,
    assess_work_style,
    flag_detected,
)
from .reference import ScoringContext
from .wellbeing import assess_mood, assess_sleep, assess_stress

T = TypeVar("T")

OVERALL_BASE = 30
OVERALL_GAIN = 2
OVERALL_CAP = 95


def overall_confidence(profile: Profile) -> int:
    """0 without any evidence, else min(95, 30 + 2 * total data points)."""
    total = sum(attr.data_points for _, attr in profile.attributes())
    if total == 0:
        return 0
    return min(OVERALL_CAP, OVERALL_BASE + OVERALL_GAIN * total)


def _fenced(
    logger: ProgressLogger,
    name: str,
    fn: Callable[[], T],
    fallback: Callable[[], T],
) -> T:
    """Run one scorer; a fault degrades only that dimension."""
    try:
        return fn()
    except Exception as e:
        logger.error(f"{name} scorer failed: {type(e).__name__}: {e}")
        return fallback()


def _failed_lifestyle() -> LifestyleHabits:
    failed = BucketedAttribute.failed
    return LifestyleHabits(
        caffeine=failed(), drinks_alcohol=failed(), smokes=failed(), travel=failed()
    )


def compute_profile(
    bag: SignalBag,
    context: ScoringContext,
    logger: ProgressLogger | None = None,
    max_insights: int = DEFAULT_MAX_INSIGHTS,
) -> Profile:
    """
    Score every dimension of a bag locally.

    Order matters: later scorers read earlier attributes (income feeds
    occupation, age and income feed parental status and household, flags
    feed interests, device tier feeds spending). An Unknown upstream
    attribute is treated as absent by every consumer.
    """
    log = logger or ProgressLogger("local", quiet=True)
    failed = BucketedAttribute.failed

    def run(name: str, fn: Callable[[], BucketedAttribute]) -> BucketedAttribute:
        attr = _fenced(log, name, fn, failed)
        log.scorer(name, attr)
        return attr

    age = run("age", lambda: assess_age(bag, context))
    income = run("income", lambda: assess_income(bag, context))
    device_tier = run("device_tier", lambda: assess_device(bag, context))
    occupation = run("occupation", lambda: assess_occupation(bag, context, income))
    education = run("education", lambda: assess_education(bag, context))
    parental = run("parental_status", lambda: assess_parental(bag, context, age, income))
    household = run("household", lambda: assess_household(bag, context, age, income))
    stress = run("stress_level", lambda: assess_stress(bag, context))
    sleep = run("sleep_schedule", lambda: assess_sleep(bag, context))
    mood = run("mood", lambda: assess_mood(bag, context))
    flags = run("personality_flags", lambda: assess_flags(bag, context))
    interests = run("interests", lambda: assess_interests(bag, context, flags))

    upstream = Upstream(
        age=age,
        income=income,
        occupation=occupation,
        device_tier=device_tier,
        developer=flag_detected(flags, "developer"),
    )
    lifestyle = _fenced(
        log,
        "lifestyle_habits",
        lambda: assess_lifestyle(bag, context, upstream),
        _failed_lifestyle,
    )
    for habit in LifestyleHabits.model_fields:
        log.scorer(f"lifestyle_habits.{habit}", getattr(lifestyle, habit))

    authenticity = run("authenticity", lambda: assess_authenticity(bag, context))
    work_style = run("work_style", lambda: assess_work_style(bag, context))
    spending = run("spending", lambda: assess_spending(bag, context, device_tier))

    profile = Profile(
        age=age,
        income=income,
        occupation=occupation,
        education=education,
        device_tier=device_tier,
        parental_status=parental,
        stress_level=stress,
        sleep_schedule=sleep,
        mood=mood,
        lifestyle_habits=lifestyle,
        personality_flags=flags,
        interests=interests,
        household=household,
        authenticity=authenticity,
        work_style=work_style,
        spending=spending,
        source="local",
    )
    profile = profile.model_copy(update={"overall_confidence": overall_confidence(profile)})
    insights = _fenced(
        log,
        "insights",
        lambda: generate_insights(bag, profile, context, max_insights),
        lambda: [SPARSE_SUMMARY],
    )
    return profile.model_copy(update={"insights": insights})
