"""
sigprofile wellbeing - stress, sleep, fitness and mood from interaction behaviour.
"""

from __future__ import annotations

from .buckets import CONFIDENCE, STRESS_BUCKETS, to_attribute
from .models import BucketedAttribute, ScoreResult, SignalBag
from .reference import ScoringContext

RAGE_CLICK_WEIGHT = 15
ERRATIC_THRESHOLD = 5
ERRATIC_WEIGHT = 2
TAB_SWITCH_THRESHOLD = 10
TAB_SWITCH_WEIGHT = 20
LONG_HOLD_MS = 150
LONG_HOLD_WEIGHT = 15
CALM_MOVEMENTS = 50

# =============================================================================
# STRESS
# =============================================================================


def score_stress(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """Sum of weighted stress indicators; facts["indicators"] counts them."""
    result = ScoreResult()
    mouse = bag.behavioral.mouse
    typing = bag.behavioral.typing
    tabs = bag.behavioral.attention.tab_switches
    indicators = 0

    if mouse.rage_clicks is not None:
        if mouse.rage_clicks > 0:
            indicators += 1
            result.add(
                mouse.rage_clicks * RAGE_CLICK_WEIGHT,
                f"{mouse.rage_clicks} rage click(s) indicate frustration",
            )
        else:
            result.add(0, "No rage clicks")

    if mouse.erratic_movements is not None:
        if mouse.erratic_movements > ERRATIC_THRESHOLD:
            indicators += 1
            result.add(
                mouse.erratic_movements * ERRATIC_WEIGHT,
                f"{mouse.erratic_movements} erratic mouse movements detected",
            )
        else:
            result.add(0, "Steady mouse movement")

    if tabs is not None:
        if tabs > TAB_SWITCH_THRESHOLD:
            indicators += 1
            result.add(TAB_SWITCH_WEIGHT, "High tab switching suggests scattered attention")
        else:
            result.add(0, f"{tabs} tab switches")

    if typing.average_hold_time is not None and typing.total_keystrokes is not None:
        if typing.average_hold_time > LONG_HOLD_MS and typing.total_keystrokes > 10:
            indicators += 1
            result.add(LONG_HOLD_WEIGHT, "Long key holds suggest hesitant typing")
        else:
            result.add(0, "Normal key hold times")

    if mouse.movements is not None and mouse.movements > CALM_MOVEMENTS and indicators == 0:
        result.add(0, "Smooth, calm interaction patterns")

    result.facts["indicators"] = indicators
    return result


def stress_bucket(result: ScoreResult) -> str:
    if result.facts["indicators"] == 0:
        return "low"
    bucket = STRESS_BUCKETS.label(result.raw_score)
    if bucket == "low" and result.facts["indicators"] >= 2:
        return "medium"
    return bucket


def assess_stress(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_stress(bag, ctx)
    bucket = stress_bucket(result)
    details = {"total": f"{result.raw_score:g}", "indicators": str(result.facts["indicators"])}
    return to_attribute(result, bucket, bucket, CONFIDENCE["stress_level"], details)


# =============================================================================
# SLEEP + FITNESS
# =============================================================================


def sleep_schedule(hour: int) -> tuple[str, str]:
    if 4 <= hour < 7:
        return "early", "Very early morning browsing suggests an early riser"
    if 7 <= hour < 23:
        return "normal", "Browsing during ordinary waking hours"
    if hour >= 23 or hour < 2:
        return "late", "Late night browsing suggests a night owl"
    return "irregular", "Small-hours browsing suggests irregular sleep"


def fitness_level(bag: SignalBag) -> str:
    """Mostly unknowable from browser signals; never guessed without a cue."""
    hw = bag.hardware
    hour = bag.temporal.hour
    if hw.touch_support and (hw.max_touch_points or 0) > 5:
        return "moderate"
    if hour is not None and 6 <= hour < 8:
        return "moderate"
    return "unknown"


def health_consciousness(schedule: str, fitness: str, hour: int) -> str:
    if schedule == "early" and fitness == "moderate":
        return "Likely health-conscious"
    if schedule == "irregular" or hour < 3:
        return "May not prioritize sleep health"
    return "Unknown"


def assess_sleep(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    """Sleep schedule from the local hour, with fitness and health as details."""
    result = ScoreResult()
    hour = bag.temporal.hour
    if hour is None:
        return BucketedAttribute.unknown()

    schedule, reason = sleep_schedule(hour)
    result.add(0, reason)
    fitness = fitness_level(bag)
    details = {
        "fitness": fitness,
        "health_conscious": health_consciousness(schedule, fitness, hour),
    }
    return to_attribute(result, schedule, schedule, CONFIDENCE["sleep_schedule"], details)


# =============================================================================
# MOOD
# =============================================================================


def score_mood(bag: SignalBag, ctx: ScoringContext) -> ScoreResult:
    """First matching mood; facts["mood"] holds the label."""
    result = ScoreResult()
    mouse = bag.behavioral.mouse
    attention = bag.behavioral.attention
    engagement = bag.behavioral.emotions.engagement
    mood = "neutral"

    if mouse.rage_clicks is not None:
        if mouse.rage_clicks > 2:
            mood = "frustrated"
            result.add(mouse.rage_clicks, f"{mouse.rage_clicks} rage clicks")
        elif mouse.rage_clicks > 0:
            mood = "slightly_frustrated"
            result.add(mouse.rage_clicks, "An occasional rage click")
        else:
            result.add(0, "No rage clicks")

    if mouse.erratic_movements is not None:
        if mouse.erratic_movements > 15 and mood == "neutral":
            mood = "anxious_searching"
            result.add(1, "Erratic pointer movement, searching for something")
        else:
            result.add(0, f"{mouse.erratic_movements} erratic movements")

    if attention.tab_switches is not None and attention.focus_time is not None:
        if mood == "neutral" and attention.tab_switches < 3 and attention.focus_time > 60_000:
            mood = "focused"
            result.add(1, "Long focus with few tab switches")
        else:
            result.add(0, "Attention pattern consulted")

    if engagement is not None:
        if mood == "neutral" and engagement < 30:
            mood = "disengaged"
            result.add(-1, f"Low engagement ({engagement:g}/100)")
        else:
            result.add(0, f"Engagement {engagement:g}/100")

    result.facts["mood"] = mood
    return result


def assess_mood(bag: SignalBag, ctx: ScoringContext) -> BucketedAttribute:
    result = score_mood(bag, ctx)
    mood = result.facts["mood"]
    return to_attribute(result, mood, mood, CONFIDENCE["mood"])
