"""Tests for bucketing and confidence primitives."""

import pytest

from sigprofile.buckets import (
    AGE_BUCKETS,
    BUCKET_SETS,
    CONFIDENCE,
    DEVICE_BUCKETS,
    bucketize,
    confidence,
    in_closed_set,
    round_to_hundred,
    to_attribute,
)
from sigprofile.models import UNKNOWN, ScoreResult


class TestBucketize:
    """Tests for bucketize()."""

    def test_breakpoint_goes_to_upper_bucket(self) -> None:
        """A score equal to a breakpoint lands in the upper bucket."""
        assert bucketize(10, (0, 100), [10, 20], ["a", "b", "c"]) == "b"
        assert bucketize(9.99, (0, 100), [10, 20], ["a", "b", "c"]) == "a"
        assert bucketize(20, (0, 100), [10, 20], ["a", "b", "c"]) == "c"

    def test_clamps_before_lookup(self) -> None:
        """Out-of-range scores clamp to the ends."""
        assert bucketize(-500, (0, 100), [10, 20], ["a", "b", "c"]) == "a"
        assert bucketize(500, (0, 5), [10, 20], ["a", "b", "c"]) == "a"

    def test_label_count_must_match(self) -> None:
        """One more label than breakpoints."""
        with pytest.raises(ValueError):
            bucketize(1, (0, 10), [5], ["only"])

    def test_age_table(self) -> None:
        """Positive normalized age scores lean younger."""
        assert AGE_BUCKETS.label(1.0) == "22-30"
        assert AGE_BUCKETS.label(3.0) == "16-24"
        assert AGE_BUCKETS.label(0.0) == "28-38"
        assert AGE_BUCKETS.label(-3.0) == "50+"

    def test_device_table(self) -> None:
        """Device tiers on rounded dollar estimates."""
        assert DEVICE_BUCKETS.label(3000) == "premium"
        assert DEVICE_BUCKETS.label(2900) == "high-end"
        assert DEVICE_BUCKETS.label(600) == "low-end"


class TestConfidence:
    """Tests for the saturating confidence function."""

    def test_zero_without_evidence(self) -> None:
        """No data points, no confidence."""
        assert confidence(0, 30, 10, 80) == 0

    def test_capped(self) -> None:
        """Confidence never exceeds the cap."""
        assert confidence(100, 30, 10, 80) == 80

    @pytest.mark.parametrize("name", sorted(CONFIDENCE))
    def test_monotonic_per_scorer(self, name: str) -> None:
        """More evidence never lowers confidence, and stays within 0..100."""
        params = CONFIDENCE[name]
        values = [params(dp) for dp in range(0, 40)]
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)


class TestHelpers:
    """Tests for small helpers."""

    def test_round_to_hundred_half_up(self) -> None:
        """Rounds to the nearest $100, halves up."""
        assert round_to_hundred(2999) == 3000
        assert round_to_hundred(2949) == 2900
        assert round_to_hundred(2950) == 3000

    def test_unknown_always_allowed(self) -> None:
        """Every closed set admits Unknown."""
        for name in BUCKET_SETS:
            assert in_closed_set(name, UNKNOWN)
        assert not in_closed_set("age", "teenager")

    def test_to_attribute_without_data_points(self) -> None:
        """Zero data points always yields Unknown/0."""
        result = ScoreResult(raw_score=80)
        result.note("nothing counted")
        attr = to_attribute(result, "premium", "premium", CONFIDENCE["device_tier"])
        assert attr.is_unknown
        assert attr.confidence == 0
        assert attr.reasoning == ["nothing counted"]

    def test_to_attribute_carries_evidence(self) -> None:
        """Evidence, data points and details flow through."""
        result = ScoreResult()
        result.add(5, "signal one")
        result.add(3, "signal two")
        attr = to_attribute(result, "Value", "low", CONFIDENCE["stress_level"], {"k": "v"})
        assert attr.confidence == CONFIDENCE["stress_level"](2)
        assert attr.data_points == 2
        assert [e.delta for e in attr.evidence] == [5, 3]
        assert attr.details == {"k": "v"}
