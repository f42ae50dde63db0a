"""Profile-wide guarantees that hold for any bag, however sparse or broken."""

from typing import Any

import pytest

from sigprofile.assembler import compute_profile
from sigprofile.buckets import in_closed_set
from sigprofile.models import SignalBag, parse_signal_bag
from sigprofile.reference import ScoringContext

PARTIAL = {
    "hardware": {"cpuCores": 4},
    "temporal": {"hour": 3},
}
MALFORMED = {
    "hardware": {"gpu": 12, "cpuCores": "lots", "ram": -4, "screenWidth": "wide"},
    "temporal": {"hour": 99, "dayOfWeek": "Tuesday"},
    "browser": {"languages": "en-US", "referrer": ["https://reddit.com"]},
    "crypto": {"wallets": 5},
    "behavioral": {"typing": {"averageWPM": "fast"}},
    "unexpected": {"nested": True},
}

# Signal groups in the order they are layered onto a growing bag
LAYERS = (
    "hardware",
    "network",
    "temporal",
    "botDetection",
    "behavioral",
    "tracking",
    "crypto",
    "socialLogins",
    "browser",
    "fingerprintSummary",
    "storage",
)


def _parsed(raw: Any) -> SignalBag:
    bag, _ = parse_signal_bag(raw)
    return bag


@pytest.fixture(params=["empty", "partial", "malformed", "not_a_mapping", "rtx", "full"])
def any_bag(request: pytest.FixtureRequest, rtx_raw: dict, rich_raw: dict) -> SignalBag:
    raw = {
        "empty": {},
        "partial": PARTIAL,
        "malformed": MALFORMED,
        "not_a_mapping": ["hardware", 16],
        "rtx": rtx_raw,
        "full": rich_raw,
    }[request.param]
    return _parsed(raw)


class TestAnyBag:
    """Guarantees checked across empty, partial, malformed and full bags."""

    def test_buckets_in_closed_sets(self, any_bag: SignalBag, ctx: ScoringContext) -> None:
        profile = compute_profile(any_bag, ctx)
        for name, attr in profile.attributes():
            assert in_closed_set(name, attr.bucket), (name, attr.bucket)
            assert 0 <= attr.confidence <= 100, name
            if attr.data_points == 0:
                assert attr.confidence == 0, name

    @pytest.mark.parametrize("cap", [1, 3, 5])
    def test_insight_count(self, any_bag: SignalBag, ctx: ScoringContext, cap: int) -> None:
        insights = compute_profile(any_bag, ctx, max_insights=cap).insights
        assert 0 < len(insights) <= cap + 1
        assert all(line for line in insights)

    def test_overall_confidence_bounds(self, any_bag: SignalBag, ctx: ScoringContext) -> None:
        profile = compute_profile(any_bag, ctx)
        assert 0 <= profile.overall_confidence <= 95

    def test_malformed_leaves_are_dropped(self) -> None:
        bag, dropped = parse_signal_bag(MALFORMED)
        assert "hardware.cpuCores" in dropped
        assert "temporal.hour" in dropped
        assert bag.hardware.cpu_cores is None
        assert bag.temporal.hour is None


class TestConfidenceGrowth:
    """Layering signal groups onto a bag never lowers a scorer's confidence."""

    @pytest.mark.parametrize("name", ["age", "income", "device_tier"])
    def test_non_decreasing(self, rich_raw: dict, ctx: ScoringContext, name: str) -> None:
        raw: dict[str, Any] = {}
        previous = compute_profile(_parsed(raw), ctx).attribute(name)
        assert previous.confidence == 0

        for layer in LAYERS:
            if layer not in rich_raw:
                continue
            raw[layer] = rich_raw[layer]
            current = compute_profile(_parsed(raw), ctx).attribute(name)
            assert current.data_points >= previous.data_points, (name, layer)
            assert current.confidence >= previous.confidence, (name, layer)
            previous = current

        assert previous.confidence > 0

    def test_overall_grows_with_hardware_detail(self, ctx: ScoringContext) -> None:
        """Each extra hardware fact adds evidence to the overall figure."""
        steps = (
            {"cpuCores": 16},
            {"cpuCores": 16, "ram": 64},
            {"cpuCores": 16, "ram": 64, "gpu": "NVIDIA GeForce RTX 4090"},
        )
        overall = [
            compute_profile(_parsed({"hardware": hw}), ctx).overall_confidence for hw in steps
        ]
        assert overall == sorted(overall)
        assert overall[0] > 0
