"""Tests for age, income, occupation, education and device scoring."""

from sigprofile.demographics import (
    GENERAL_PROFESSIONAL,
    assess_age,
    assess_device,
    assess_education,
    assess_income,
    assess_occupation,
    hour_bucket,
    occupation_label,
    score_age,
    score_device,
    score_income,
    score_occupation,
)
from sigprofile.models import BucketedAttribute, SignalBag
from sigprofile.reference import ScoringContext


class TestAge:
    """Tests for the age scorer."""

    def test_developer_workstation(self, rtx_bag: SignalBag, ctx: ScoringContext) -> None:
        """RTX 4090 plus DevTools normalizes to 1.0, which is 22-30."""
        age = assess_age(rtx_bag, ctx)
        assert age.bucket == "22-30"
        assert age.data_points == 2
        assert age.details["normalized_score"] == "1.00"

    def test_no_signals_is_unknown(self, saudi_bag: SignalBag, ctx: ScoringContext) -> None:
        """A country alone says nothing about age."""
        age = assess_age(saudi_bag, ctx)
        assert age.is_unknown
        assert age.confidence == 0

    def test_facebook_referrer_leans_older(self, make_bag, ctx: ScoringContext) -> None:
        """Facebook arrivals and early mornings push the score older."""
        bag = make_bag(
            {
                "temporal": {"hour": 6},
                "browser": {"referrer": "https://m.facebook.com/story"},
                "socialLogins": {"services": ["facebook"]},
            }
        )
        age = assess_age(bag, ctx)
        assert age.bucket in ("40-55", "50+")
        assert any("Facebook" in r for r in age.reasoning)

    def test_referrer_age_indicator(self, make_bag, ctx: ScoringContext) -> None:
        """TikTok's age indicator of -15 years becomes a +1.5 younger lean."""
        age = assess_age(make_bag({"browser": {"referrer": "https://www.tiktok.com/@someone"}}), ctx)
        assert age.details["normalized_score"] == "1.50"
        assert age.reasoning == ["Referrer skews younger (Came from TikTok (younger demographic))"]

    def test_tech_sophistication(self, make_bag, ctx: ScoringContext) -> None:
        """Locale tech adoption plus a tech referrer past the threshold."""
        bag = make_bag(
            {"browser": {"languages": ["en-US"], "referrer": "https://news.ycombinator.com/item?id=1"}}
        )
        result = score_age(bag, ctx)
        assert any("High tech sophistication (locale and referrer score 125)" in r for r in result.reasoning)

        local_only = score_age(make_bag({"browser": {"languages": ["en-US"]}}), ctx)
        assert not any("sophistication" in r for r in local_only.reasoning)

    def test_hour_buckets(self) -> None:
        """Hours map to coarse buckets, wrapping past midnight."""
        assert hour_bucket(6) == "early_morning"
        assert hour_bucket(12) == "work_hours"
        assert hour_bucket(21) == "evening"
        assert hour_bucket(23) == "night"
        assert hour_bucket(0) == "night"
        assert hour_bucket(3) == "late_night"


class TestIncome:
    """Tests for the income scorer."""

    def test_premium_hardware_is_wealthy(self, rtx_bag: SignalBag, ctx: ScoringContext) -> None:
        """Premium GPU, 16 cores and 64GB RAM reach the top bucket."""
        income = assess_income(rtx_bag, ctx)
        assert income.bucket == "wealthy"
        assert income.value == "$200k+/year"
        assert income.details["score"] == "100"

    def test_high_cost_city(self, make_bag, ctx: ScoringContext) -> None:
        """A high cost-of-living city lifts income and annotates the estimate."""
        income = assess_income(make_bag({"network": {"city": "San Francisco"}}), ctx)
        assert income.bucket == "upper-middle"
        assert income.value.endswith("(San Francisco adjusted)")

    def test_professional_referrer(self, make_bag, ctx: ScoringContext) -> None:
        result = score_income(make_bag({"browser": {"referrer": "https://www.linkedin.com/feed"}}), ctx)
        assert result.raw_score == 60
        assert any("Arrived via LinkedIn" in r for r in result.reasoning)

    def test_locale_income_tier(self, make_bag, ctx: ScoringContext) -> None:
        """Without a city, the primary locale's income tier shifts the score."""
        brazil = score_income(make_bag({"browser": {"languages": ["pt-BR"]}}), ctx)
        assert brazil.raw_score == 46
        assert any("Brazil locale" in r for r in brazil.reasoning)
        assert score_income(make_bag({"browser": {"languages": ["nl-NL"]}}), ctx).raw_score == 58

        with_city = make_bag({"browser": {"languages": ["pt-BR"]}, "network": {"city": "Berlin"}})
        result = score_income(with_city, ctx)
        assert result.raw_score == 50
        assert result.data_points == 0

    def test_cost_of_living_index(self, make_bag, ctx: ScoringContext) -> None:
        """Tel Aviv is expensive by index even with a neutral multiplier."""
        income = assess_income(make_bag({"network": {"city": "Tel Aviv"}}), ctx)
        assert income.details["score"] == "60"
        assert "adjusted" not in income.value

    def test_display_class(self, make_bag, ctx: ScoringContext) -> None:
        monitor = score_income(make_bag({"hardware": {"screenWidth": 3840, "screenHeight": 2160}}), ctx)
        assert monitor.raw_score == 59
        assert any("4K Monitor display (professional/gaming" in r for r in monitor.reasoning)

        laptop = score_income(make_bag({"hardware": {"screenWidth": 1366, "screenHeight": 768}}), ctx)
        assert laptop.raw_score == 41

    def test_isp_only_counts_when_present(self, make_bag, ctx: ScoringContext) -> None:
        """Without an ISP there is no ISP evidence."""
        bag = make_bag({"hardware": {"cpuCores": 4}})
        income = assess_income(bag, ctx)
        assert income.data_points == 1
        assert not any("ISP" in r for r in income.reasoning)

        with_isp = assess_income(make_bag({"network": {"isp": "Verizon Fios"}}), ctx)
        assert any("Premium-tier ISP" in r for r in with_isp.reasoning)


class TestOccupation:
    """Tests for occupation and education."""

    def test_developer_wins(self, rtx_bag: SignalBag, ctx: ScoringContext) -> None:
        """DevTools, cores and RAM outscore the gaming and office candidates."""
        result = score_occupation(rtx_bag, ctx)
        scores = result.facts["scores"]
        assert scores["Software Developer"] == 65
        assert scores["Office Worker"] == 30
        assert scores["Gamer/Streamer"] == 30
        assert scores["Freelancer/Remote Worker"] == 15

        occupation = assess_occupation(rtx_bag, ctx)
        assert occupation.value == "Software Developer"
        assert occupation.bucket == "Software Developer"

    def test_no_signals_is_unknown(self, empty_bag: SignalBag, ctx: ScoringContext) -> None:
        """The office baseline alone never produces an occupation."""
        assert assess_occupation(empty_bag, ctx).is_unknown

    def test_tech_referrer_votes_developer(self, make_bag, ctx: ScoringContext) -> None:
        result = score_occupation(make_bag({"browser": {"referrer": "https://github.com/org/repo"}}), ctx)
        assert result.facts["scores"]["Software Developer"] == 15
        assert any("arrived via tech/repository (tech indicator 60)" in r for r in result.reasoning)

    def test_professional_display(self, make_bag, ctx: ScoringContext) -> None:
        """Only displays rated professional vote for the creative candidate."""
        five_k = make_bag({"hardware": {"screenWidth": 5120, "screenHeight": 2880}})
        assert score_occupation(five_k, ctx).facts["scores"]["Designer/Creative"] == 15

        full_hd = make_bag({"hardware": {"screenWidth": 1920, "screenHeight": 1080}})
        assert score_occupation(full_hd, ctx).facts["scores"]["Designer/Creative"] == 0

    def test_regional_industries(self, make_bag, ctx: ScoringContext) -> None:
        """Locale professions and city industries each vote once."""
        bag = make_bag({"browser": {"languages": ["sv-SE"]}, "network": {"city": "Los Angeles"}})
        result = score_occupation(bag, ctx)
        assert result.facts["regional_fields"] == ["tech", "gaming", "design", "entertainment"]
        assert result.facts["scores"]["Gamer/Streamer"] == 5
        assert result.facts["scores"]["Designer/Creative"] == 10

        occupation = assess_occupation(bag, ctx)
        assert occupation.details["regional_fields"] == "tech, gaming, design, entertainment"

    def test_label_rules(self) -> None:
        """Low scores are general, close seconds pair up, middling scores hedge."""
        scores = {"A": 20.0, "B": 10.0}
        assert occupation_label(scores, ["A", "B"]) == (GENERAL_PROFESSIONAL, GENERAL_PROFESSIONAL)

        scores = {"A": 60.0, "B": 50.0}
        assert occupation_label(scores, ["A", "B"]) == ("A / B", "A")

        scores = {"A": 40.0, "B": 5.0}
        assert occupation_label(scores, ["A", "B"]) == ("Likely A", "A")

    def test_pair_label_is_never_hedged(self) -> None:
        """A middling top score with a close second still pairs plainly."""
        scores = {"A": 40.0, "B": 35.0}
        assert occupation_label(scores, ["A", "B"]) == ("A / B", "A")

    def test_student_tie_break(self, make_bag, ctx: ScoringContext) -> None:
        """A tie involving Student resolves by income."""
        bag = make_bag(
            {
                "hardware": {"gpu": "Intel Arc A770", "cpuCores": 8, "ram": 16},
                "fingerprintSummary": {"wasmSupported": True, "webgpuAvailable": True},
                "temporal": {"hour": 23},
                "browser": {"languages": ["en-US", "es-ES", "pt-BR"]},
            }
        )
        untied = score_occupation(bag, ctx)
        assert untied.facts["scores"]["Software Developer"] == 35
        assert untied.facts["scores"]["Student"] == 35
        assert untied.facts["ranking"][0] == "Software Developer"

        high = BucketedAttribute(value="x", bucket="high", confidence=50)
        low = BucketedAttribute(value="x", bucket="low", confidence=50)
        assert score_occupation(bag, ctx, high).facts["ranking"][0] == "Software Developer"
        preferred = score_occupation(bag, ctx, low)
        assert preferred.facts["ranking"][0] == "Student"
        assert any("Student preferred" in r for r in preferred.reasoning)

    def test_education_first_matching_rule(self, rtx_bag: SignalBag, ctx: ScoringContext) -> None:
        """DevTools without GitHub or fast typing reads as self-taught."""
        education = assess_education(rtx_bag, ctx)
        assert education.bucket == "Self-taught"
        assert education.details["role"] == "Tech hobbyist / Learning to code"

    def test_education_github_and_devtools(self, make_bag, ctx: ScoringContext) -> None:
        """GitHub plus DevTools on Apple Silicon and a wide screen."""
        bag = make_bag(
            {
                "hardware": {"gpu": "Apple M2 Pro", "screenWidth": 3024, "screenHeight": 1964},
                "botDetection": {"devToolsOpen": True},
                "socialLogins": {"services": ["github"]},
            }
        )
        assert assess_education(bag, ctx).bucket == "BS/MS Computer Science"

    def test_education_unknown(self, empty_bag: SignalBag, ctx: ScoringContext) -> None:
        assert assess_education(empty_bag, ctx).is_unknown


class TestDevice:
    """Tests for the device value estimate."""

    def test_rtx_workstation(self, rtx_bag: SignalBag, ctx: ScoringContext) -> None:
        """GPU MSRP plus CPU and RAM extras plus the system minimum."""
        device = assess_device(rtx_bag, ctx)
        assert device.bucket == "premium"
        assert device.value == "premium (~$3,000)"
        assert device.details["estimate"] == "$3,000"
        assert device.details["age"] == "recent"

    def test_depreciation_with_a_clock(self, make_bag, rtx_raw, ctx: ScoringContext) -> None:
        """A known year depreciates the GPU and can drop the tier."""
        raw = dict(rtx_raw)
        raw["temporal"] = {"hour": 21, "dayOfWeek": 3, "year": 2025}
        result = score_device(make_bag(raw), ctx)
        assert result.facts["rounded"] == 2300
        assert assess_device(make_bag(raw), ctx).bucket == "high-end"

    def test_no_hardware_is_unknown(self, saudi_bag: SignalBag, ctx: ScoringContext) -> None:
        """The system minimum alone is not evidence."""
        device = assess_device(saudi_bag, ctx)
        assert device.is_unknown
        assert device.confidence == 0
