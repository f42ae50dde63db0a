"""Pytest configuration and fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from sigprofile.logger import ProgressLogger
from sigprofile.models import SignalBag, parse_signal_bag
from sigprofile.reference import ReferenceData, ScoringContext


def _bag(raw: dict[str, Any]) -> SignalBag:
    bag, dropped = parse_signal_bag(raw)
    assert dropped == []
    return bag


@pytest.fixture
def make_bag() -> Callable[[dict[str, Any]], SignalBag]:
    """Collector JSON -> SignalBag, failing the test on any discarded signal."""
    return _bag


@pytest.fixture
def reference() -> ReferenceData:
    """Packaged reference tables."""
    return ReferenceData.default()


@pytest.fixture
def ctx(reference: ReferenceData) -> ScoringContext:
    """Scoring context without a fallback year."""
    return ScoringContext(reference)


@pytest.fixture
def quiet_logger() -> ProgressLogger:
    """Logger that prints nothing to stdout."""
    return ProgressLogger("test", quiet=True)


@pytest.fixture
def empty_bag() -> SignalBag:
    return SignalBag()


@pytest.fixture
def rtx_raw() -> dict[str, Any]:
    """High-end developer workstation on a Wednesday evening."""
    return {
        "hardware": {"gpu": "NVIDIA GeForce RTX 4090", "cpuCores": 16, "ram": 64},
        "temporal": {"hour": 21, "dayOfWeek": 3},
        "botDetection": {"devToolsOpen": True},
    }


@pytest.fixture
def rtx_bag(rtx_raw: dict[str, Any]) -> SignalBag:
    return _bag(rtx_raw)


@pytest.fixture
def saudi_bag() -> SignalBag:
    """Only the network country is known."""
    return _bag({"network": {"country": "Saudi Arabia"}})


@pytest.fixture
def rich_raw() -> dict[str, Any]:
    """A visit with most signal groups populated."""
    return {
        "hardware": {
            "gpu": "Apple M2 Pro",
            "cpuCores": 10,
            "ram": 16,
            "screenWidth": 3024,
            "screenHeight": 1964,
            "pixelRatio": 2,
            "colorDepth": 30,
            "battery": {"level": 0.25, "charging": False},
        },
        "network": {
            "city": "San Francisco",
            "country": "United States",
            "isp": "Comcast Xfinity",
            "timezone": "America/Los_Angeles",
        },
        "browser": {
            "userAgent": "Mozilla/5.0 (Macintosh) AppleWebKit/605.1.15 Safari/605.1.15",
            "vendor": "Apple Computer, Inc.",
            "languages": ["en-US", "fr-FR", "de-DE"],
            "historyLength": 14,
            "mobile": False,
            "referrer": "https://www.reddit.com/r/programming/comments/abc",
        },
        "fingerprintSummary": {"webgpuAvailable": True, "wasmSupported": True},
        "botDetection": {"isAutomated": False, "isHeadless": False, "devToolsOpen": False},
        "behavioral": {
            "typing": {"totalKeystrokes": 120, "averageWPM": 75, "averageHoldTime": 95},
            "mouse": {"totalClicks": 14, "rageClicks": 0, "erraticMovements": 2, "movements": 240},
            "scroll": {"scrollEvents": 30},
            "attention": {"tabSwitches": 4, "focusTime": 90000},
            "emotions": {"engagement": 70},
        },
        "tracking": {"adBlocker": True, "doNotTrack": True},
        "crypto": {"wallets": ["MetaMask", "Phantom"]},
        "socialLogins": {"services": ["google", "github", "reddit"]},
        "temporal": {"hour": 23, "minute": 15, "dayOfWeek": 2, "month": 10, "year": 2025},
        "storage": {"used": 4500000},
    }


@pytest.fixture
def rich_bag(rich_raw: dict[str, Any]) -> SignalBag:
    return _bag(rich_raw)
