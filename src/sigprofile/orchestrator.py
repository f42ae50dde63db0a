"""
sigprofile orchestrator - parse, cache, remote analysis with local fallback.
"""

import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx

from .assembler import compute_profile
from .cache import ProfileCache, cache_key
from .insights import DEFAULT_MAX_INSIGHTS
from .logger import ProgressLogger
from .models import Profile, SignalBag, parse_signal_bag
from .reference import ReferenceData, ScoringContext
from .remote import DEFAULT_TIMEOUT, RemoteAnalysisError, RemoteAnalyzer

ENV_PREFIX = "SIGPROFILE_"


def _env_number(
    name: str, default: Any, cast: type, warnings: list[str], minimum: int = 0
) -> Any:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        warnings.append(f"{ENV_PREFIX}{name}={raw!r} is not a valid number, using {default}")
        return default
    if value < minimum:
        problem = "is negative" if minimum == 0 else f"is below {minimum}"
        warnings.append(f"{ENV_PREFIX}{name}={raw!r} {problem}, using {default}")
        return default
    return value


@dataclass
class EngineConfig:
    """Engine settings; see from_env() for the environment variables."""

    remote_url: str | None = None
    remote_timeout: float = DEFAULT_TIMEOUT
    max_insights: int = DEFAULT_MAX_INSIGHTS
    reference_year: int | None = None
    cache_dir: Path | None = None
    data_dir: Path | None = None
    use_remote: bool = True

    @classmethod
    def from_env(cls, warnings: list[str] | None = None) -> "EngineConfig":
        """
        Build a config from SIGPROFILE_* environment variables.

        Invalid numbers fall back to defaults; a description of each is
        appended to `warnings` when a list is given.
        """
        sink: list[str] = [] if warnings is None else warnings
        cache_dir = os.getenv(ENV_PREFIX + "CACHE_DIR")
        data_dir = os.getenv(ENV_PREFIX + "DATA_DIR")
        return cls(
            remote_url=os.getenv(ENV_PREFIX + "REMOTE_URL") or None,
            remote_timeout=_env_number("REMOTE_TIMEOUT", DEFAULT_TIMEOUT, float, sink),
            max_insights=_env_number("MAX_INSIGHTS", DEFAULT_MAX_INSIGHTS, int, sink, minimum=1),
            reference_year=_env_number("REFERENCE_YEAR", None, int, sink),
            cache_dir=Path(cache_dir) if cache_dir else None,
            data_dir=Path(data_dir) if data_dir else None,
        )

    @property
    def remote_enabled(self) -> bool:
        return self.use_remote and bool(self.remote_url)


class ProfileEngine:
    """Turns raw collector JSON (or a SignalBag) into a Profile."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        logger: ProgressLogger | None = None,
        reference: ReferenceData | None = None,
        client: httpx.Client | None = None,
        verbose: bool = False,
    ):
        self.config = config or EngineConfig()
        self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:6]
        self.logger = logger or ProgressLogger(self.run_id, verbose=verbose)

        if reference is None:
            if self.config.data_dir:
                reference = ReferenceData.load(self.config.data_dir)
            else:
                reference = ReferenceData.default()
        self.context = ScoringContext(reference, self.config.reference_year)
        self.cache = ProfileCache(self.config.cache_dir)

        self.remote: RemoteAnalyzer | None = None
        if self.config.remote_enabled:
            self.remote = RemoteAnalyzer(
                self.config.remote_url, timeout=self.config.remote_timeout, client=client
            )

    def profile(self, raw: Any) -> Profile:
        """
        Profile one visit. Never raises for bag content or remote failures.

        Steps: parse the bag, check the cache, try the remote analyzer,
        fall back to local scoring, cache the result.
        """
        self.logger.phase("Step 1/4", "Parsing signals")
        bag, dropped = parse_signal_bag(raw)
        self.logger.dropped(dropped)

        self.logger.phase("Step 2/4", "Cache lookup")
        cached = self.cache.get(bag)
        if cached is not None:
            self.logger.cache_hit(cache_key(bag))
            self.logger.finish(cached.overall_confidence, cached.source)
            return cached

        profile = None
        if self.remote is not None:
            self.logger.phase("Step 3/4", f"Remote analysis via {self.remote.endpoint}")
            profile = self._try_remote(self.remote, bag)
        else:
            self.logger.phase("Step 3/4", "Remote analysis disabled")

        if profile is None:
            self.logger.phase("Step 4/4", "Local scoring")
            profile = compute_profile(
                bag, self.context, self.logger, max_insights=self.config.max_insights
            )

        self.cache.put(bag, profile)
        self.logger.finish(profile.overall_confidence, profile.source)
        return profile

    def _try_remote(self, remote: RemoteAnalyzer, bag: SignalBag) -> Profile | None:
        try:
            profile = remote.analyze(bag)
        except RemoteAnalysisError as e:
            self.logger.warning(f"Remote analysis failed: {e}")
            self.logger.fallback("Using local scoring")
            return None
        self.logger.remote(f"Adopted remote profile ({profile.overall_confidence}% confidence)")
        return profile

    def local(self, raw: Any) -> Profile:
        """Local scoring only: no cache, no remote."""
        bag, dropped = parse_signal_bag(raw)
        self.logger.dropped(dropped)
        return compute_profile(bag, self.context, self.logger, max_insights=self.config.max_insights)
