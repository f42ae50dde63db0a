"""
sigprofile cache - profiles keyed by the content hash of their signal bag.

In memory always; mirrored to JSON files when a cache directory is set.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from .models import Profile, SignalBag

KEY_LENGTH = 16


def cache_key(bag: SignalBag) -> str:
    """Filename-safe prefix of the bag's content hash."""
    return bag.content_hash()[:KEY_LENGTH]


class ProfileCache:
    """Identical bags map to the identical profile."""

    def __init__(self, cache_dir: Path | None = None):
        self.cache_dir = cache_dir
        self._memory: dict[str, Profile] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._memory)

    def _path(self, key: str) -> Path | None:
        if not self.cache_dir:
            return None
        return self.cache_dir / f"{key}.json"

    def _load(self, key: str) -> Profile | None:
        path = self._path(key)
        if not path or not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return Profile.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError):
            # Unreadable entry: treat as a miss and let the next put overwrite it
            return None

    def get(self, bag: SignalBag) -> Profile | None:
        key = cache_key(bag)
        profile = self._memory.get(key)
        if profile is None:
            profile = self._load(key)
            if profile is not None:
                self._memory[key] = profile
        if profile is None:
            self.misses += 1
            return None
        self.hits += 1
        return profile.model_copy(deep=True)

    def put(self, bag: SignalBag, profile: Profile) -> None:
        key = cache_key(bag)
        self._memory[key] = profile.model_copy(deep=True)

        path = self._path(key)
        if not path:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(profile.model_dump(mode="json"), f, indent=2)
        except OSError:
            pass  # Memory copy still serves this process

    def clear(self) -> None:
        self._memory.clear()
