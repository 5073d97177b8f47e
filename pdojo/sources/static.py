"""Static pattern source — draws challenges from the YAML catalog."""

import asyncio
import random
import uuid
from pathlib import Path

import yaml

from pdojo.errors import SourceUnavailable
from pdojo.sources.base import PatternSource
from pdojo.state import Challenge

REQUIRED_ENTRY_FIELDS = {"slug", "title", "prompt"}


def _validate_entry(entry: dict, index: int) -> None:
    """Validate one catalog entry."""
    if not isinstance(entry, dict):
        raise ValueError(f"Catalog entry {index} is not a mapping.")
    missing = REQUIRED_ENTRY_FIELDS - set(entry.keys())
    if missing:
        raise ValueError(f"Catalog entry {index} missing required fields: {missing}")
    keywords = entry.get("keywords", [])
    if not isinstance(keywords, list):
        raise ValueError(f"Catalog entry {index} has non-list keywords.")
    if not all(isinstance(k, str) and k.strip() for k in keywords):
        raise ValueError(f"Catalog entry {index} has keywords that are not non-empty strings.")


def load_catalog(path: Path) -> list[dict]:
    """Load and validate a challenge catalog file."""
    entries = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or []
    if not isinstance(entries, list):
        raise ValueError("Challenge catalog must be a list of entries.")
    for i, entry in enumerate(entries):
        _validate_entry(entry, i)
    return entries


def build_challenge(entry: dict) -> Challenge:
    """Mint a Challenge with a fresh id from a catalog-shaped dict."""
    slug = entry.get("slug") or "challenge"
    return Challenge(
        challenge_id=f"{slug}-{uuid.uuid4().hex[:8]}",
        title=entry["title"],
        prompt=entry["prompt"].strip(),
        language=entry.get("language"),
        difficulty=entry.get("difficulty"),
        metadata={"slug": slug, "keywords": list(entry.get("keywords", []))},
    )


class StaticPatternSource(PatternSource):
    def __init__(self, entries: list[dict], rng: random.Random | None = None):
        for i, entry in enumerate(entries):
            _validate_entry(entry, i)
        self._entries = list(entries)
        self._rng = rng or random.Random()

    @classmethod
    def from_yaml(cls, path: Path, rng: random.Random | None = None) -> "StaticPatternSource":
        return cls(load_catalog(path), rng=rng)

    async def fetch_challenge(self) -> Challenge:
        if not self._entries:
            raise SourceUnavailable("Challenge catalog is empty.")
        # Yield once so callers always observe the loading phase
        await asyncio.sleep(0)
        return build_challenge(self._rng.choice(self._entries))
