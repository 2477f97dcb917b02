"""
Deduplication and ranking of news items before prompt construction.

Titles are normalized into a dedup key that ignores case, punctuation and
short tokens, so the same wire story syndicated by several outlets collapses
into one item. Short distinct headlines can occasionally merge; avoiding
repeats across outlets is worth that loss of precision.
"""

import re
from dataclasses import dataclass

from .models import NewsItem

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass
class PreparedItems:
    """Prompt-ready items plus how many duplicates were collapsed."""
    items: list[NewsItem]
    dedup_count: int


def normalize_title(title: str) -> str:
    """Build the dedup key for a headline."""
    cleaned = _NON_ALNUM.sub(" ", title.lower())
    return " ".join(token for token in cleaned.split() if len(token) > 2)


def dedupe(items: list[NewsItem]) -> list[NewsItem]:
    """
    Collapse items whose titles share a dedup key.

    For each key the item with the latest published_at is kept. Output
    order follows the first appearance of each key.
    """
    seen: dict[str, NewsItem] = {}
    for item in items:
        key = normalize_title(item.title)
        existing = seen.get(key)
        if existing is None or item.published_at > existing.published_at:
            seen[key] = item
    return list(seen.values())


def rank_items(items: list[NewsItem], preferred_sources: set[str] | list[str]) -> list[NewsItem]:
    """Sort preferred sources first, then newest first (stable for ties)."""
    preferred = set(preferred_sources)
    return sorted(
        items,
        key=lambda item: (
            item.source_name not in preferred,
            -item.published_at.timestamp(),
        ),
    )


def prepare_prompt_items(items: list[NewsItem], preferred_sources: set[str] | list[str]) -> PreparedItems:
    """Drop placeholders, dedupe, and rank the remainder for the prompt."""
    real = [item for item in items if not item.is_placeholder]
    unique = dedupe(real)
    return PreparedItems(
        items=rank_items(unique, preferred_sources),
        dedup_count=len(real) - len(unique),
    )
