"""
Store - key/value persistence with pluggable backends.

Provides:
- MemoryStore: in-process dictionary, used by tests and ephemeral servers
- DiskStore: one JSON envelope file per hashed key
- BriefArchive: newest-first archive of generated briefs
- SourceHealthLog: short per-source fetch history

Records are serialized as JSON bytes; the backends never look inside values.
"""

import base64
import hashlib
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict
from datetime import datetime, timedelta
from pathlib import Path

from .models import (
    ArchivedBrief,
    BriefSections,
    FetchStatus,
    NewsItem,
    PromptIdea,
    SourceFetchResult,
    SourceHealth,
    SourceStatusSnapshot,
    StoryGroup,
    StoryItem,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)

ARCHIVE_KEY = "brief.archive"
SOURCE_HEALTH_KEY = "sources.health"
MAX_ARCHIVE = 30
DUPLICATE_WINDOW = timedelta(seconds=60)
MAX_HEALTH_HISTORY = 5


class KeyValueStore(ABC):
    """Abstract base class for store backends."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get a value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store a value under key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a value if present."""
        pass


class MemoryStore(KeyValueStore):
    """In-memory store."""

    def __init__(self):
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class DiskStore(KeyValueStore):
    """Persistent store, one file per key."""

    def __init__(self, store_dir: Path):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        """Convert store key to file path."""
        hashed = hashlib.sha256(key.encode()).hexdigest()[:16]
        return self.store_dir / f"{hashed}.json"

    def get(self, key: str) -> bytes | None:
        path = self._key_to_path(key)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text())

            # Verify key matches (handle hash collisions)
            if data.get("key") != key:
                return None

            return base64.b64decode(data["value"])

        except (json.JSONDecodeError, KeyError, ValueError):
            logger.warning(f"Discarding corrupted store file {path.name}")
            path.unlink(missing_ok=True)
            return None

    def set(self, key: str, value: bytes) -> None:
        path = self._key_to_path(key)
        data = {
            "key": key,
            "value": base64.b64encode(value).decode("ascii"),
            "updated_at": datetime.now().isoformat(),
        }
        path.write_text(json.dumps(data))

    def delete(self, key: str) -> None:
        self._key_to_path(key).unlink(missing_ok=True)


def create_store(store_path: str | Path | None) -> KeyValueStore:
    """Disk-backed store when a path is given, otherwise in-memory."""
    if store_path:
        return DiskStore(Path(store_path))
    return MemoryStore()


# ─────────────────────────────────────────────────────────────
# Record serialization
# ─────────────────────────────────────────────────────────────

def _parse_time(value: str | None) -> datetime:
    if not value:
        return utcnow()
    return datetime.fromisoformat(value)


def item_to_dict(item: NewsItem) -> dict:
    data = asdict(item)
    data["published_at"] = item.published_at.isoformat()
    return data


def item_from_dict(data: dict) -> NewsItem:
    return NewsItem(
        id=data.get("id") or new_id(),
        title=data.get("title", ""),
        source_name=data.get("source_name", ""),
        url=data.get("url", ""),
        published_at=_parse_time(data.get("published_at")),
        summary=data.get("summary", ""),
        is_placeholder=bool(data.get("is_placeholder", False)),
        author=data.get("author"),
        image_url=data.get("image_url"),
    )


def result_to_dict(result: SourceFetchResult) -> dict:
    return {
        "source_id": result.source_id,
        "source_name": result.source_name,
        "status": result.status.value,
        "count": result.count,
        "message": result.message,
        "fetched_at": result.fetched_at.isoformat(),
    }


def result_from_dict(data: dict) -> SourceFetchResult:
    return SourceFetchResult(
        source_id=data.get("source_id", ""),
        source_name=data.get("source_name", ""),
        status=FetchStatus(data.get("status", FetchStatus.EMPTY.value)),
        count=data.get("count"),
        message=data.get("message"),
        fetched_at=_parse_time(data.get("fetched_at")),
    )


def sections_to_dict(sections: BriefSections) -> dict:
    return asdict(sections)


def _story(data: dict) -> StoryItem:
    return StoryItem(
        story=data.get("story", ""),
        source=data.get("source", ""),
        url=data.get("url", ""),
    )


def sections_from_dict(data: dict) -> BriefSections:
    return BriefSections(
        headline=data.get("headline", ""),
        summary=data.get("summary", ""),
        other_stories=[
            StoryGroup(
                theme=group.get("theme", ""),
                items=[_story(item) for item in group.get("items", [])],
            )
            for group in data.get("other_stories", [])
        ],
        deep_dives=[_story(item) for item in data.get("deep_dives", [])],
        prompt_studio=[
            PromptIdea(
                task=idea.get("task", ""),
                prompt=idea.get("prompt", ""),
                best_for=idea.get("best_for", ""),
                input_format=idea.get("input_format", ""),
                output_format=idea.get("output_format", ""),
            )
            for idea in data.get("prompt_studio", [])
        ],
        watchlist=list(data.get("watchlist", [])),
        tools_and_launches=[_story(item) for item in data.get("tools_and_launches", [])],
        quick_links=[_story(item) for item in data.get("quick_links", [])],
    )


def archived_to_dict(entry: ArchivedBrief) -> dict:
    return {
        "id": entry.id,
        "sections": sections_to_dict(entry.sections),
        "source_results": [result_to_dict(r) for r in entry.source_results],
        "coverage_summary": entry.coverage_summary,
        "created_at": entry.created_at.isoformat(),
        "sources": [item_to_dict(item) for item in entry.sources],
    }


def archived_from_dict(data: dict) -> ArchivedBrief:
    return ArchivedBrief(
        id=data.get("id") or new_id(),
        sections=sections_from_dict(data.get("sections", {})),
        source_results=[result_from_dict(r) for r in data.get("source_results", [])],
        coverage_summary=data.get("coverage_summary", ""),
        created_at=_parse_time(data.get("created_at")),
        sources=[item_from_dict(item) for item in data.get("sources", [])],
    )


def _load_json(store: KeyValueStore, key: str, default):
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Stored value for {key} is not valid JSON, ignoring it")
        return default


def _save_json(store: KeyValueStore, key: str, value) -> None:
    store.set(key, json.dumps(value).encode("utf-8"))


# ─────────────────────────────────────────────────────────────
# Archive and source health
# ─────────────────────────────────────────────────────────────

class BriefArchive:
    """Newest-first archive of generated briefs, capped at MAX_ARCHIVE."""

    def __init__(self, store: KeyValueStore, max_entries: int = MAX_ARCHIVE):
        self.store = store
        self.max_entries = max_entries

    def load(self) -> list[ArchivedBrief]:
        return [archived_from_dict(entry) for entry in _load_json(self.store, ARCHIVE_KEY, [])]

    def _save(self, entries: list[ArchivedBrief]) -> None:
        _save_json(self.store, ARCHIVE_KEY, [archived_to_dict(e) for e in entries[: self.max_entries]])

    def add(
        self,
        sections: BriefSections,
        source_results: list[SourceFetchResult],
        coverage_summary: str,
        sources: list[NewsItem] | None = None,
        created_at: datetime | None = None,
    ) -> ArchivedBrief | None:
        """
        Archive a brief at the front of the list.

        Returns None (and stores nothing) when the newest entry has the same
        headline and was created less than a minute apart.
        """
        entries = self.load()
        created_at = created_at or utcnow()

        if entries:
            newest = entries[0]
            if (
                newest.sections.headline == sections.headline
                and abs(newest.created_at - created_at) < DUPLICATE_WINDOW
            ):
                logger.info("Skipping duplicate archive entry")
                return None

        entry = ArchivedBrief(
            id=new_id(),
            sections=sections,
            source_results=list(source_results),
            coverage_summary=coverage_summary,
            created_at=created_at,
            sources=list(sources or []),
        )
        entries.insert(0, entry)
        self._save(entries)
        return entry

    def get(self, entry_id: str) -> ArchivedBrief | None:
        for entry in self.load():
            if entry.id == entry_id:
                return entry
        return None

    def delete(self, entry_id: str) -> bool:
        """Remove an entry. Returns True if it existed."""
        entries = self.load()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self._save(remaining)
        return True


class SourceHealthLog:
    """Per-source fetch history, newest first, MAX_HEALTH_HISTORY snapshots each."""

    def __init__(self, store: KeyValueStore, max_history: int = MAX_HEALTH_HISTORY):
        self.store = store
        self.max_history = max_history

    def load(self) -> dict[str, SourceHealth]:
        raw = _load_json(self.store, SOURCE_HEALTH_KEY, {})
        health = {}
        for source_id, data in raw.items():
            health[source_id] = SourceHealth(
                source_id=source_id,
                last_fetched=_parse_time(data.get("last_fetched")),
                history=[
                    SourceStatusSnapshot(
                        date=_parse_time(snap.get("date")),
                        status=FetchStatus(snap.get("status", FetchStatus.EMPTY.value)),
                        count=snap.get("count"),
                        message=snap.get("message"),
                    )
                    for snap in data.get("history", [])
                ],
            )
        return health

    def _save(self, health: dict[str, SourceHealth]) -> None:
        _save_json(self.store, SOURCE_HEALTH_KEY, {
            source_id: {
                "last_fetched": entry.last_fetched.isoformat(),
                "history": [
                    {
                        "date": snap.date.isoformat(),
                        "status": snap.status.value,
                        "count": snap.count,
                        "message": snap.message,
                    }
                    for snap in entry.history
                ],
            }
            for source_id, entry in health.items()
        })

    def record(self, results: list[SourceFetchResult]) -> dict[str, SourceHealth]:
        """Prepend a snapshot for each result and trim each history."""
        health = self.load()
        for result in results:
            snapshot = SourceStatusSnapshot(
                date=result.fetched_at,
                status=result.status,
                count=result.count,
                message=result.message,
            )
            existing = health.get(result.source_id)
            if existing is None:
                existing = SourceHealth(source_id=result.source_id, last_fetched=result.fetched_at)
                health[result.source_id] = existing
            existing.last_fetched = result.fetched_at
            existing.history.insert(0, snapshot)
            del existing.history[self.max_history:]
        self._save(health)
        return health
