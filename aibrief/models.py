"""
Domain models - dataclasses for sources, news items, fetch results and briefs.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class SourceKind(Enum):
    """How a source publishes its content."""
    RSS = "rss"
    WEBSITE = "website"
    NEWSLETTER = "newsletter"
    SOCIAL = "social"


class FetchStatus(Enum):
    """Outcome of fetching one source during a fetch cycle."""
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"
    QUEUED = "queued"


class Tone(Enum):
    """Writing style requested for the brief."""
    EXECUTIVE = "executive"
    PRACTICAL = "practical"
    BUILDER = "builder"


@dataclass
class Source:
    """A configured feed or site to ingest from."""
    id: str
    name: str
    url: str
    kind: SourceKind = SourceKind.RSS
    enabled: bool = True
    preferred: bool = False
    ingest_url: str | None = None  # Bridge feed for non-RSS kinds
    allow_scrape: bool = False

    # Catalog metadata
    category: str = ""
    summary: str = ""
    tags: list[str] = field(default_factory=list)
    is_custom: bool = False

    @property
    def can_ingest(self) -> bool:
        """True when the source has a feed we can parse directly."""
        if self.kind == SourceKind.RSS:
            return True
        return bool(self.ingest_url and self.ingest_url.strip())

    @property
    def feed_url(self) -> str:
        """URL of the syndication feed for this source."""
        if self.kind == SourceKind.RSS:
            return self.url
        return (self.ingest_url or "").strip()


@dataclass
class RawFeedEntry:
    """A single entry parsed out of an RSS/Atom document."""
    title: str
    link: str
    published: datetime
    summary: str = ""
    author: str = ""
    image_url: str = ""


@dataclass
class NewsItem:
    """A single retrieved story."""
    id: str
    title: str
    source_name: str
    url: str
    published_at: datetime
    summary: str = ""
    is_placeholder: bool = False
    author: str | None = None
    image_url: str | None = None


@dataclass
class SourceFetchResult:
    """Outcome of fetching one source."""
    source_id: str
    source_name: str
    status: FetchStatus
    count: int | None = None  # Only set for SUCCESS
    message: str | None = None  # Only set for FAILED
    fetched_at: datetime = field(default_factory=utcnow)


@dataclass
class AggregateResult:
    """Merged items and per-source results for one fetch cycle."""
    items: list[NewsItem]
    results: list[SourceFetchResult]


@dataclass
class StoryItem:
    story: str
    source: str = ""
    url: str = ""


@dataclass
class StoryGroup:
    theme: str
    items: list[StoryItem] = field(default_factory=list)


@dataclass
class PromptIdea:
    task: str = ""
    prompt: str = ""
    best_for: str = ""
    input_format: str = ""
    output_format: str = ""

    @property
    def is_complete(self) -> bool:
        """An idea is worth emitting if any field carries text."""
        return any((
            self.task,
            self.prompt,
            self.best_for,
            self.input_format,
            self.output_format,
        ))


@dataclass
class BriefSections:
    """Structured sections parsed out of a generated brief."""
    headline: str = ""
    summary: str = ""
    other_stories: list[StoryGroup] = field(default_factory=list)
    deep_dives: list[StoryItem] = field(default_factory=list)
    prompt_studio: list[PromptIdea] = field(default_factory=list)
    watchlist: list[str] = field(default_factory=list)
    tools_and_launches: list[StoryItem] = field(default_factory=list)
    quick_links: list[StoryItem] = field(default_factory=list)


@dataclass
class ArchivedBrief:
    """A generated brief kept in the local archive."""
    id: str
    sections: BriefSections
    source_results: list[SourceFetchResult]
    coverage_summary: str
    created_at: datetime
    sources: list[NewsItem] = field(default_factory=list)


@dataclass
class SourceStatusSnapshot:
    """One entry in a source's fetch history."""
    date: datetime
    status: FetchStatus
    count: int | None = None
    message: str | None = None


@dataclass
class SourceHealth:
    """Recent fetch history for a single source."""
    source_id: str
    last_fetched: datetime
    history: list[SourceStatusSnapshot] = field(default_factory=list)
