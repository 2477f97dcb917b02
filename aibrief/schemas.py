"""
Pydantic models for API request/response validation.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .config import clamp_window, config
from .models import (
    ArchivedBrief,
    BriefSections,
    NewsItem,
    PromptIdea,
    Source,
    SourceFetchResult,
    SourceKind,
    StoryGroup,
    StoryItem,
    new_id,
    utcnow,
)
from .pipeline import BriefOptions


# ─────────────────────────────────────────────────────────────
# Source Schemas
# ─────────────────────────────────────────────────────────────

class SourceSchema(BaseModel):
    """A source as supplied by the client."""
    id: str = Field(default_factory=new_id)
    name: str
    url: str
    kind: SourceKind = SourceKind.RSS
    enabled: bool = True
    preferred: bool = False
    ingest_url: str | None = None
    allow_scrape: bool = False
    category: str = ""
    summary: str = ""
    tags: list[str] = []
    is_custom: bool = False

    def to_source(self) -> Source:
        return Source(
            id=self.id,
            name=self.name,
            url=self.url,
            kind=self.kind,
            enabled=self.enabled,
            preferred=self.preferred,
            ingest_url=self.ingest_url,
            allow_scrape=self.allow_scrape,
            category=self.category,
            summary=self.summary,
            tags=list(self.tags),
            is_custom=self.is_custom,
        )

    @classmethod
    def from_source(cls, source: Source) -> "SourceSchema":
        return cls(
            id=source.id,
            name=source.name,
            url=source.url,
            kind=source.kind,
            enabled=source.enabled,
            preferred=source.preferred,
            ingest_url=source.ingest_url,
            allow_scrape=source.allow_scrape,
            category=source.category,
            summary=source.summary,
            tags=list(source.tags),
            is_custom=source.is_custom,
        )


class NewsItemResponse(BaseModel):
    id: str
    title: str
    source_name: str
    url: str
    published_at: str
    summary: str = ""
    is_placeholder: bool = False
    author: str | None = None
    image_url: str | None = None

    @classmethod
    def from_item(cls, item: NewsItem) -> "NewsItemResponse":
        return cls(
            id=item.id,
            title=item.title,
            source_name=item.source_name,
            url=item.url,
            published_at=item.published_at.isoformat(),
            summary=item.summary,
            is_placeholder=item.is_placeholder,
            author=item.author,
            image_url=item.image_url,
        )

    def to_item(self) -> NewsItem:
        return NewsItem(
            id=self.id,
            title=self.title,
            source_name=self.source_name,
            url=self.url,
            published_at=datetime.fromisoformat(self.published_at),
            summary=self.summary,
            is_placeholder=self.is_placeholder,
            author=self.author,
            image_url=self.image_url,
        )


class SourceResultResponse(BaseModel):
    """Outcome of fetching one source."""
    source_id: str
    source_name: str
    status: str
    count: int | None = None
    message: str | None = None
    fetched_at: str

    @classmethod
    def from_result(cls, result: SourceFetchResult) -> "SourceResultResponse":
        return cls(
            source_id=result.source_id,
            source_name=result.source_name,
            status=result.status.value,
            count=result.count,
            message=result.message,
            fetched_at=result.fetched_at.isoformat(),
        )


# ─────────────────────────────────────────────────────────────
# Brief Section Schemas
# ─────────────────────────────────────────────────────────────

class StoryItemSchema(BaseModel):
    story: str
    source: str = ""
    url: str = ""


class StoryGroupSchema(BaseModel):
    theme: str = ""
    items: list[StoryItemSchema] = []


class PromptIdeaSchema(BaseModel):
    task: str = ""
    prompt: str = ""
    best_for: str = ""
    input_format: str = ""
    output_format: str = ""


class BriefSectionsSchema(BaseModel):
    """Parsed brief sections."""
    headline: str = ""
    summary: str = ""
    other_stories: list[StoryGroupSchema] = []
    deep_dives: list[StoryItemSchema] = []
    prompt_studio: list[PromptIdeaSchema] = []
    watchlist: list[str] = []
    tools_and_launches: list[StoryItemSchema] = []
    quick_links: list[StoryItemSchema] = []

    @classmethod
    def from_sections(cls, sections: BriefSections) -> "BriefSectionsSchema":
        def stories(items: list[StoryItem]) -> list[StoryItemSchema]:
            return [StoryItemSchema(story=i.story, source=i.source, url=i.url) for i in items]

        return cls(
            headline=sections.headline,
            summary=sections.summary,
            other_stories=[
                StoryGroupSchema(theme=g.theme, items=stories(g.items))
                for g in sections.other_stories
            ],
            deep_dives=stories(sections.deep_dives),
            prompt_studio=[
                PromptIdeaSchema(
                    task=p.task,
                    prompt=p.prompt,
                    best_for=p.best_for,
                    input_format=p.input_format,
                    output_format=p.output_format,
                )
                for p in sections.prompt_studio
            ],
            watchlist=list(sections.watchlist),
            tools_and_launches=stories(sections.tools_and_launches),
            quick_links=stories(sections.quick_links),
        )

    def to_sections(self) -> BriefSections:
        def stories(items: list[StoryItemSchema]) -> list[StoryItem]:
            return [StoryItem(story=i.story, source=i.source, url=i.url) for i in items]

        return BriefSections(
            headline=self.headline,
            summary=self.summary,
            other_stories=[
                StoryGroup(theme=g.theme, items=stories(g.items)) for g in self.other_stories
            ],
            deep_dives=stories(self.deep_dives),
            prompt_studio=[PromptIdea(**p.model_dump()) for p in self.prompt_studio],
            watchlist=list(self.watchlist),
            tools_and_launches=stories(self.tools_and_launches),
            quick_links=stories(self.quick_links),
        )


# ─────────────────────────────────────────────────────────────
# Brief Generation Schemas
# ─────────────────────────────────────────────────────────────

class BriefSettings(BaseModel):
    """Per-request generation settings; unset fields fall back to server config."""
    api_key: str | None = None
    model: str = ""
    tone: str = Field(default_factory=lambda: config.BRIEF_TONE)
    focus_topics: str = Field(default_factory=lambda: config.BRIEF_FOCUS_TOPICS)
    time_window_hours: float = Field(default_factory=lambda: config.BRIEF_WINDOW_HOURS)

    @field_validator("time_window_hours")
    @classmethod
    def clamp_time_window(cls, value: float) -> float:
        return clamp_window(value)

    def to_options(self, default_model: str = "") -> BriefOptions:
        return BriefOptions(
            model=(self.model or default_model).strip(),
            api_key=self.api_key or "",
            tone=self.tone,
            focus_topics=self.focus_topics,
            window_hours=self.time_window_hours,
        )


class BriefRequest(BaseModel):
    sources: list[SourceSchema] = []
    settings: BriefSettings = Field(default_factory=BriefSettings)


class RSSRequest(BaseModel):
    sources: list[SourceSchema] = []
    hours: float = 24


class RSSResponse(BaseModel):
    items: list[NewsItemResponse]
    results: list[SourceResultResponse]


class SourceCheckRequest(BaseModel):
    sources: list[SourceSchema] = []
    hours: float = 72


class SourceCheckResult(SourceResultResponse):
    """Fetch outcome plus timing and a few sample titles."""
    response_time_ms: int
    sample_titles: list[str] = []


class SourceCheckResponse(BaseModel):
    results: list[SourceCheckResult]


# ─────────────────────────────────────────────────────────────
# Archive and Export Schemas
# ─────────────────────────────────────────────────────────────

class ArchivedBriefResponse(BaseModel):
    id: str
    sections: BriefSectionsSchema
    source_results: list[SourceResultResponse]
    coverage_summary: str
    created_at: str
    sources: list[NewsItemResponse] = []

    @classmethod
    def from_archived(cls, entry: ArchivedBrief) -> "ArchivedBriefResponse":
        return cls(
            id=entry.id,
            sections=BriefSectionsSchema.from_sections(entry.sections),
            source_results=[SourceResultResponse.from_result(r) for r in entry.source_results],
            coverage_summary=entry.coverage_summary,
            created_at=entry.created_at.isoformat(),
            sources=[NewsItemResponse.from_item(i) for i in entry.sources],
        )


class FormatRequest(BaseModel):
    sections: BriefSectionsSchema
    format: Literal["markdown", "text", "html"] = "markdown"
    sources: list[NewsItemResponse] = []


class FormatResponse(BaseModel):
    format: str
    content: str
    generated_at: str = Field(default_factory=lambda: utcnow().isoformat())
