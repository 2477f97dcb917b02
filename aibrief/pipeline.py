"""
Brief pipeline - orchestrates one brief generation end to end.

Handles:
- Configuration validation before any network call
- Fetching and aggregating enabled sources
- Dedup/ranking and the low-volume window widening
- Prompt construction and streamed generation
- Parsing, source health recording and archiving
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from .aggregator import SourceAggregator
from .brief_parser import parse_brief
from .config import EXPANDED_WINDOW_HOURS, clamp_window
from .dedup import PreparedItems, prepare_prompt_items
from .exceptions import ConfigurationError, GenerationError
from .models import (
    AggregateResult,
    BriefSections,
    FetchStatus,
    NewsItem,
    Source,
    SourceFetchResult,
    Tone,
)
from .prompt import SYSTEM_PROMPT, build_prompt
from .providers import DeltaCallback, LLMProvider, StatusCallback, create_provider
from .store import BriefArchive, SourceHealthLog

logger = logging.getLogger(__name__)

MIN_PROMPT_ITEMS = 3

ProviderFactory = Callable[[str, str], LLMProvider]


@dataclass
class BriefOptions:
    """Per-request generation settings."""
    model: str
    api_key: str = ""
    tone: Tone | str = Tone.PRACTICAL
    focus_topics: str = ""
    window_hours: float = 24


@dataclass
class BriefResult:
    """Everything produced by one successful generation."""
    text: str
    sections: BriefSections
    source_results: list[SourceFetchResult]
    coverage_summary: str
    expanded_window_used: bool
    dedup_count: int
    items: list[NewsItem] = field(default_factory=list)
    window_hours: float = 24
    archive_id: str | None = None


@dataclass
class CollectedNews:
    """Output of the fetch/dedup stage."""
    aggregate: AggregateResult
    prepared: PreparedItems
    window_hours: float
    expanded_window_used: bool


def coverage_summary(results: list[SourceFetchResult], enabled_count: int) -> str:
    """'<n> of <m> sources contributed', counting successes with at least one item."""
    contributing = sum(
        1 for r in results
        if r.status == FetchStatus.SUCCESS and (r.count or 0) > 0
    )
    return f"{contributing} of {enabled_count} sources contributed"


def _no_status(message: str) -> None:
    pass


class BriefPipeline:
    """
    Generates briefs from a set of sources.

    The pipeline is stateless between runs apart from last_items, which keeps
    the most recently fetched items so they survive a cancelled generation.
    """

    def __init__(
        self,
        aggregator: SourceAggregator,
        provider_factory: ProviderFactory | None = None,
        archive: BriefArchive | None = None,
        health_log: SourceHealthLog | None = None,
        default_api_key: str = "",
    ):
        self.aggregator = aggregator
        self.provider_factory = provider_factory or (
            lambda api_key, model: create_provider("openai", api_key, default_model=model)
        )
        self.archive = archive
        self.health_log = health_log
        self.default_api_key = default_api_key
        self.last_items: list[NewsItem] = []

    def validate(self, sources: list[Source], options: BriefOptions) -> tuple[list[Source], str]:
        """
        Check the request can run.

        Returns:
            (enabled sources, API key to use)

        Raises:
            ConfigurationError: with a user-facing message
        """
        if not options.model or not options.model.strip():
            raise ConfigurationError("Missing model in settings.")
        if not sources:
            raise ConfigurationError("No sources provided.")

        active = [s for s in sources if s.enabled]
        if not active:
            raise ConfigurationError("Enable at least one source to build a brief.")

        api_key = (options.api_key or "").strip() or self.default_api_key
        if not api_key:
            raise ConfigurationError(
                "Missing OpenAI API key. Add it in the UI or set OPENAI_API_KEY."
            )
        return active, api_key

    async def collect(
        self,
        sources: list[Source],
        window_hours: float,
        on_status: StatusCallback | None = None,
    ) -> CollectedNews:
        """
        Fetch, dedupe and rank items for the prompt.

        When fewer than MIN_PROMPT_ITEMS remain and the window is below
        EXPANDED_WINDOW_HOURS, the whole pass is repeated once at the wider
        window and replaces the first result.
        """
        status = on_status or _no_status
        preferred = [s.name for s in sources if s.preferred]

        aggregate = await self.aggregator.fetch_recent(sources, window_hours)
        self._record_health(aggregate.results)
        prepared = prepare_prompt_items(aggregate.items, preferred)
        expanded = False

        if len(prepared.items) < MIN_PROMPT_ITEMS and window_hours < EXPANDED_WINDOW_HOURS:
            logger.info(
                f"Only {len(prepared.items)} items in {window_hours}h, "
                f"expanding window to {EXPANDED_WINDOW_HOURS}h"
            )
            status("Low volume, expanding window...")
            expanded = True
            window_hours = EXPANDED_WINDOW_HOURS
            aggregate = await self.aggregator.fetch_recent(sources, window_hours)
            self._record_health(aggregate.results)
            prepared = prepare_prompt_items(aggregate.items, preferred)

        self.last_items = aggregate.items
        return CollectedNews(
            aggregate=aggregate,
            prepared=prepared,
            window_hours=window_hours,
            expanded_window_used=expanded,
        )

    async def generate(
        self,
        sources: list[Source],
        options: BriefOptions,
        on_status: StatusCallback | None = None,
        on_delta: DeltaCallback | None = None,
    ) -> BriefResult:
        """
        Run one generation.

        Cancelling the awaiting task aborts the in-flight request; nothing is
        archived and last_items keeps whatever was fetched.

        Raises:
            ConfigurationError: before any network call
            GenerationError: if the provider fails
        """
        status = on_status or _no_status
        active, api_key = self.validate(sources, options)
        window_hours = clamp_window(options.window_hours)

        status("Collecting sources...")
        collected = await self.collect(active, window_hours, status)
        summary = coverage_summary(collected.aggregate.results, len(active))

        prompt = build_prompt(
            collected.prepared.items,
            tone=options.tone,
            focus_topics=options.focus_topics,
            preferred_sources=[s.name for s in active if s.preferred],
            window_hours=collected.window_hours,
        )

        status("Generating brief...")
        provider = self.provider_factory(api_key, options.model.strip())
        try:
            response = await provider.generate(
                prompt,
                system_prompt=SYSTEM_PROMPT,
                on_status=status,
                on_delta=on_delta,
            )
        except GenerationError as e:
            logger.error(f"Brief generation failed: {e}")
            raise

        status("Parsing response...")
        sections = parse_brief(response.text)
        real_items = [item for item in collected.aggregate.items if not item.is_placeholder]

        archive_id = None
        if self.archive:
            entry = self.archive.add(
                sections,
                collected.aggregate.results,
                summary,
                sources=real_items,
            )
            archive_id = entry.id if entry else None

        logger.info(
            f"Brief generated from {len(collected.prepared.items)} items "
            f"({summary}, {collected.prepared.dedup_count} duplicates removed)"
        )
        return BriefResult(
            text=response.text,
            sections=sections,
            source_results=collected.aggregate.results,
            coverage_summary=summary,
            expanded_window_used=collected.expanded_window_used,
            dedup_count=collected.prepared.dedup_count,
            items=real_items,
            window_hours=collected.window_hours,
            archive_id=archive_id,
        )

    def _record_health(self, results: list[SourceFetchResult]):
        if self.health_log:
            self.health_log.record(results)
