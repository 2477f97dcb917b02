"""
Source aggregation - fetch every enabled source, filter by recency, merge.

Each source is fetched independently and concurrently; a failure in one
source is recorded in its SourceFetchResult and never aborts the others.
"""

import asyncio
import logging
from datetime import timedelta

from .feeds import FeedParser
from .models import (
    AggregateResult,
    FetchStatus,
    NewsItem,
    RawFeedEntry,
    Source,
    SourceFetchResult,
    new_id,
    utcnow,
)
from .scraper import PageScraper

logger = logging.getLogger(__name__)

OLDER_THAN_WINDOW_NOTICE = "Older than the selected time window."
QUEUED_SUMMARY = "Add an RSS feed or enable webpage scrape for this source."


def placeholder_item(source: Source, summary: str = QUEUED_SUMMARY) -> NewsItem:
    """Stand-in record for a source that cannot be ingested."""
    return NewsItem(
        id=new_id(),
        title=f"Source queued: {source.name}",
        source_name=source.name,
        url=source.url,
        published_at=utcnow(),
        summary=summary,
        is_placeholder=True,
    )


def entry_to_item(entry: RawFeedEntry, source: Source) -> NewsItem:
    """Map a parsed feed entry onto a NewsItem for the given source."""
    return NewsItem(
        id=new_id(),
        title=entry.title,
        source_name=source.name,
        url=entry.link or source.url,
        published_at=entry.published,
        summary=entry.summary,
        is_placeholder=False,
        author=entry.author or None,
        image_url=entry.image_url or None,
    )


def with_window_notice(item: NewsItem) -> NewsItem:
    """Copy of item with the older-than-window notice appended to its summary."""
    if item.summary:
        summary = f"{item.summary}\n\n{OLDER_THAN_WINDOW_NOTICE}"
    else:
        summary = OLDER_THAN_WINDOW_NOTICE
    return NewsItem(
        id=item.id,
        title=item.title,
        source_name=item.source_name,
        url=item.url,
        published_at=item.published_at,
        summary=summary,
        is_placeholder=item.is_placeholder,
        author=item.author,
        image_url=item.image_url,
    )


class SourceAggregator:
    """Fetches recent items across sources."""

    def __init__(
        self,
        feed_parser: FeedParser | None = None,
        scraper: PageScraper | None = None,
    ):
        self.feed_parser = feed_parser or FeedParser()
        self.scraper = scraper or PageScraper()

    async def fetch_recent(self, sources: list[Source], window_hours: float) -> AggregateResult:
        """
        Fetch all sources and keep items published within the window.

        Args:
            sources: Sources to fetch (callers pass only enabled sources)
            window_hours: Lookback duration in hours

        Returns:
            AggregateResult with items sorted newest first and exactly one
            result per source, in input order
        """
        cutoff = utcnow() - timedelta(hours=window_hours)
        outcomes = await asyncio.gather(
            *(self._fetch_source(source, cutoff) for source in sources)
        )

        items: list[NewsItem] = []
        results: list[SourceFetchResult] = []
        for source_items, result in outcomes:
            items.extend(source_items)
            results.append(result)

        items.sort(key=lambda item: item.published_at, reverse=True)
        return AggregateResult(items=items, results=results)

    async def _fetch_source(self, source: Source, cutoff) -> tuple[list[NewsItem], SourceFetchResult]:
        """Fetch one source; never raises."""
        try:
            if source.can_ingest:
                mapped = await self._ingest(source)
            elif source.allow_scrape:
                mapped = await self.scraper.scrape(source)
            else:
                return [placeholder_item(source)], SourceFetchResult(
                    source_id=source.id,
                    source_name=source.name,
                    status=FetchStatus.QUEUED,
                )
        except Exception as e:
            logger.warning(f"Fetching {source.name} failed: {e}")
            return [], SourceFetchResult(
                source_id=source.id,
                source_name=source.name,
                status=FetchStatus.FAILED,
                message=str(e) or type(e).__name__,
            )

        filtered = [item for item in mapped if item.published_at >= cutoff]

        if not filtered and mapped:
            latest = max(mapped, key=lambda item: item.published_at)
            return [with_window_notice(latest)], SourceFetchResult(
                source_id=source.id,
                source_name=source.name,
                status=FetchStatus.EMPTY,
            )

        if not filtered:
            return [], SourceFetchResult(
                source_id=source.id,
                source_name=source.name,
                status=FetchStatus.EMPTY,
            )

        return filtered, SourceFetchResult(
            source_id=source.id,
            source_name=source.name,
            status=FetchStatus.SUCCESS,
            count=len(filtered),
        )

    async def _ingest(self, source: Source) -> list[NewsItem]:
        """Read the source's feed, scraping instead if the feed fails and scraping is allowed."""
        try:
            entries = await self.feed_parser.fetch(source.feed_url)
        except Exception as e:
            if not source.allow_scrape:
                raise
            logger.info(f"Feed for {source.name} failed ({e}), scraping page instead")
            return await self.scraper.scrape(source)
        return [entry_to_item(entry, source) for entry in entries]
