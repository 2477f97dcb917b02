"""
Tests for per-source fetching, recency filtering and aggregation.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from aibrief.aggregator import OLDER_THAN_WINDOW_NOTICE, SourceAggregator
from aibrief.exceptions import FetchError
from aibrief.models import FetchStatus, NewsItem, SourceKind, new_id, utcnow


def scraper_returning(items: list[NewsItem]) -> Mock:
    scraper = Mock()
    scraper.scrape = AsyncMock(return_value=items)
    return scraper


class TestFetchRecent:
    """Tests for SourceAggregator.fetch_recent()."""

    @pytest.mark.asyncio
    async def test_merges_and_sorts_newest_first(self, sources, feeds, feed_parser_for):
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())
        result = await aggregator.fetch_recent(sources, 24)

        assert len(result.items) == 4
        times = [item.published_at for item in result.items]
        assert times == sorted(times, reverse=True)

    @pytest.mark.asyncio
    async def test_one_result_per_source_in_order(self, sources, feeds, feed_parser_for):
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())
        result = await aggregator.fetch_recent(sources, 24)

        assert [r.source_id for r in result.results] == [s.id for s in sources]
        assert all(r.status == FetchStatus.SUCCESS for r in result.results)
        assert [r.count for r in result.results] == [2, 2]

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, sources, feeds, feed_parser_for):
        feeds[sources[0].url] = FetchError(sources[0].url, "Feed request failed (503)", 503)
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())
        result = await aggregator.fetch_recent(sources, 24)

        failed, ok = result.results
        assert failed.status == FetchStatus.FAILED
        assert failed.message == "Feed request failed (503)"
        assert ok.status == FetchStatus.SUCCESS
        assert {i.source_name for i in result.items} == {sources[1].name}

    @pytest.mark.asyncio
    async def test_one_failure_among_five_sources(self, make_source, make_entry, feed_parser_for):
        names = ["Alpha Wire", "Bravo Post", "Charlie Feed", "Delta Digest", "Echo Journal"]
        batch = [make_source(name) for name in names]
        feeds = {
            source.url: [make_entry(f"{source.name} reports on model releases", hours_ago=n + 1)]
            for n, source in enumerate(batch)
        }
        feeds[batch[2].url] = FetchError(batch[2].url, "Feed request failed (500)", 500)
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())

        result = await aggregator.fetch_recent(batch, 24)

        assert [r.status for r in result.results] == [
            FetchStatus.SUCCESS,
            FetchStatus.SUCCESS,
            FetchStatus.FAILED,
            FetchStatus.SUCCESS,
            FetchStatus.SUCCESS,
        ]
        assert len(result.items) == 4
        assert "Charlie Feed" not in {i.source_name for i in result.items}

    @pytest.mark.asyncio
    async def test_items_outside_window_are_dropped(self, make_source, make_entry, feed_parser_for):
        source = make_source("Gamma")
        feeds = {source.url: [make_entry("Fresh story about agents", 2), make_entry("Stale story about chips", 30)]}
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())
        result = await aggregator.fetch_recent([source], 24)

        assert [i.title for i in result.items] == ["Fresh story about agents"]
        assert result.results[0].count == 1

    @pytest.mark.asyncio
    async def test_only_old_items_keeps_latest_with_notice(self, make_source, make_entry, feed_parser_for):
        source = make_source("Gamma")
        feeds = {source.url: [make_entry("Older story", 50), make_entry("Old story", 30)]}
        aggregator = SourceAggregator(feed_parser=feed_parser_for(feeds), scraper=Mock())
        result = await aggregator.fetch_recent([source], 24)

        assert len(result.items) == 1
        assert result.items[0].title == "Old story"
        assert result.items[0].summary.endswith(OLDER_THAN_WINDOW_NOTICE)
        assert result.results[0].status == FetchStatus.EMPTY

    @pytest.mark.asyncio
    async def test_empty_feed(self, make_source, feed_parser_for):
        source = make_source("Gamma")
        aggregator = SourceAggregator(feed_parser=feed_parser_for({source.url: []}), scraper=Mock())
        result = await aggregator.fetch_recent([source], 24)

        assert result.items == []
        assert result.results[0].status == FetchStatus.EMPTY

    @pytest.mark.asyncio
    async def test_no_sources(self, feed_parser_for):
        aggregator = SourceAggregator(feed_parser=feed_parser_for({}), scraper=Mock())
        result = await aggregator.fetch_recent([], 24)
        assert result.items == []
        assert result.results == []


class TestSourceKinds:
    """Tests for how each kind of source is ingested."""

    @pytest.mark.asyncio
    async def test_non_rss_without_bridge_is_queued(self, make_source, feed_parser_for):
        source = make_source("Social Feed", kind=SourceKind.SOCIAL, url="https://x.com/lab")
        aggregator = SourceAggregator(feed_parser=feed_parser_for({}), scraper=Mock())
        result = await aggregator.fetch_recent([source], 24)

        assert result.results[0].status == FetchStatus.QUEUED
        assert len(result.items) == 1
        assert result.items[0].is_placeholder
        assert result.items[0].title == "Source queued: Social Feed"

    @pytest.mark.asyncio
    async def test_non_rss_uses_ingest_url(self, make_source, make_entry, feed_parser_for):
        source = make_source(
            "Newsletter",
            kind=SourceKind.NEWSLETTER,
            url="https://letter.example.com",
            ingest_url="https://bridge.example.com/letter.xml",
        )
        parser = feed_parser_for({"https://bridge.example.com/letter.xml": [make_entry("Issue 42 is out today")]})
        aggregator = SourceAggregator(feed_parser=parser, scraper=Mock())
        result = await aggregator.fetch_recent([source], 24)

        parser.fetch.assert_awaited_once_with("https://bridge.example.com/letter.xml")
        assert result.results[0].status == FetchStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_website_with_scrape(self, make_source, feed_parser_for):
        source = make_source("Lab Site", kind=SourceKind.WEBSITE, url="https://lab.example.com", allow_scrape=True)
        scraped = [NewsItem(new_id(), "Scraped headline for the lab", "Lab Site", "https://lab.example.com/a", utcnow())]
        scraper = scraper_returning(scraped)
        aggregator = SourceAggregator(feed_parser=feed_parser_for({}), scraper=scraper)
        result = await aggregator.fetch_recent([source], 24)

        scraper.scrape.assert_awaited_once_with(source)
        assert result.results[0].count == 1

    @pytest.mark.asyncio
    async def test_feed_failure_falls_back_to_scrape(self, make_source, feed_parser_for):
        source = make_source("Flaky", allow_scrape=True)
        scraped = [NewsItem(new_id(), "Scraped fallback headline here", "Flaky", "https://flaky.example.com/a", utcnow())]
        aggregator = SourceAggregator(
            feed_parser=feed_parser_for({source.url: FetchError(source.url, "Feed request failed (500)", 500)}),
            scraper=scraper_returning(scraped),
        )
        result = await aggregator.fetch_recent([source], 24)

        assert result.results[0].status == FetchStatus.SUCCESS
        assert result.items[0].title == "Scraped fallback headline here"

    @pytest.mark.asyncio
    async def test_feed_failure_without_scrape_fails(self, make_source, feed_parser_for):
        source = make_source("Flaky")
        scraper = scraper_returning([])
        aggregator = SourceAggregator(
            feed_parser=feed_parser_for({source.url: FetchError(source.url, "Feed request failed (500)", 500)}),
            scraper=scraper,
        )
        result = await aggregator.fetch_recent([source], 24)

        assert result.results[0].status == FetchStatus.FAILED
        scraper.scrape.assert_not_awaited()
