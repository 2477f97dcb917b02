"""
Tests for headline scraping from HTML pages.
"""

from unittest.mock import AsyncMock, patch

import pytest

from aibrief.exceptions import FetchError
from aibrief.models import Source, SourceKind
from aibrief.scraper import PageScraper, normalize_host

PAGE = """
<html>
  <head><title>Example Lab News</title></head>
  <body>
    <nav><a href="/about">About</a><a href="#top">Skip to the main content now</a></nav>
    <article><a href="/posts/new-model">Example Lab announces its newest model</a></article>
    <article><a href="https://www.lab.example.com/posts/safety">A longer look at our safety research</a></article>
    <h2><a href="/posts/new-model">Example Lab announces its newest model</a></h2>
    <h3><a href="https://other.example.org/story">An external story that should be skipped</a></h3>
    <a href="mailto:press@lab.example.com">Contact our press team by email today</a>
    <a href="/careers">Careers at Example Lab: join the research team</a>
  </body>
</html>
"""


class TestExtractLinks:
    """Tests for PageScraper.extract_links()."""

    def test_same_origin_links_only(self):
        links = PageScraper().extract_links(PAGE, "https://lab.example.com/news")
        assert [l.link for l in links] == [
            "https://lab.example.com/posts/new-model",
            "https://www.lab.example.com/posts/safety",
            "https://lab.example.com/careers",
        ]

    def test_titles_are_collapsed_text(self):
        links = PageScraper().extract_links(PAGE, "https://lab.example.com/news")
        assert links[0].title == "Example Lab announces its newest model"

    def test_falls_back_to_page_title(self):
        html = "<html><head><title> Quiet Page </title></head><body><a href='/x'>Short</a></body></html>"
        links = PageScraper().extract_links(html, "https://quiet.example.com")
        assert len(links) == 1
        assert links[0].title == "Quiet Page"
        assert links[0].link == "https://quiet.example.com"

    def test_caps_candidates(self):
        anchors = "".join(
            f'<article><a href="/p/{n}">Headline number {n} with enough text</a></article>'
            for n in range(20)
        )
        links = PageScraper().extract_links(f"<html><body>{anchors}</body></html>", "https://big.example.com")
        assert len(links) == PageScraper.MAX_CANDIDATES

    def test_nothing_found(self):
        assert PageScraper().extract_links("<html><body></body></html>", "https://x.example.com") == []


class TestScrape:
    """Tests for PageScraper.scrape()."""

    @pytest.mark.asyncio
    async def test_items_carry_source_name(self):
        scraper = PageScraper()
        source = Source(
            id="lab",
            name="Example Lab",
            url="https://lab.example.com/news",
            kind=SourceKind.WEBSITE,
            allow_scrape=True,
        )
        with patch.object(scraper, "_fetch_html", AsyncMock(return_value=PAGE)):
            items = await scraper.scrape(source)

        assert len(items) == 3
        assert all(item.source_name == "Example Lab" for item in items)
        assert all(not item.is_placeholder for item in items)

    @pytest.mark.asyncio
    async def test_non_2xx_status_becomes_fetch_error(self):
        scraper = PageScraper(timeout=1)
        source = Source(
            id="lab",
            name="Example Lab",
            url="https://lab.example.com/news",
            kind=SourceKind.WEBSITE,
            allow_scrape=True,
        )

        class UnavailableResponse:
            status = 503

            async def __aenter__(self):
                return self

            async def __aexit__(self, *args):
                return False

            async def text(self):
                return "Service Unavailable"

        class UnavailableSession:
            async def __aenter__(self):
                return self

            async def __aexit__(self, *args):
                return False

            def get(self, *args, **kwargs):
                return UnavailableResponse()

        with patch("aibrief.scraper.aiohttp.ClientSession", return_value=UnavailableSession()):
            with pytest.raises(FetchError) as exc_info:
                await scraper.scrape(source)
        assert "(503)" in str(exc_info.value)
        assert exc_info.value.status == 503


def test_normalize_host():
    assert normalize_host("WWW.Example.com") == "example.com"
    assert normalize_host("news.example.com") == "news.example.com"
