"""
Page Scraper - Pull headline links from sources without a usable feed.

Handles:
- HTTP fetching with browser-like headers
- Anchor selection from article and heading containers first, then any link
- Same-origin filtering so navigation and ad links are ignored
- Fallback to the page <title> when nothing survives filtering
"""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup

from .exceptions import FetchError
from .models import NewsItem, Source, new_id, utcnow

logger = logging.getLogger(__name__)


@dataclass
class ScrapedLink:
    """A headline link found on a page."""
    title: str
    link: str


def normalize_host(host: str) -> str:
    """Lower-case a hostname and drop a leading www."""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


class PageScraper:
    """Scrapes headline links from a source's web page."""

    # Searched in order until enough candidates are collected
    SELECTORS = ["article a", "h2 a", "h3 a", "a"]
    MIN_TITLE_LENGTH = 20
    MAX_TITLE_LENGTH = 140
    MAX_CANDIDATES = 12

    SKIPPED_PREFIXES = ("#", "mailto:", "javascript:")

    def __init__(self, timeout: int = 20, user_agent: str | None = None):
        self.timeout = timeout
        self.user_agent = user_agent or "Mozilla/5.0 (compatible; TheAIBrief/1.0)"
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def scrape(self, source: Source) -> list[NewsItem]:
        """
        Fetch the source's page and turn headline links into news items.

        Raises:
            FetchError: on network failure or a non-2xx status
        """
        html = await self._fetch_html(source.url)
        links = self.extract_links(html, source.url)
        now = utcnow()
        return [
            NewsItem(
                id=new_id(),
                title=link.title,
                source_name=source.name,
                url=link.link,
                published_at=now,
            )
            for link in links
        ]

    async def _fetch_html(self, url: str) -> str:
        try:
            async with aiohttp.ClientSession(headers=self.headers) as session:
                async with session.get(
                    url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    allow_redirects=True
                ) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        raise FetchError(url, f"Scrape failed ({resp.status})", resp.status)
                    return await resp.text()
        except asyncio.TimeoutError as e:
            raise FetchError(url, "Scrape timed out") from e
        except aiohttp.ClientError as e:
            raise FetchError(url, f"Scrape failed: {e}") from e

    def extract_links(self, html: str, base_url: str) -> list[ScrapedLink]:
        """Select same-origin headline links from an HTML page."""
        soup = BeautifulSoup(html, "html.parser")
        base_host = normalize_host(urlparse(base_url).hostname or "")
        candidates: list[ScrapedLink] = []
        seen: set[str] = set()

        for selector in self.SELECTORS:
            for element in soup.select(selector):
                text = " ".join(element.get_text().split())
                href = (element.get("href") or "").strip()
                if len(text) < self.MIN_TITLE_LENGTH or len(text) > self.MAX_TITLE_LENGTH:
                    continue
                if not href or href.startswith(self.SKIPPED_PREFIXES):
                    continue

                absolute = urljoin(base_url, href)
                host = urlparse(absolute).hostname or ""
                if normalize_host(host) != base_host:
                    continue
                if absolute in seen:
                    continue

                seen.add(absolute)
                candidates.append(ScrapedLink(title=text, link=absolute))

            if len(candidates) >= self.MAX_CANDIDATES:
                break

        if not candidates:
            title_tag = soup.find("title")
            title = title_tag.get_text().strip() if title_tag else ""
            if title:
                candidates.append(ScrapedLink(title=title, link=base_url))

        return candidates[:self.MAX_CANDIDATES]
