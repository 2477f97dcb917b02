"""
Feed Parser - Fetch and parse RSS/Atom feeds.

Handles:
- RSS 2.0 and Atom 1.0 formats through a single code path
- Lenient publish-date parsing with a "now" fallback
- Image extraction from enclosures and media attachments
- Rate limiting per domain
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from urllib.parse import urlparse

import aiohttp
import feedparser
from bs4 import BeautifulSoup

from .exceptions import FetchError
from .models import RawFeedEntry, utcnow

logger = logging.getLogger(__name__)

# Tried in order; the first match wins
DATE_FORMATS = [
    "%a, %d %b %Y %H:%M:%S %z",  # RFC 822 with seconds
    "%a, %d %b %Y %H:%M %z",  # RFC 822 without seconds
    "%Y-%m-%dT%H:%M:%S%z",  # ISO 8601
    "%Y-%m-%dT%H:%M:%S.%f%z",  # ISO 8601 with milliseconds
    "%Y-%m-%d %H:%M:%S %z",  # SQL-like
]

_NAMED_ZONES = {
    "GMT": "+0000",
    "UTC": "+0000",
    "UT": "+0000",
    "Z": "+0000",
    "EST": "-0500",
    "EDT": "-0400",
    "CST": "-0600",
    "CDT": "-0500",
    "MST": "-0700",
    "MDT": "-0600",
    "PST": "-0800",
    "PDT": "-0700",
}


def _normalize_zone(value: str) -> str:
    """Rewrite a trailing named zone (e.g. GMT) as a numeric offset."""
    head, _, tail = value.rpartition(" ")
    if head and tail.upper() in _NAMED_ZONES:
        return f"{head} {_NAMED_ZONES[tail.upper()]}"
    return value


def parse_feed_date(value: str | None, parsed: time.struct_time | None = None) -> datetime:
    """
    Parse a feed date string into an aware UTC datetime.

    Tries each pattern in DATE_FORMATS, then the struct feedparser already
    derived (if any), and finally falls back to the current time so that a
    bad date never drops an otherwise valid story.
    """
    text = (value or "").strip()
    if text:
        candidates = [text, _normalize_zone(text)]
        for fmt in DATE_FORMATS:
            for candidate in candidates:
                try:
                    return datetime.strptime(candidate, fmt).astimezone(timezone.utc)
                except ValueError:
                    continue

    if parsed:
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            pass

    return utcnow()


def _plain_text(html: str) -> str:
    """Collapse an HTML fragment into plain text."""
    if not html:
        return ""
    if "<" not in html:
        return html.strip()
    return BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)


def _extract_image(entry) -> str:
    """Prefer an enclosure, then a media attachment."""
    for enclosure in entry.get("enclosures", []) or []:
        href = enclosure.get("href") or enclosure.get("url")
        if href:
            return href
    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key, []) or []:
            url = media.get("url")
            if url:
                return url
    return ""


def _extract_link(entry) -> str:
    """RSS carries the link as text, Atom as an href attribute."""
    link = entry.get("link", "")
    if link:
        return link
    for candidate in entry.get("links", []) or []:
        if candidate.get("rel") == "alternate" or candidate.get("type") == "text/html":
            return candidate.get("href", "")
    return ""


class FeedParser:
    """Fetches and parses RSS/Atom feeds with rate limiting."""

    def __init__(self, timeout: int = 20, user_agent: str | None = None):
        self.timeout = timeout
        self.user_agent = user_agent or "Mozilla/5.0 (compatible; TheAIBrief/1.0)"
        self._domain_last_fetch: dict[str, float] = {}
        self._min_interval = 1.0  # Minimum seconds between requests to same domain

    async def fetch(self, url: str) -> list[RawFeedEntry]:
        """
        Fetch a feed URL and return its entries.

        Raises:
            FetchError: on network failure or a non-2xx status
        """
        if not urlparse(url).scheme.startswith("http"):
            raise FetchError(url, f"Invalid feed URL: {url}")

        domain = urlparse(url).netloc
        await self._rate_limit(domain)

        headers = {"User-Agent": self.user_agent}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        raise FetchError(url, f"Feed request failed ({resp.status})", resp.status)
                    content = await resp.read()
        except asyncio.TimeoutError as e:
            raise FetchError(url, "Feed request timed out") from e
        except aiohttp.ClientError as e:
            raise FetchError(url, f"Feed request failed: {e}") from e

        return self.parse(content)

    def parse(self, content: str | bytes) -> list[RawFeedEntry]:
        """Parse feed content; a document with no entries yields an empty list."""
        parsed = feedparser.parse(content)

        if parsed.bozo and not parsed.entries:
            logger.debug(f"Feed yielded no entries: {parsed.get('bozo_exception')}")
            return []

        entries = []
        for entry in parsed.entries:
            title = " ".join((entry.get("title") or "").split())
            if not title:
                continue

            raw_date = entry.get("published") or entry.get("updated")
            parsed_date = entry.get("published_parsed") or entry.get("updated_parsed")

            summary = entry.get("summary") or ""
            if not summary and entry.get("content"):
                summary = entry.content[0].get("value", "")

            entries.append(RawFeedEntry(
                title=title,
                link=_extract_link(entry).strip(),
                published=parse_feed_date(raw_date, parsed_date),
                summary=_plain_text(summary),
                author=(entry.get("author") or "").strip(),
                image_url=_extract_image(entry).strip(),
            ))

        return entries

    async def _rate_limit(self, domain: str):
        """Ensure minimum interval between requests to same domain."""
        now = time.time()
        if domain in self._domain_last_fetch:
            elapsed = now - self._domain_last_fetch[domain]
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
        self._domain_last_fetch[domain] = time.time()


def parse_feed_sync(content: str | bytes) -> list[RawFeedEntry]:
    """
    Synchronous feed parsing (for use when content is already fetched).

    Useful for testing or when you already have the feed content.
    """
    return FeedParser().parse(content)
