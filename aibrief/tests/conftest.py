"""
Pytest fixtures for backend tests.
"""

import asyncio
import json
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from aibrief.aggregator import SourceAggregator
from aibrief.config import state
from aibrief.models import RawFeedEntry, Source, SourceKind, utcnow
from aibrief.pipeline import BriefPipeline
from aibrief.providers.base import LLMProvider, LLMResponse, ProviderCapabilities
from aibrief.server import app
from aibrief.store import BriefArchive, MemoryStore, SourceHealthLog


SAMPLE_BRIEF = """Headline:
OpenAI ships a new reasoning model.

Summary:
Labs released models and tools this week.

Other Stories:
- Theme: Models
  - Story: Google updated Gemini.
    Source: Google AI Blog | URL: https://blog.google/gemini
  - Story: Anthropic shipped a new Claude.
    Source: Anthropic News
    URL: https://anthropic.com/news/claude

Deep Dives:
- Story: A long look at inference costs.
  Source: The Decoder
  URL: https://the-decoder.com/costs

Prompt Studio:
1) Task: Meeting notes
   Prompt: Summarize these notes into decisions and owners.
   Best For: Team leads
   Input Format: Raw notes
   Output Format: Bullet list

Tomorrow's Radar:
- OpenAI is expected to price the new model for enterprise customers.
"""


def _build_source(name: str, **kwargs) -> Source:
    """Build an RSS source with a URL derived from its name."""
    slug = name.lower().replace(" ", "-")
    defaults = {
        "id": slug,
        "name": name,
        "url": f"https://{slug}.example.com/feed.xml",
        "kind": SourceKind.RSS,
    }
    defaults.update(kwargs)
    return Source(**defaults)


def _build_entry(title: str, hours_ago: float = 1, link: str = "") -> RawFeedEntry:
    return RawFeedEntry(
        title=title,
        link=link or f"https://example.com/{title.lower().replace(' ', '-')}",
        published=utcnow() - timedelta(hours=hours_ago),
        summary=f"Summary of {title}",
    )


class FakeProvider(LLMProvider):
    """Provider that replays scripted deltas without touching the network."""

    def __init__(self, deltas: list[str] | None = None, error: Exception | None = None):
        self.deltas = deltas if deltas is not None else [SAMPLE_BRIEF]
        self.error = error
        self.calls: list[dict] = []
        self.block: asyncio.Event | None = None

    @property
    def name(self) -> str:
        return "fake"

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities()

    async def generate(self, user_prompt, system_prompt=None, on_status=None, on_delta=None):
        self.calls.append({"user_prompt": user_prompt, "system_prompt": system_prompt})
        if on_status:
            on_status("Connecting to model...")
        if self.block is not None:
            await self.block.wait()
        if self.error:
            raise self.error
        for delta in self.deltas:
            if on_delta:
                on_delta(delta)
        return LLMResponse(text="".join(self.deltas), model="fake-model")


def _mock_feed_parser(feeds: dict[str, list[RawFeedEntry] | Exception]) -> Mock:
    """Mock FeedParser whose fetch() answers from a url -> entries map."""

    async def fetch(url):
        result = feeds.get(url, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    parser = Mock()
    parser.fetch = AsyncMock(side_effect=fetch)
    return parser


def _split_sse(body: str) -> list[tuple[str, dict]]:
    """Split an event-stream body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        name, data = None, None
        for line in block.splitlines():
            if line.startswith("event: "):
                name = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        if name:
            events.append((name, data))
    return events


@pytest.fixture
def make_source():
    """Factory for RSS sources with a URL derived from the name."""
    return _build_source


@pytest.fixture
def make_entry():
    """Factory for feed entries published some hours ago."""
    return _build_entry


@pytest.fixture
def feed_parser_for():
    """Factory for a mocked FeedParser answering from a url -> entries map."""
    return _mock_feed_parser


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def sample_brief():
    return SAMPLE_BRIEF


@pytest.fixture
def parse_sse():
    """Splits an event-stream body into (event, data) pairs."""
    return _split_sse


@pytest.fixture
def sources():
    """Two enabled sources, the first preferred."""
    return [
        _build_source("Alpha News", preferred=True),
        _build_source("Beta Daily"),
    ]


@pytest.fixture
def feeds(sources):
    """Recent entries for each sample source."""
    return {
        sources[0].url: [
            _build_entry("OpenAI releases a new reasoning model", hours_ago=1),
            _build_entry("Google updates Gemini for developers", hours_ago=2),
        ],
        sources[1].url: [
            _build_entry("Anthropic ships Claude with longer context", hours_ago=3),
            _build_entry("OpenAI releases a new reasoning model!", hours_ago=4),
        ],
    }


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def pipeline(feeds, store, fake_provider):
    """Pipeline wired to mocked feeds and the fake provider."""
    aggregator = SourceAggregator(feed_parser=_mock_feed_parser(feeds), scraper=Mock())
    return BriefPipeline(
        aggregator,
        provider_factory=lambda api_key, model: fake_provider,
        archive=BriefArchive(store),
        health_log=SourceHealthLog(store),
    )


@pytest.fixture
def client(pipeline, store):
    """Create a test client with isolated state."""
    # Store original state
    original = (
        state.store, state.archive, state.health_log,
        state.aggregator, state.pipeline,
    )

    state.store = store
    state.archive = pipeline.archive
    state.health_log = pipeline.health_log
    state.aggregator = pipeline.aggregator
    state.pipeline = pipeline

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    (
        state.store, state.archive, state.health_log,
        state.aggregator, state.pipeline,
    ) = original
