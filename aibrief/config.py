"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .aggregator import SourceAggregator
    from .feeds import FeedParser
    from .pipeline import BriefPipeline
    from .providers import LLMProvider
    from .scraper import PageScraper
    from .store import BriefArchive, KeyValueStore, SourceHealthLog

# Load environment variables
load_dotenv()

MIN_WINDOW_HOURS = 6
MAX_WINDOW_HOURS = 72
EXPANDED_WINDOW_HOURS = 48


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def clamp_window(hours: float | None, default: float = 24) -> float:
    """Clamp a time window to the supported range."""
    if hours is None:
        hours = default
    return max(MIN_WINDOW_HOURS, min(MAX_WINDOW_HOURS, hours))


class Config:
    """Application configuration from environment."""
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    # Alternate API root, e.g. a proxy that speaks the Responses API
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    # Brief defaults, overridable per request
    BRIEF_TONE: str = os.getenv("BRIEF_TONE", "practical")
    BRIEF_FOCUS_TOPICS: str = os.getenv("BRIEF_FOCUS_TOPICS", "")
    BRIEF_WINDOW_HOURS: float = clamp_window(float(os.getenv("BRIEF_WINDOW_HOURS", "24")))

    # Timeouts (seconds)
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "90"))
    RESOURCE_TIMEOUT: float = float(os.getenv("RESOURCE_TIMEOUT", "120"))
    FEED_TIMEOUT: float = float(os.getenv("FEED_TIMEOUT", "20"))

    STORE_PATH: Path = Path(os.getenv("STORE_PATH", "./data/store"))
    USE_DISK_STORE: bool = _parse_bool(os.getenv("USE_DISK_STORE"), default=True)
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def has_llm_key(cls) -> bool:
        """Check if an API key is configured."""
        return bool(cls.OPENAI_API_KEY)


config = Config()


class AppState:
    """Shared application state."""
    store: "KeyValueStore | None" = None
    archive: "BriefArchive | None" = None
    health_log: "SourceHealthLog | None" = None
    feed_parser: "FeedParser | None" = None
    scraper: "PageScraper | None" = None
    aggregator: "SourceAggregator | None" = None
    pipeline: "BriefPipeline | None" = None


state = AppState()


def get_archive() -> "BriefArchive":
    """Dependency to get the brief archive."""
    if not state.archive:
        raise HTTPException(status_code=500, detail="Archive not initialized")
    return state.archive


def get_aggregator() -> "SourceAggregator":
    """Dependency to get the source aggregator."""
    if not state.aggregator:
        raise HTTPException(status_code=500, detail="Aggregator not initialized")
    return state.aggregator


def get_pipeline() -> "BriefPipeline":
    """Dependency to get the brief pipeline."""
    if not state.pipeline:
        raise HTTPException(status_code=500, detail="Pipeline not initialized")
    return state.pipeline
