"""
AI Brief API Server

FastAPI application providing endpoints for:
- Streamed brief generation
- Raw source aggregation and source health checks
- Default source catalog
- Brief archive and export
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .aggregator import SourceAggregator
from .config import config, state
from .feeds import FeedParser
from .pipeline import BriefPipeline
from .providers import get_provider_from_env
from .routes import brief_router, misc_router, sources_router
from .scraper import PageScraper
from .store import BriefArchive, SourceHealthLog, create_store

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_provider(api_key: str, model: str):
    """Provider for one request, using server-wide endpoint and timeouts."""
    return get_provider_from_env(
        openai_key=api_key,
        default_model=model,
        base_url=config.OPENAI_BASE_URL,
        request_timeout=config.REQUEST_TIMEOUT,
        resource_timeout=config.RESOURCE_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.pipeline is None:
        state.store = create_store(config.STORE_PATH if config.USE_DISK_STORE else None)
        state.archive = BriefArchive(state.store)
        state.health_log = SourceHealthLog(state.store)
        state.feed_parser = FeedParser(timeout=config.FEED_TIMEOUT)
        state.scraper = PageScraper(timeout=config.FEED_TIMEOUT)
        state.aggregator = SourceAggregator(state.feed_parser, state.scraper)
        state.pipeline = BriefPipeline(
            state.aggregator,
            provider_factory=build_provider,
            archive=state.archive,
            health_log=state.health_log,
            default_api_key=config.OPENAI_API_KEY,
        )

        if config.has_llm_key():
            logger.info(f"Brief generation ready with model {config.LLM_MODEL}")
        else:
            logger.warning(
                "No OPENAI_API_KEY configured. Requests must supply an API key "
                "in their settings to generate briefs."
            )

    yield


app = FastAPI(
    title="AI Brief API",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(misc_router)
app.include_router(sources_router)
app.include_router(brief_router)


def main():
    """Run the API server."""
    uvicorn.run("aibrief.server:app", host="127.0.0.1", port=config.PORT)
