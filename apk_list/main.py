"""Main application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Response
from prometheus_fastapi_instrumentator import Instrumentator

from apk_list.api.routes import page
from apk_list.config import ConfigurationError, Settings, settings
from apk_list.ingest.systembolaget import SystembolagetClient
from apk_list.logging_config import setup_logging
from apk_list.render.page_builder import PageBuilder
from apk_list.worker.page_cache import PageCache
from apk_list.worker.refresher import PageRefresher

logger = logging.getLogger(__name__)


def build_refresher(cache: PageCache, config: Settings = settings) -> PageRefresher:
    """
    Wire the catalog client, page builder and cache from settings.

    Raises:
        ConfigurationError: If the API key is not configured
    """
    fetcher = SystembolagetClient(
        api_key=config.require_api_key(),
        url=config.catalog_url,
        timeout=config.request_timeout_seconds,
        max_attempts=config.catalog_max_attempts,
    )
    builder = PageBuilder(
        template_dir=config.template_dir,
        template_name=config.template_name,
        precision=config.score_precision,
    )
    return PageRefresher(
        fetcher=fetcher,
        builder=builder,
        cache=cache,
        update_interval=config.update_interval_seconds,
        retry_interval=config.retry_interval_seconds,
    )


def create_app(
    cache: Optional[PageCache] = None,
    refresher: Optional[PageRefresher] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        cache: Shared page cache (a fresh one holding the placeholder if omitted)
        refresher: Background refresher started and stopped with the app
    """
    page_cache = cache or PageCache()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting APK list...")
        if refresher:
            refresher.start()

        yield

        logger.info("Shutting down...")
        if refresher:
            await refresher.stop()
            await refresher.fetcher.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="APK list",
        description="Retailer products ranked by alcohol per krona",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.page_cache = page_cache

    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/health", "/favicon.ico"],
    ).instrument(app).expose(app, include_in_schema=False)

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        """Return empty favicon response to avoid 404 noise."""
        return Response(status_code=204)

    # After the fixed routes: the page router ends in a catch-all
    app.include_router(page.router)

    return app


def run():
    """Start the refresher and serve the page until the process exits."""
    setup_logging(level=settings.log_level, log_dir=settings.log_dir or None)

    cache = PageCache()
    try:
        refresher = build_refresher(cache, settings)
    except ConfigurationError as e:
        logger.critical(f"Cannot start: {e}")
        sys.exit(1)

    app = create_app(cache=cache, refresher=refresher)
    host = str(settings.addr)
    logger.info(f"Listening on {host}:{settings.port}...")
    uvicorn.run(
        app,
        host=host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
