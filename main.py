import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from shortlinks.api import redirect
from shortlinks.config import Settings, get_settings
from shortlinks.database.connection import (
    create_engine_from_settings,
    create_schema,
    create_session_factory,
)
from shortlinks.hit_processor.click_tracker import ClickTracker
from shortlinks.log import configure_logging, trace_requests, uvicorn_log_level
from shortlinks.services.csv_links import load_csv_links

logger = logging.getLogger("shortlinks")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Shared state (settings, connection pool, static links, click tracker) is
    created once in the lifespan and handed to routes via app.state.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("Starting short link server...")
        logger.info("Default redirect: %s", settings.default_redirect_url)
        logger.info("Bind address: %s", settings.bind_address)

        engine = create_engine_from_settings(settings)
        if settings.auto_create_schema:
            try:
                await create_schema(engine)
            except (SQLAlchemyError, OSError):
                # Keep serving: / and /health work without the database
                logger.error("Could not create schema, database unreachable?", exc_info=True)
        session_factory = create_session_factory(engine)

        app.state.settings = settings
        app.state.session_factory = session_factory
        app.state.static_links = load_csv_links(settings.links_csv_path)
        app.state.click_tracker = ClickTracker(
            session_factory,
            drain_timeout=settings.click_drain_timeout,
            max_concurrency=settings.click_max_concurrency,
        )

        try:
            yield
        finally:
            await app.state.click_tracker.drain()
            await engine.dispose()
            logger.info("Short link server stopped")

    app = FastAPI(
        title="Short Links",
        version="1.0.0",
        description="Redirects short tokens to their long URLs",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(trace_requests)

    # asyncpg raises plain OSError (e.g. ConnectionRefusedError) when the server is down
    @app.exception_handler(OSError)
    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: Exception):
        logger.error("Database error for %s", request.url.path, exc_info=exc)
        return PlainTextResponse(
            "Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.get("/health", response_class=PlainTextResponse)
    async def health_check():
        """Liveness probe. Does not touch the database."""
        return "OK"

    ######## Include routers (after /health so it isn't taken as a token)
    app.include_router(redirect.router)

    return app


app = create_app()


def run() -> None:
    """Serve the app on BIND_ADDRESS."""
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=uvicorn_log_level(settings.log_level),
    )


if __name__ == "__main__":
    run()
