"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging and initialises the schema in the
workspace database.  Requests then open their own connection to
``app.state.db_path`` through :func:`faqsmith.api.deps.get_db`.

The FAQ synthesizer is built once from ``settings``; when its configuration
is invalid (e.g. no API key) the app still starts, and the generation
endpoints answer 503 with the reason.

Routers
-------
    /crawl   : fetch a page and return its structured content
    /faqs    : generate, save, list, edit, publish and export FAQs
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from faqsmith import __version__
from faqsmith.api.routers import crawl as crawl_router
from faqsmith.api.routers import faqs as faqs_router
from faqsmith.config import settings
from faqsmith.db import get_connection, init_db
from faqsmith.faq import FAQSynthesizer, InputError, SynthesizerConfig
from faqsmith.log import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prepare the DB and build the synthesizer on startup."""
    configure_logging(settings.log_level)

    app.state.db_path = settings.db_path
    conn = get_connection(app.state.db_path)
    try:
        init_db(conn)
    finally:
        conn.close()

    app.state.synthesizer = None
    app.state.synthesizer_error = None
    try:
        app.state.synthesizer = FAQSynthesizer(SynthesizerConfig.from_settings(settings))
    except InputError as exc:
        logger.warning("FAQ generation disabled: %s", exc.detail)
        app.state.synthesizer_error = exc.detail

    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="faqsmith API",
        description=(
            "Crawl a public web page, generate FAQs from its text with an LLM, "
            "then review, publish and export them."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(crawl_router.router, prefix="/crawl", tags=["crawl"])
    app.include_router(faqs_router.router, prefix="/faqs", tags=["faqs"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn faqsmith.api.app:app --reload
app = create_app()
