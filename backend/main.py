"""
Capuzzella FastAPI application.

Entry point for the publish API and the public site server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend import config
from backend.routes import pages as pages_routes
from backend.routes import publish as publish_routes
from backend.services.site import Site

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup logic:
    - Apply LOG_LEVEL to the backend loggers
    - Build the Site for BASE_DIR unless one was injected
    - Load the asset manifest into memory
    """
    logging.getLogger("backend").setLevel(config.settings.LOG_LEVEL)

    site = getattr(app.state, "site", None)
    if site is None:
        site = Site.from_settings()
        app.state.site = site

    site.startup()
    logger.info("Site ready at %s (%d manifest entries)", site.base_dir, len(site.manifest))

    yield

    logger.info("Shutting down")


def create_app(site: Site | None = None) -> FastAPI:
    """Build the application. Pass a Site to serve a specific base directory."""
    app = FastAPI(
        title="Capuzzella",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if site is not None:
        app.state.site = site

    app.include_router(publish_routes.router)

    @app.get("/health")
    async def health():
        """Health check endpoint for uptime monitoring."""
        return {"status": "ok"}

    # Public site catch-all — must be after all API routes
    app.include_router(pages_routes.router)
    return app


app = create_app()
