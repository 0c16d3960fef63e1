"""
FastAPI application factory.

Run with:
    uvicorn app.main:app
"""

from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from money_tracker import __version__
from money_tracker.api.routes import router
from money_tracker.audit import configure_logging
from money_tracker.config import get_settings
from money_tracker.orchestrator import EntryFlow, create_app_components


logger = structlog.get_logger(__name__)


def create_app(entry_flow: Optional[EntryFlow] = None) -> FastAPI:
    """
    Build the API.

    Args:
        entry_flow: Pre-built flow (tests inject one backed by in-memory
                    storage). Built from settings when omitted.
    """
    settings = get_settings().app
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Money Tracker API",
        version=__version__,
        debug=settings.debug_mode,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.entry_flow = entry_flow or create_app_components()
    app.include_router(router)

    logger.info("app_created", environment=settings.app_environment)
    return app
