"""Application factory wiring logging and problem+json handlers."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI

from conditional_http.config import AppConfig, load_config
from conditional_http.http.problem import install_problem_handlers
from conditional_http.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def create_app(*routers: APIRouter, config: Optional[AppConfig] = None) -> FastAPI:
    """Create a FastAPI app with the given routers mounted.

    The loaded configuration is exposed as ``app.state.config`` so route
    modules can build their precondition guards from it.
    """
    configure_logging()
    cfg = config or load_config()
    app = FastAPI(title="Conditional HTTP")
    app.state.config = cfg
    install_problem_handlers(app)
    for router in routers:
        app.include_router(router)
    logger.info(
        "app.created",
        extra={
            "routers": len(routers),
            "missing_result": cfg.precondition.missing_result,
            "responder_enabled": cfg.precondition.responder_enabled,
        },
    )
    return app
