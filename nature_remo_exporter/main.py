"""
Nature Remo Exporter API
Serves Prometheus metrics refreshed in the background from the Nature Remo Cloud API
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .client import NatureRemoClient
from .config import API_TITLE, API_VERSION, Settings
from .metrics import MetricState
from .refresher import Refresher
from .routes import system

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "System Information",
        "description": "Exporter metadata and health checks"
    },
    {
        "name": "Metrics",
        "description": "Prometheus metrics export"
    }
]


def create_app(
    settings: Settings,
    client: Optional[NatureRemoClient] = None,
    state: Optional[MetricState] = None
) -> FastAPI:
    """
    Build the exporter application.

    The metric state and refresher are created once here and shared with the
    routes through app.state. The refresher starts with the application and
    is stopped (after its current cycle) on shutdown.
    """
    if client is None:
        client = NatureRemoClient(
            token=settings.token,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout
        )
    if state is None:
        state = MetricState()

    refresher = Refresher(
        client=client,
        state=state,
        interval=settings.interval,
        stop_on_error=settings.stop_on_error
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up - initializing refresh loop")
        refresher.start()
        try:
            yield
        finally:
            logger.info("Application shutting down")
            try:
                await refresher.stop()
            finally:
                client.close()

    app = FastAPI(
        title=API_TITLE,
        description="Prometheus exporter for Nature Remo temperature, humidity, illumination and movement sensors.",
        version=API_VERSION,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
        license_info={
            "name": "Apache-2.0"
        }
    )
    app.state.settings = settings
    app.state.metric_state = state
    app.state.refresher = refresher

    app.include_router(system.router)
    return app
