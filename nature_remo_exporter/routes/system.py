"""
System routes
Service information, health checks and Prometheus metrics
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from ..config import API_TITLE, API_VERSION
from ..models import HealthStatus

router = APIRouter()

# A refresh older than this many intervals counts as stale
STALE_INTERVALS = 3


@router.get("/", summary="Exporter Information", tags=["System Information"])
async def root():
    """Root endpoint with exporter information"""
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "endpoints": {
            "metrics": "/metrics",
            "health": "/health",
            "docs": "/docs"
        }
    }


@router.get("/health", response_model=HealthStatus, summary="Health Check", tags=["System Information"])
async def health_check(request: Request):
    """
    Health of the refresh loop.

    Healthy when the loop is running, the latest cycle succeeded and a cycle
    ran within the last few intervals. Returns 503 when unhealthy so it can
    back a container healthcheck.
    """
    refresher = request.app.state.refresher
    status = refresher.status
    now = datetime.now(timezone.utc)

    last_run = status["last_run"]
    fresh = last_run is not None and (now - last_run).total_seconds() <= refresher.interval * STALE_INTERVALS

    is_healthy = refresher.running and fresh and status["last_error"] is None

    health = HealthStatus(
        status="healthy" if is_healthy else "unhealthy",
        timestamp=now,
        version=API_VERSION,
        refresher_running=refresher.running,
        last_refresh=last_run,
        last_success=status["last_success"],
        last_error=status["last_error"],
        consecutive_errors=status["consecutive_errors"]
    )
    return JSONResponse(
        content=health.model_dump(mode="json"),
        status_code=200 if is_healthy else 503
    )


@router.get("/metrics", response_class=PlainTextResponse, summary="Prometheus Metrics", tags=["Metrics"])
async def metrics(request: Request):
    """
    Prometheus metrics endpoint in text exposition format.

    Serves whatever the refresh loop last wrote; values are never refreshed
    on scrape. Before the first successful cycle only exporter and process
    metrics are present.

    **Device Metrics** (labels: id, name, firmware_version, mac_address, bt_mac_address, serial_number):
    - `nature_remo_temperature`: Current temperature
    - `nature_remo_humidity`: Current humidity
    - `nature_remo_illumination`: Current illumination
    - `nature_remo_movement`: Current movement value
    - `nature_remo_movement_counter` (untyped, only increases): Movement events detected since exporter start

    **Exporter Metrics:**
    - `nature_remo_exporter_refresh_duration_seconds`: Refresh cycle duration histogram
    - `nature_remo_exporter_refresh_failures_total`: Failed refresh cycles
    """
    state = request.app.state.metric_state
    return Response(state.render(), media_type=CONTENT_TYPE_LATEST)
