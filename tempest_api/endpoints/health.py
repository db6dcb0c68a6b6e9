"""Health and scrape endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Liveness check: ok as long as the process answers."""
    return {"status": "ok"}


@router.get("/health/pipeline")
def pipeline_health(request: Request):
    """Pump and decoder counters.

    Returns:
        {"pump": {...} | None, "stats": {...} | None}
    """
    pump = getattr(request.app.state, "pump", None)
    stats = getattr(request.app.state, "stats", None)
    return {
        "pump": pump.health_check() if pump is not None else None,
        "stats": stats.to_dict() if stats is not None else None,
    }


@router.get("/metrics")
def metrics(request: Request):
    """Prometheus text exposition of every fresh station value."""
    exporter = request.app.state.exporter
    return Response(content=exporter.encode(), media_type=CONTENT_TYPE_LATEST)
