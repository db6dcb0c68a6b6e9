from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from . import __version__
from .core.monitoring import Stats
from .core.pipeline import MessagePump
from .endpoints import health_router
from .metrics import Exporter


def create_app(
    exporter: Exporter,
    pump: Optional[MessagePump] = None,
    stats: Optional[Stats] = None,
) -> FastAPI:
    """Build the HTTP app around an already wired exporter.

    The pump is not started here; the CLI owns the process lifecycle.
    """
    app = FastAPI(title="Tempest Exporter", version=__version__)
    app.state.exporter = exporter
    app.state.pump = pump
    app.state.stats = stats
    app.include_router(health_router)
    return app
