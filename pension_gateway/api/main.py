"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from pension_gateway.api.middleware import MetricsMiddleware, RequestIDMiddleware
from pension_gateway.api.v1 import imports, records, risk_stats
from pension_gateway.config import Settings, get_settings
from pension_gateway.infrastructure.database.session import build_session_factory
from pension_gateway.infrastructure.observability.logging import setup_logging
from pension_gateway.services.ingestion import IngestionPipeline, import_directory


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or get_settings()
    setup_logging(settings.log_level, service_name=settings.service_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Import workbooks dropped in the import directory before serving
        if settings.import_dir:
            pipeline = IngestionPipeline(build_session_factory(settings), max_workers=settings.ingest_max_workers)
            results = await run_in_threadpool(import_directory, Path(settings.import_dir), pipeline)
            logging.info(
                "Startup import finished",
                extra={"files": len(results), "failed": sum(1 for r in results if r.error)},
            )
        yield

    app = FastAPI(
        title="Pension Risk Gateway",
        description="Pension record ingestion and risk level statistics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(risk_stats.router, prefix="/v1", tags=["risk-stats"])
    app.include_router(imports.router, prefix="/v1", tags=["imports"])
    app.include_router(records.router, prefix="/v1", tags=["records"])

    return app


app = create_app()
