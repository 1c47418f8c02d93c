"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from pension_gateway.config import Settings, get_settings
from pension_gateway.infrastructure.database.repositories import PensionRepository
from pension_gateway.infrastructure.database.session import get_db, get_session_factory
from pension_gateway.services.ingestion import IngestionPipeline


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_pension_repository(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PensionRepository:
    """Provide a repository with the configured page sizes"""
    return PensionRepository(db, default_page_size=settings.default_page_size, max_page_size=settings.max_page_size)


def get_ingestion_pipeline(settings: Settings = Depends(get_settings)) -> IngestionPipeline:
    """Provide an ingestion pipeline bound to the process session factory"""
    return IngestionPipeline(get_session_factory(), max_workers=settings.ingest_max_workers)
