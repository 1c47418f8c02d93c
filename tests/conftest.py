"""Pytest fixtures for testing"""

from pathlib import Path
from typing import Callable, Generator, List

import openpyxl
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from pension_gateway.api.dependencies import get_ingestion_pipeline
from pension_gateway.api.main import create_app
from pension_gateway.config import Settings, get_settings
from pension_gateway.infrastructure.database.models import Base
from pension_gateway.infrastructure.database.session import build_session_factory, get_db
from pension_gateway.services.ingestion import IngestionPipeline


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file"""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        ingest_max_workers=4,
        import_dir=str(tmp_path / "imports"),
    )


@pytest.fixture
def session_factory(settings: Settings) -> Generator[sessionmaker, None, None]:
    """Session factory over a fresh schema"""
    factory = build_session_factory(settings)
    yield factory
    Base.metadata.drop_all(bind=factory.kw["bind"])
    factory.kw["bind"].dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create test database and session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def pipeline(session_factory: sessionmaker) -> IngestionPipeline:
    return IngestionPipeline(session_factory, max_workers=4)


@pytest.fixture
def client(db: Session, settings: Settings, pipeline: IngestionPipeline) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app(settings)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_ingestion_pipeline] = lambda: pipeline
    return TestClient(app)


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write rows to an .xlsx file and return its path"""

    def _write(rows: List[list], name: str = "pensions.xlsx", sheet_title: str = "Feuil1") -> Path:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = sheet_title
        for row in rows:
            ws.append(row)
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        return path

    return _write
