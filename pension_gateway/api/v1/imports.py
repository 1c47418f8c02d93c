"""Workbook import endpoints"""

import io
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from pension_gateway.api.dependencies import get_ingestion_pipeline, get_request_id
from pension_gateway.api.v1.schemas import ImportPathRequest, ImportResponse, RowRejectionSchema
from pension_gateway.config import Settings, get_settings
from pension_gateway.domain.exceptions import NoDataRowsError, SpreadsheetSourceError
from pension_gateway.domain.models import IngestionSummary
from pension_gateway.services.ingestion import IngestionPipeline

router = APIRouter()


def _to_response(summary: IngestionSummary) -> ImportResponse:
    return ImportResponse(
        sheet_name=summary.sheet_name,
        accepted_count=summary.accepted_count,
        rejected_count=summary.rejected_count,
        rejections=[RowRejectionSchema(position=r.position, reason=r.reason) for r in summary.rejections],
    )


async def _ingest(pipeline: IngestionPipeline, source, source_name: str, request_id: str) -> ImportResponse:
    try:
        summary = await run_in_threadpool(pipeline.ingest_workbook, source, source_name)
    except NoDataRowsError as e:
        logging.warning(f"Import rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except SpreadsheetSourceError as e:
        logging.warning(f"Unreadable workbook: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    return _to_response(summary)


@router.post("/pensions/import", response_model=ImportResponse)
async def import_workbook(
    request: Request,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """
    Import pension records from an .xlsx workbook sent as the raw request body.

    Rows are processed independently; the response counts accepted and
    rejected rows and lists each rejection with its sheet row number.
    """
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Request body must contain an .xlsx workbook")

    source_name = request.headers.get("X-File-Name", "upload")
    return await _ingest(pipeline, io.BytesIO(body), source_name, get_request_id(request))


@router.post("/pensions/import/path", response_model=ImportResponse)
async def import_workbook_from_path(
    request_body: ImportPathRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """Import a workbook already present in the configured import directory"""
    if not settings.import_dir:
        raise HTTPException(status_code=404, detail="No import directory configured")

    base = Path(settings.import_dir).resolve()
    path = (base / request_body.file_name).resolve()
    if base not in path.parents:
        raise HTTPException(status_code=400, detail="File must be inside the import directory")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    return await _ingest(pipeline, path, path.name, get_request_id(request))
