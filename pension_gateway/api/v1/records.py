"""Paginated pension record listing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError

from pension_gateway.api.dependencies import get_pension_repository, get_request_id
from pension_gateway.api.v1.schemas import PageMeta, PensionPageResponse, PensionRecordSchema
from pension_gateway.infrastructure.database.repositories import PensionRepository

router = APIRouter()


@router.get("/pensions", response_model=PensionPageResponse)
def list_pensions(
    request: Request,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, description="Page size; capped at the configured maximum"),
    repository: PensionRepository = Depends(get_pension_repository),
):
    """
    List stored pension records ordered by id.

    Without a limit the configured default page size applies; a limit above
    the configured maximum is capped. `meta.limit` reports the size used.
    """
    effective_limit = repository.page_limit(limit)
    try:
        records, total = repository.list(page=page, limit=effective_limit)
    except SQLAlchemyError as e:
        repository.db.rollback()
        logging.error(f"Failed to list pension records: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Failed to fetch pension data")

    return PensionPageResponse(
        data=[PensionRecordSchema.model_validate(r) for r in records],
        meta=PageMeta(total=total, page=page, limit=effective_limit, offset=(page - 1) * effective_limit),
    )
