"""Risk level statistics endpoints"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from pension_gateway.api.dependencies import get_request_id
from pension_gateway.api.v1.schemas import DataQualityResponse, RiskLevelStatSchema, RiskStatsRequest
from pension_gateway.domain.advantage_groups import ADVANTAGE_GROUPS_VERSION
from pension_gateway.domain.exceptions import RiskStatsUnavailableError
from pension_gateway.domain.filters import build_record_filter
from pension_gateway.infrastructure.database.repositories import PensionRepository
from pension_gateway.infrastructure.database.session import get_db
from pension_gateway.infrastructure.observability.logging import log_risk_stats
from pension_gateway.infrastructure.observability.metrics import risk_stats_counter
from pension_gateway.services.risk_stats import RiskStatsService

router = APIRouter()


def _risk_stats(
    request_id: str,
    db: Session,
    region: Optional[str],
    categories: List[str],
    advantages: List[str],
) -> List[RiskLevelStatSchema]:
    start_time = time.time()
    record_filter = build_record_filter(region, categories, advantages)

    try:
        stats = RiskStatsService(PensionRepository(db)).get_risk_level_stats(record_filter)
    except RiskStatsUnavailableError as e:
        db.rollback()
        risk_stats_counter.labels(outcome="error").inc()
        logging.error(f"Risk stats failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Failed to fetch risk level statistics")

    risk_stats_counter.labels(outcome="ok").inc()
    duration_ms = (time.time() - start_time) * 1000
    log_risk_stats(request_id, record_filter.summary(), sum(s.count for s in stats), duration_ms)

    return [
        RiskLevelStatSchema(tier=s.tier, risk_level=s.label, count=s.count, percentage=s.percentage)
        for s in stats
    ]


@router.post("/pensions/risk-stats", response_model=List[RiskLevelStatSchema])
def post_risk_stats(
    request_body: RiskStatsRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Distribution of pension records across risk tiers.

    Filters combine with AND: region (wilaya code), pension status categories,
    advantage groups ("direct", "Veuves", "fille majeur", "(Vide)").
    Tiers without matching records are omitted.
    """
    return _risk_stats(
        get_request_id(request),
        db,
        request_body.region,
        request_body.categories,
        request_body.advantages,
    )


@router.get("/pensions/risk-stats", response_model=List[RiskLevelStatSchema])
def get_risk_stats(
    request: Request,
    region: Optional[str] = Query(None, description="Wilaya code"),
    categories: List[str] = Query([], description="Pension status categories"),
    advantages: List[str] = Query([], description="Advantage group names"),
    db: Session = Depends(get_db),
):
    """Same as POST, with filters as repeated query parameters"""
    return _risk_stats(get_request_id(request), db, region, categories, advantages)


@router.get("/pensions/data-quality", response_model=DataQualityResponse)
def get_data_quality(db: Session = Depends(get_db)):
    """Advantage codes in storage that no filter group covers"""
    try:
        unmapped = RiskStatsService(PensionRepository(db)).find_unmapped_advantage_codes()
    except RiskStatsUnavailableError:
        db.rollback()
        raise HTTPException(status_code=503, detail="Failed to read advantage codes")

    return DataQualityResponse(
        advantage_groups_version=ADVANTAGE_GROUPS_VERSION,
        unmapped_advantage_codes=unmapped,
    )
