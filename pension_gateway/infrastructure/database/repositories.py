"""Data access layer for pension records"""

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from pension_gateway.domain.advantage_groups import EMPTY_ADVANTAGE_CODES
from pension_gateway.domain.exceptions import RecordNotFoundError
from pension_gateway.domain.filters import RecordFilter
from pension_gateway.domain.models import PensionRecord
from pension_gateway.infrastructure.database.models import PensionRecordRow

_RECORD_FIELDS = (
    "region_code",
    "advantage_code",
    "pension_number",
    "pension_status",
    "birth_date",
    "entitlement_date",
    "sex",
    "net_monthly_amount",
    "direct_rate",
    "survivor_rate",
    "global_rate",
    "age_at_entitlement",
    "pension_duration_months",
    "category_average_age",
    "age_risk_flag",
    "predicted_risk_tier",
)


def to_domain(row: PensionRecordRow) -> PensionRecord:
    """Map an ORM row to the domain record"""
    return PensionRecord(id=row.id, **{name: getattr(row, name) for name in _RECORD_FIELDS})


def apply_record_filter(query: Query, record_filter: RecordFilter) -> Query:
    """Translate a RecordFilter into WHERE clauses"""
    if record_filter.region:
        query = query.filter(PensionRecordRow.region_code == record_filter.region)

    if record_filter.statuses:
        query = query.filter(PensionRecordRow.pension_status.in_(sorted(record_filter.statuses)))

    if record_filter.filters_advantage:
        clauses = []
        if record_filter.advantage_codes:
            clauses.append(PensionRecordRow.advantage_code.in_(sorted(record_filter.advantage_codes)))
        if record_filter.include_empty_advantage:
            clauses.append(PensionRecordRow.advantage_code.in_(sorted(EMPTY_ADVANTAGE_CODES)))
        query = query.filter(or_(*clauses))

    return query


class PensionRepository:
    """Repository for pension records"""

    def __init__(self, db: Session, default_page_size: int = 10, max_page_size: int = 100):
        self.db = db
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create(self, record: PensionRecord) -> int:
        """Persist a new record and return its storage id (caller commits)"""
        db_record = PensionRecordRow(**{name: getattr(record, name) for name in _RECORD_FIELDS})
        self.db.add(db_record)
        self.db.flush()  # Get ID without committing
        record.id = db_record.id
        return db_record.id

    def get(self, record_id: int) -> PensionRecord:
        """Fetch one record by id"""
        row = self.db.get(PensionRecordRow, record_id)
        if row is None:
            raise RecordNotFoundError(f"Pension record {record_id} not found")
        return to_domain(row)

    def page_limit(self, limit: Optional[int] = None) -> int:
        """Effective page size: default_page_size when missing, capped at max_page_size"""
        if limit is None:
            return self.default_page_size
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        return min(limit, self.max_page_size)

    def list(self, page: int = 1, limit: Optional[int] = None) -> Tuple[List[PensionRecord], int]:
        """Page through records ordered by id; returns (records, total count)"""
        limit = self.page_limit(limit)
        page = max(page, 1)
        total = self.db.query(func.count(PensionRecordRow.id)).scalar() or 0
        rows = (
            self.db.query(PensionRecordRow)
            .order_by(PensionRecordRow.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [to_domain(row) for row in rows], total

    def update(self, record: PensionRecord) -> None:
        """Overwrite every mutable field of an existing record in place"""
        row = self.db.get(PensionRecordRow, record.id) if record.id is not None else None
        if row is None:
            raise RecordNotFoundError(f"Pension record {record.id} not found")
        for name in _RECORD_FIELDS:
            setattr(row, name, getattr(record, name))
        self.db.flush()

    def delete(self, record_id: int) -> None:
        """Remove a record by id"""
        row = self.db.get(PensionRecordRow, record_id)
        if row is None:
            raise RecordNotFoundError(f"Pension record {record_id} not found")
        self.db.delete(row)
        self.db.flush()

    def count_by_risk_tier(self, record_filter: RecordFilter) -> List[Tuple[int, int]]:
        """(tier, count) pairs for records matching the filter"""
        query = self.db.query(
            PensionRecordRow.predicted_risk_tier,
            func.count(PensionRecordRow.id),
        )
        query = apply_record_filter(query, record_filter)
        rows = query.group_by(PensionRecordRow.predicted_risk_tier).all()
        return [(int(tier), int(count)) for tier, count in rows]

    def distinct_advantage_codes(self) -> List[str]:
        """Every advantage code present in storage"""
        rows = self.db.query(PensionRecordRow.advantage_code).distinct().all()
        return [code for (code,) in rows]
