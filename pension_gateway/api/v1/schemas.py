"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RiskStatsRequest(BaseModel):
    """Request body for POST /v1/pensions/risk-stats"""

    region: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("region", "wilaya"),
        description="Wilaya code; empty means every region",
    )
    categories: List[str] = Field(default_factory=list, description="Accepted pension statuses")
    advantages: List[str] = Field(default_factory=list, description="Advantage group names")


class RiskLevelStatSchema(BaseModel):
    """One risk tier in the distribution"""

    model_config = ConfigDict(populate_by_name=True)

    tier: int
    risk_level: str = Field(..., alias="riskLevel")
    count: int
    percentage: float


class RowRejectionSchema(BaseModel):
    """Rejected spreadsheet row"""

    position: int
    reason: str


class ImportResponse(BaseModel):
    """Response for workbook imports"""

    sheet_name: str
    accepted_count: int
    rejected_count: int
    rejections: List[RowRejectionSchema]


class ImportPathRequest(BaseModel):
    """Request body for POST /v1/pensions/import/path"""

    file_name: str = Field(..., min_length=1, description="Workbook name inside the import directory")


class DataQualityResponse(BaseModel):
    """Response for GET /v1/pensions/data-quality"""

    advantage_groups_version: str
    unmapped_advantage_codes: List[str]


class PensionRecordSchema(BaseModel):
    """Stored pension record"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    region_code: str
    advantage_code: str
    pension_number: str
    pension_status: str
    birth_date: date
    entitlement_date: date
    sex: str
    net_monthly_amount: Decimal
    direct_rate: Decimal
    survivor_rate: Decimal
    global_rate: Decimal
    age_at_entitlement: int
    pension_duration_months: int
    category_average_age: int
    age_risk_flag: int
    predicted_risk_tier: int


class PageMeta(BaseModel):
    """Pagination details of a listing"""

    total: int
    page: int
    limit: int
    offset: int


class PensionPageResponse(BaseModel):
    """Response for GET /v1/pensions"""

    data: List[PensionRecordSchema]
    meta: PageMeta
