"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class PensionRecord:
    """One beneficiary pension entry, as exported by the pension fund"""

    region_code: str  # wilaya
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
    predicted_risk_tier: int  # 0, 1 or 2; computed upstream
    id: Optional[int] = None


@dataclass(frozen=True)
class RowRejected:
    """A spreadsheet row that produced no record"""

    position: int  # 1-based row number in the sheet
    reason: str


@dataclass
class IngestionSummary:
    """Outcome of ingesting one sheet"""

    sheet_name: str
    accepted_count: int
    rejected_count: int
    rejections: List[RowRejected] = field(default_factory=list)

    @property
    def data_row_count(self) -> int:
        return self.accepted_count + self.rejected_count


@dataclass(frozen=True)
class RiskLevelStat:
    """Share of matching records in one risk tier"""

    tier: int
    label: str
    count: int
    percentage: float
