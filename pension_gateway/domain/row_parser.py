"""Positional parsing of one spreadsheet row into a pension record"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Sequence, Union

from pension_gateway.domain.models import PensionRecord, RowRejected
from pension_gateway.domain.risk_levels import VALID_RISK_TIERS

MIN_COLUMNS = 16

# Tried in order; the first format that matches wins
DATE_FORMATS = (
    "%d/%m/%Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)

SMALL_INT_MAX = 127

# Plain ASCII digits only: no sign, exponent, separators or other scripts
_INTEGER_TEXT = re.compile(r"[0-9]+")
_DECIMAL_TEXT = re.compile(r"[0-9]+(\.[0-9]+)?")

INSUFFICIENT_COLUMNS = "insufficient-columns"


class _FieldError(Exception):
    """Internal signal: a single cell failed conversion"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _parse_count(raw: str, field_name: str) -> int:
    text = str(raw).strip()
    if not _INTEGER_TEXT.fullmatch(text):
        raise _FieldError(f"invalid-integer:{field_name}")
    return int(text)


def _parse_small_int(raw: str, field_name: str) -> int:
    value = _parse_count(raw, field_name)
    if value > SMALL_INT_MAX:
        raise _FieldError(f"invalid-integer:{field_name}")
    return value


def _parse_decimal(raw: str, field_name: str) -> Decimal:
    text = str(raw).strip()
    if not _DECIMAL_TEXT.fullmatch(text):
        raise _FieldError(f"invalid-decimal:{field_name}")
    return Decimal(text)


def _parse_date(raw: str, field_name: str) -> date:
    text = str(raw).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise _FieldError(f"invalid-date:{field_name}")


def _parse_risk_tier(raw: str, field_name: str) -> int:
    tier = _parse_small_int(raw, field_name)
    if tier not in VALID_RISK_TIERS:
        raise _FieldError(f"invalid-integer:{field_name}")
    return tier


def parse_row(cells: Sequence[str], position: int) -> Union[PensionRecord, RowRejected]:
    """
    Convert one raw row into a PensionRecord, or a RowRejected naming the first bad field.

    Columns (0-based, fixed order):
        0 region code, 1 advantage code, 2 pension number, 3 pension status,
        4 birth date, 5 entitlement date, 6 sex, 7 net monthly amount,
        8 direct rate, 9 survivor rate, 10 global rate, 11 age at entitlement,
        12 pension duration (months), 13 category average age,
        14 age risk flag, 15 predicted risk tier

    Never raises for malformed cells; position is the 1-based row number in the sheet.
    """
    if len(cells) < MIN_COLUMNS:
        return RowRejected(position=position, reason=INSUFFICIENT_COLUMNS)

    try:
        return PensionRecord(
            region_code=cells[0],
            advantage_code=cells[1],
            pension_number=cells[2],
            pension_status=cells[3],
            birth_date=_parse_date(cells[4], "birth_date"),
            entitlement_date=_parse_date(cells[5], "entitlement_date"),
            sex=cells[6],
            net_monthly_amount=_parse_decimal(cells[7], "net_monthly_amount"),
            direct_rate=_parse_decimal(cells[8], "direct_rate"),
            survivor_rate=_parse_decimal(cells[9], "survivor_rate"),
            global_rate=_parse_decimal(cells[10], "global_rate"),
            age_at_entitlement=_parse_small_int(cells[11], "age_at_entitlement"),
            pension_duration_months=_parse_count(cells[12], "pension_duration_months"),
            category_average_age=_parse_small_int(cells[13], "category_average_age"),
            age_risk_flag=_parse_small_int(cells[14], "age_risk_flag"),
            predicted_risk_tier=_parse_risk_tier(cells[15], "predicted_risk_tier"),
        )
    except _FieldError as e:
        return RowRejected(position=position, reason=e.reason)
