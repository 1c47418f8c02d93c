"""Workbook reader: first readable sheet as rows of text cells"""

import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, List, Union

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from pension_gateway.domain.exceptions import SpreadsheetSourceError

logger = logging.getLogger(__name__)

DATETIME_CELL_FORMAT = "%Y-%m-%d %H:%M:%S"

WorkbookSource = Union[str, Path, IO[bytes]]


@dataclass
class SheetRows:
    """Rows of one sheet, header included, every cell as text"""

    sheet_name: str
    rows: List[List[str]]


def cell_to_text(value: Any) -> str:
    """Normalize a cell value the way the source export renders it"""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime(DATETIME_CELL_FORMAT)
    if isinstance(value, date):
        return datetime.combine(value, time()).strftime(DATETIME_CELL_FORMAT)
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # Positional notation, never "1e-05"
        return format(Decimal(repr(value)), "f")
    return str(value)


def _trim_trailing_empty(cells: List[str]) -> List[str]:
    end = len(cells)
    while end > 0 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


def read_first_sheet(source: WorkbookSource) -> SheetRows:
    """
    Open a workbook and return the first sheet that can be read.

    Raises:
        SpreadsheetSourceError: file missing, not a workbook, or no readable sheet
    """
    try:
        wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, SyntaxError) as e:
        # SyntaxError covers malformed XML parts from ElementTree and lxml alike
        raise SpreadsheetSourceError(f"Failed to open workbook: {e}") from e

    try:
        for sheet in wb.worksheets:
            try:
                rows = [
                    _trim_trailing_empty([cell_to_text(v) for v in row])
                    for row in sheet.iter_rows(values_only=True)
                ]
            except (KeyError, ValueError, zipfile.BadZipFile, SyntaxError) as e:
                logger.warning("Skipping unreadable sheet", extra={"sheet_name": sheet.title, "error": str(e)})
                continue
            # Formatted but empty rows at the bottom of a sheet are not data
            while rows and not rows[-1]:
                rows.pop()
            return SheetRows(sheet_name=sheet.title, rows=rows)
    finally:
        wb.close()

    raise SpreadsheetSourceError("No readable sheet found in workbook")
