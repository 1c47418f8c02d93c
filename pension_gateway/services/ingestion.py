"""Bulk ingestion of spreadsheet rows into pension records"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from pension_gateway.domain.exceptions import NoDataRowsError, SpreadsheetSourceError
from pension_gateway.domain.models import IngestionSummary, PensionRecord, RowRejected
from pension_gateway.domain.row_parser import parse_row
from pension_gateway.infrastructure.database.repositories import PensionRepository
from pension_gateway.infrastructure.observability.logging import log_ingestion_summary
from pension_gateway.infrastructure.observability.metrics import ingest_failures_counter, record_ingestion
from pension_gateway.infrastructure.spreadsheet.reader import WorkbookSource, read_first_sheet

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """
    Parses sheet rows and persists the accepted records.

    Each data row is one independent unit of work (parse, insert, commit in its
    own session) run on a bounded thread pool. The summary is built only after
    every row's future has completed, from the collected outcomes.
    """

    def __init__(self, session_factory: sessionmaker, max_workers: int = 4):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.session_factory = session_factory
        self.max_workers = max_workers

    def ingest_workbook(self, source: WorkbookSource, source_name: Optional[str] = None) -> IngestionSummary:
        """
        Read the first sheet of a workbook and ingest its rows.

        Raises:
            SpreadsheetSourceError: workbook cannot be opened or read
            NoDataRowsError: sheet has a header only, or nothing
        """
        name = source_name or (str(source) if isinstance(source, (str, Path)) else "upload")
        try:
            sheet = read_first_sheet(source)
        except SpreadsheetSourceError:
            ingest_failures_counter.inc()
            raise
        logger.info("Processing sheet", extra={"source": name, "sheet_name": sheet.sheet_name, "rows": len(sheet.rows)})
        return self.ingest_rows(sheet.rows, sheet_name=sheet.sheet_name, source_name=name)

    def ingest_rows(
        self,
        rows: Sequence[Sequence[str]],
        sheet_name: str = "",
        source_name: str = "rows",
    ) -> IngestionSummary:
        """
        Ingest every data row; the first row is the header and is skipped.

        Returns:
            IngestionSummary where accepted_count + rejected_count == len(rows) - 1
        """
        if len(rows) < 2:
            ingest_failures_counter.inc()
            raise NoDataRowsError("Sheet has no data rows (header only or empty)")

        start_time = time.time()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ingest") as executor:
            futures = [
                executor.submit(self._process_row, cells, index + 1)
                for index, cells in enumerate(rows)
                if index > 0
            ]
            # Barrier: every row has an outcome before counting
            wait(futures)

        rejections: List[RowRejected] = []
        accepted_count = 0
        for future in futures:
            outcome = future.result()
            if outcome is None:
                accepted_count += 1
            else:
                rejections.append(outcome)

        rejections.sort(key=lambda r: r.position)
        summary = IngestionSummary(
            sheet_name=sheet_name,
            accepted_count=accepted_count,
            rejected_count=len(rejections),
            rejections=rejections,
        )

        duration = time.time() - start_time
        record_ingestion(summary.accepted_count, summary.rejected_count, duration)
        log_ingestion_summary(source_name, sheet_name, summary.accepted_count, summary.rejected_count, duration * 1000)
        return summary

    def _process_row(self, cells: Sequence[str], position: int) -> Optional[RowRejected]:
        """Parse and persist one row; None means accepted"""
        outcome = parse_row(cells, position)
        if isinstance(outcome, RowRejected):
            logger.warning("Row rejected", extra={"position": position, "reason": outcome.reason})
            return outcome
        return self._persist(outcome, position)

    def _persist(self, record: PensionRecord, position: int) -> Optional[RowRejected]:
        db = self.session_factory()
        try:
            PensionRepository(db).create(record)
            db.commit()
            return None
        except SQLAlchemyError as e:
            db.rollback()
            detail = str(e.orig) if getattr(e, "orig", None) is not None else str(e)
            logger.warning("Row insert failed", extra={"position": position, "error": detail})
            return RowRejected(position=position, reason=f"storage-error:{detail}")
        finally:
            db.close()


@dataclass
class DirectoryImportResult:
    """Outcome of one workbook found in an import directory"""

    path: str
    summary: Optional[IngestionSummary] = None
    error: Optional[str] = None


def import_directory(directory: Path, pipeline: IngestionPipeline) -> List[DirectoryImportResult]:
    """
    Ingest every workbook in a directory, one file at a time.

    A file that cannot be read, or has no data rows, is logged and reported
    with its error; the remaining files are still imported.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.info("Import directory does not exist", extra={"import_dir": str(directory)})
        return []

    files = sorted(p for p in directory.iterdir() if p.is_file() and not p.name.startswith((".", "~$")))
    logger.info("Found workbooks to import", extra={"import_dir": str(directory), "count": len(files)})

    results = []
    for path in files:
        try:
            summary = pipeline.ingest_workbook(path)
        except SpreadsheetSourceError as e:
            logger.error(f"Failed to import {path.name}: {e}", extra={"path": str(path)})
            results.append(DirectoryImportResult(path=str(path), error=str(e)))
            continue
        results.append(DirectoryImportResult(path=str(path), summary=summary))
    return results
