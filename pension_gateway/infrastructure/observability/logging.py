"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "pension-gateway", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "pension-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_ingestion_summary(
    source: str,
    sheet_name: str,
    accepted_count: int,
    rejected_count: int,
    duration_ms: float,
) -> None:
    """Log structured ingestion outcome for operators"""
    logging.getLogger("pension_gateway.ingestion").info(
        "Ingestion completed",
        extra={
            "step": "ingestion_complete",
            "source": source,
            "sheet_name": sheet_name,
            "accepted_count": accepted_count,
            "rejected_count": rejected_count,
            "duration_ms": duration_ms,
        },
    )


def log_risk_stats(request_id: str, filter_summary: Dict[str, Any], total: int, duration_ms: float) -> None:
    """Log structured risk statistics request"""
    logging.getLogger("pension_gateway.risk_stats").info(
        "Risk stats computed",
        extra={
            "request_id": request_id,
            "step": "risk_stats_complete",
            "filters": filter_summary,
            "matching_records": total,
            "duration_ms": duration_ms,
        },
    )
