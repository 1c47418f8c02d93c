"""Unit tests for structured logging"""

import json
import logging

from pension_gateway.infrastructure.observability.logging import CustomJsonFormatter


def test_json_formatter_adds_service_metadata():
    """Test every line carries level, service and extra fields"""
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name="pension-test")
    record = logging.LogRecord("pension_gateway.ingestion", logging.WARNING, __file__, 1, "Row rejected", None, None)
    record.position = 7
    record.reason = "insufficient-columns"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Row rejected"
    assert payload["level"] == "WARNING"
    assert payload["service"] == "pension-test"
    assert payload["name"] == "pension_gateway.ingestion"
    assert payload["position"] == 7
    assert payload["reason"] == "insufficient-columns"
    assert payload["timestamp"]
