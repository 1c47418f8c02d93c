"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SpreadsheetSourceError(DomainException):
    """Workbook could not be opened or read"""

    pass


class NoDataRowsError(SpreadsheetSourceError):
    """Sheet holds a header only, or nothing at all"""

    pass


class RecordNotFoundError(DomainException):
    """No pension record with the requested id"""

    pass


class RiskStatsUnavailableError(DomainException):
    """Risk level statistics could not be computed from storage"""

    pass
