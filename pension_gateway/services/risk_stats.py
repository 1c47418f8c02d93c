"""Risk level statistics over stored pension records"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from pension_gateway.domain.advantage_groups import unmapped_advantage_codes
from pension_gateway.domain.exceptions import RiskStatsUnavailableError
from pension_gateway.domain.filters import RecordFilter
from pension_gateway.domain.models import RiskLevelStat
from pension_gateway.domain.risk_levels import build_risk_distribution
from pension_gateway.infrastructure.database.repositories import PensionRepository

logger = logging.getLogger(__name__)


class RiskStatsService:
    """Computes risk tier distributions for a record filter"""

    def __init__(self, repository: PensionRepository):
        self.repository = repository

    def get_risk_level_stats(self, record_filter: RecordFilter) -> List[RiskLevelStat]:
        """
        Distribution of matching records across risk tiers.

        Either the whole distribution is returned or RiskStatsUnavailableError
        is raised; an empty list means no record matched.
        """
        try:
            tier_counts = self.repository.count_by_risk_tier(record_filter)
        except SQLAlchemyError as e:
            logger.error(f"Risk tier query failed: {e}", extra={"filters": record_filter.summary()})
            raise RiskStatsUnavailableError("Failed to fetch risk level statistics") from e

        return build_risk_distribution(tier_counts)

    def find_unmapped_advantage_codes(self) -> List[str]:
        """Stored advantage codes that belong to no filter group"""
        try:
            codes = self.repository.distinct_advantage_codes()
        except SQLAlchemyError as e:
            raise RiskStatsUnavailableError("Failed to read advantage codes") from e

        unmapped = unmapped_advantage_codes(codes)
        if unmapped:
            logger.warning("Advantage codes outside every group", extra={"codes": unmapped})
        return unmapped
