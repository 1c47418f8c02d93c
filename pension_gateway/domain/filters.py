"""Record filter built from dashboard filter inputs"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional

from pension_gateway.domain.advantage_groups import (
    EMPTY_ADVANTAGE_CODES,
    AdvantageGroup,
    codes_for_groups,
    parse_group,
)
from pension_gateway.domain.models import PensionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordFilter:
    """
    Normalized predicate over pension records.

    Dimensions combine with AND. Within the advantage dimension, the concrete
    codes and the empty-code sentinel combine with OR. An empty dimension does
    not filter.
    """

    region: Optional[str] = None
    statuses: FrozenSet[str] = frozenset()
    advantage_codes: FrozenSet[str] = frozenset()
    include_empty_advantage: bool = False

    @property
    def filters_advantage(self) -> bool:
        return bool(self.advantage_codes) or self.include_empty_advantage

    @property
    def is_unfiltered(self) -> bool:
        return not self.region and not self.statuses and not self.filters_advantage

    def matches(self, record: PensionRecord) -> bool:
        """Evaluate the predicate against one record"""
        if self.region and record.region_code != self.region:
            return False
        if self.statuses and record.pension_status not in self.statuses:
            return False
        if self.filters_advantage:
            code = record.advantage_code
            in_codes = code in self.advantage_codes
            is_empty = self.include_empty_advantage and code in EMPTY_ADVANTAGE_CODES
            if not (in_codes or is_empty):
                return False
        return True

    def summary(self) -> Dict[str, Any]:
        """Loggable view of the filter"""
        return {
            "region": self.region,
            "statuses": sorted(self.statuses),
            "advantage_codes": sorted(self.advantage_codes),
            "include_empty_advantage": self.include_empty_advantage,
        }


def build_record_filter(
    region: Optional[str] = None,
    status_categories: Optional[Iterable[str]] = None,
    advantage_groups: Optional[Iterable[str]] = None,
) -> RecordFilter:
    """
    Translate user-facing filter inputs into a RecordFilter.

    Args:
        region: wilaya code; empty or None means every region
        status_categories: accepted pension statuses; empty means every status
        advantage_groups: group names from AdvantageGroup; unknown names are ignored

    Example:
        build_record_filter("16", ["décès"], ["direct", "(Vide)"])
        → region_code == "16" AND pension_status IN ("décès")
          AND (advantage_code IN direct codes OR advantage_code is empty)
    """
    groups = set()
    for name in advantage_groups or ():
        group = parse_group(name)
        if group is None:
            logger.debug("Ignoring unknown advantage group", extra={"group": name})
            continue
        groups.add(group)

    return RecordFilter(
        region=region or None,
        statuses=frozenset(s for s in (status_categories or ()) if s),
        advantage_codes=frozenset(codes_for_groups(groups)),
        include_empty_advantage=AdvantageGroup.EMPTY in groups,
    )
