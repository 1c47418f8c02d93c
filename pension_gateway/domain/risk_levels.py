"""Risk tier labels and distribution arithmetic"""

from typing import Dict, Iterable, List, Tuple

from pension_gateway.domain.models import RiskLevelStat

# Canonical tier contract. Upstream exports have used both 0 → low and
# 0 → high; this service fixes 0 → low.
RISK_TIER_LABELS: Dict[int, str] = {
    0: "low risk",
    1: "medium risk",
    2: "high risk",
}

UNKNOWN_RISK_LABEL = "unknown risk"

VALID_RISK_TIERS = frozenset(RISK_TIER_LABELS)


def risk_label(tier: int) -> str:
    """Label for a tier; unknown tiers never raise"""
    return RISK_TIER_LABELS.get(tier, UNKNOWN_RISK_LABEL)


def build_risk_distribution(tier_counts: Iterable[Tuple[int, int]]) -> List[RiskLevelStat]:
    """
    Turn (tier, count) pairs into labelled counts and percentages.

    - percentage = 100 * count / total, as float
    - tiers with a zero count are dropped (no zero-fill)
    - total of zero returns an empty distribution

    Example:
        [(0, 2), (1, 2), (2, 1)] → low 40.0, medium 40.0, high 20.0
    """
    counts: Dict[int, int] = {}
    for tier, count in tier_counts:
        if count > 0:
            counts[tier] = counts.get(tier, 0) + count

    total = sum(counts.values())
    if total == 0:
        return []

    return [
        RiskLevelStat(
            tier=tier,
            label=risk_label(tier),
            count=count,
            percentage=(count / total) * 100,
        )
        for tier, count in sorted(counts.items())
    ]
