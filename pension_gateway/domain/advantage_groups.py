"""Static advantage-code groups exposed to dashboard filters.

Each group is a named, closed set of ``advantage_code`` values. The table is
the single source of truth for expanding a filter request into codes and is
versioned together with the group vocabulary: bump ``ADVANTAGE_GROUPS_VERSION``
whenever a code list changes.

Codes that appear in stored data but belong to no group are data-quality
findings; report them with ``unmapped_advantage_codes`` instead of editing
the table to absorb them.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set


ADVANTAGE_GROUPS_VERSION = "2"


class AdvantageGroup(str, Enum):
    """Filter vocabulary for beneficiary advantage categories"""

    DIRECT = "direct"
    WIDOWS = "Veuves"
    ADULT_DAUGHTER = "fille majeur"
    EMPTY = "(Vide)"


ADVANTAGE_GROUP_CODES: Dict[AdvantageGroup, FrozenSet[str]] = {
    AdvantageGroup.DIRECT: frozenset({"1", "7", "W", "Z", "4", "9", "G", "5"}),
    AdvantageGroup.WIDOWS: frozenset({"3", "2", "F", "E", "8", "J"}),
    AdvantageGroup.ADULT_DAUGHTER: frozenset({"H", "D", "Y"}),
}

# Values stored for a record without an advantage code
EMPTY_ADVANTAGE_CODES: FrozenSet[str] = frozenset({"0", ""})


def parse_group(name: str) -> Optional[AdvantageGroup]:
    """Return the group for a filter name, or None when the name is unknown"""
    try:
        return AdvantageGroup(name)
    except ValueError:
        return None


def codes_for_groups(groups: Iterable[AdvantageGroup]) -> Set[str]:
    """Union of the concrete code lists of the given groups (sentinel contributes nothing)"""
    codes: Set[str] = set()
    for group in groups:
        codes |= ADVANTAGE_GROUP_CODES.get(group, frozenset())
    return codes


def group_for_code(code: str) -> Optional[AdvantageGroup]:
    """Reverse lookup: which group an advantage code belongs to"""
    if code in EMPTY_ADVANTAGE_CODES:
        return AdvantageGroup.EMPTY
    for group, codes in ADVANTAGE_GROUP_CODES.items():
        if code in codes:
            return group
    return None


def unmapped_advantage_codes(codes: Iterable[str]) -> List[str]:
    """Codes present in data that no group claims, sorted for reporting"""
    return sorted({code for code in codes if group_for_code(code) is None})
