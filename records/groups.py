from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class RelationshipGroup:
    value: str
    label: str
    icon: str


RELATIONSHIP_GROUPS: Tuple[RelationshipGroup, ...] = (
    RelationshipGroup("family", "Family", "👨‍👩‍👧‍👦"),
    RelationshipGroup("friend", "Friend", "🤝"),
    RelationshipGroup("colleague", "Colleague", "💼"),
    RelationshipGroup("classmate", "Classmate", "🎓"),
    RelationshipGroup("relative", "Relative", "👪"),
    RelationshipGroup("business", "Business", "🤵"),
    RelationshipGroup("other", "Other", "📋"),
)

UNGROUPED_LABEL = "Ungrouped"
UNGROUPED_ICON = "📌"

_GROUPS_BY_VALUE = {group.value: group for group in RELATIONSHIP_GROUPS}


def find_group(value: Optional[str]) -> Optional[RelationshipGroup]:
    if not value:
        return None
    return _GROUPS_BY_VALUE.get(value)


def group_label(value: Optional[str]) -> str:
    if not value:
        return UNGROUPED_LABEL
    group = find_group(value)
    return group.label if group else value


def group_icon(value: Optional[str]) -> str:
    if not value:
        return UNGROUPED_ICON
    group = find_group(value)
    return group.icon if group else _GROUPS_BY_VALUE["other"].icon
