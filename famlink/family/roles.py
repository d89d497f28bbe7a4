"""Role classification for free-text relationship labels."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from famlink.models import Member


class Role(str, Enum):
    """Structural position in the family tree."""
    FATHER = "father"
    MOTHER = "mother"
    CHILD = "child"
    OTHER = "other"


class Gender(str, Enum):
    """Resolved display gender."""
    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class RoleRule:
    """Map any of ``keywords`` (substring, case-insensitive) to ``role``."""
    role: Role
    keywords: tuple[str, ...]

    def matches(self, label: str) -> bool:
        return any(keyword in label for keyword in self.keywords)


# Evaluated top to bottom, first match wins. "Grandson" is a child and
# "Godfather" a father because the father rule runs first.
ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule(Role.FATHER, ("father",)),
    RoleRule(Role.MOTHER, ("mother", "wife")),
    RoleRule(Role.CHILD, ("son", "daughter", "child", "brother", "sister")),
)

FEMALE_KEYWORDS: tuple[str, ...] = ("mother", "wife", "daughter", "sister")
FEMALE_CHILD_KEYWORDS: tuple[str, ...] = ("daughter", "sister")

_PARENT_TYPES = {role.value: role for role in (Role.FATHER, Role.MOTHER, Role.CHILD)}


def role_from_label(label: Optional[str]) -> Role:
    """Classify a bare relationship label."""
    text = (label or "").lower()
    for rule in ROLE_RULES:
        if rule.matches(text):
            return rule.role
    return Role.OTHER


def classify_role(member: Member) -> Role:
    """Structural role of a member; an explicit ``parent_type`` always wins."""
    if member.parent_type in _PARENT_TYPES:
        return _PARENT_TYPES[member.parent_type]
    return role_from_label(member.relationship)


def classify_gender(member: Member) -> Gender:
    """Display gender derived from the role and the relationship label."""
    role = classify_role(member)
    label = (member.relationship or "").lower()

    if role == Role.FATHER:
        return Gender.MALE
    if role == Role.MOTHER:
        return Gender.FEMALE
    if role == Role.CHILD:
        if any(k in label for k in FEMALE_CHILD_KEYWORDS):
            return Gender.FEMALE
        return Gender.MALE
    if any(k in label for k in FEMALE_KEYWORDS):
        return Gender.FEMALE
    return Gender.MALE
