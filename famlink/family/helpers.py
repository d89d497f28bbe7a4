"""Display and validation helpers for family members."""

import re
from datetime import date
from typing import Optional

from famlink.models import Member


RELATIONSHIP_DISPLAY_NAMES = {
    "father": "Father",
    "mother": "Mother",
    "husband": "Husband",
    "wife": "Wife",
    "son": "Son",
    "daughter": "Daughter",
    "brother": "Brother",
    "sister": "Sister",
    "grandfather": "Grandfather",
    "grandmother": "Grandmother",
    "uncle": "Uncle",
    "aunt": "Aunt",
    "cousin": "Cousin",
}

RELATIONSHIP_CATEGORIES = {
    "father": "parent",
    "mother": "parent",
    "husband": "spouse",
    "wife": "spouse",
    "son": "child",
    "daughter": "child",
    "brother": "sibling",
    "sister": "sibling",
    "grandfather": "grandparent",
    "grandmother": "grandparent",
    "uncle": "extended",
    "aunt": "extended",
    "cousin": "extended",
}

ID_TYPES = ("NIN", "BVN")
MASK_CHAR = "•"

_ELEVEN_DIGITS = re.compile(r"^\d{11}$")


def get_member_display_name(member: Member) -> str:
    """
    Resolve the name shown for a member.

    Prefers ``full_name``, then "first last", then the relationship label.
    """
    if member.full_name and member.full_name.strip():
        return member.full_name.strip()
    name = f"{member.first_name or ''} {member.last_name or ''}".strip()
    if name:
        return name
    return member.relationship or ""


def get_relationship_display_name(relation_type: str) -> str:
    return RELATIONSHIP_DISPLAY_NAMES.get(relation_type, relation_type)


def get_relationship_category(relation_type: str) -> str:
    return RELATIONSHIP_CATEGORIES.get(relation_type, "other")


def validate_id_number(id_number: str, id_type: str) -> bool:
    """NIN and BVN are both 11 digits."""
    if id_type not in ID_TYPES:
        return False
    return bool(_ELEVEN_DIGITS.match(id_number or ""))


def mask_id_number(id_number: str) -> str:
    """Mask all but the last four characters."""
    if len(id_number) <= 4:
        return id_number
    return MASK_CHAR * (len(id_number) - 4) + id_number[-4:]


def format_id_number(id_number: str, id_type: str) -> str:
    return f"{id_type}: {mask_id_number(id_number)}"


def get_initials(first_name: str, last_name: str) -> str:
    return f"{first_name[:1].upper()}{last_name[:1].upper()}"


def calculate_age(date_of_birth: str, today: Optional[date] = None) -> int:
    """Age in whole years from an ISO date string."""
    birth = date.fromisoformat(date_of_birth[:10])
    today = today or date.today()
    return today.year - birth.year - (
        (today.month, today.day) < (birth.month, birth.day)
    )


def is_valid_relationship(user_age: int, relative_age: int, relation_type: str) -> bool:
    """Basic age plausibility check for a declared relationship."""
    if relation_type in ("father", "mother"):
        return relative_age > user_age + 15
    if relation_type in ("son", "daughter"):
        return user_age > relative_age + 15
    if relation_type in ("grandfather", "grandmother"):
        return relative_age > user_age + 35
    return True


def suggest_relationship(user_age: int, relative_age: int) -> list[str]:
    """Suggest relationship types that fit the age difference."""
    age_diff = abs(user_age - relative_age)
    suggestions = []

    if relative_age > user_age + 15:
        suggestions.extend(["father", "mother", "uncle", "aunt"])

    if user_age > relative_age + 15:
        suggestions.extend(["son", "daughter"])

    if age_diff <= 10:
        suggestions.extend(["brother", "sister", "cousin"])
        if user_age >= 18 and relative_age >= 18:
            suggestions.extend(["husband", "wife"])

    if relative_age > user_age + 35:
        suggestions.extend(["grandfather", "grandmother"])

    return suggestions
