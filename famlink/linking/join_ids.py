"""
Join ID tokens.

Format: first three letters of the first name + first three of the last name,
uppercased, with a two-digit suffix when the base is taken.
Example: MARY + ADE -> MARADE, MARADE01, MARADE02

Beyond "non-empty and trimmed" the token format is not validated here; the
backend owns deeper checks.
"""

import re
from typing import Callable, Optional


def normalize_join_id(token: Optional[str]) -> Optional[str]:
    """Trim a user-entered token; blank tokens become None."""
    if token is None:
        return None
    token = token.strip()
    return token or None


def generate_join_id(first_name: str, last_name: str) -> str:
    """Base Join ID from a member's names."""
    first = re.sub(r"[^A-Za-z0-9]", "", first_name or "")[:3]
    last = re.sub(r"[^A-Za-z0-9]", "", last_name or "")[:3]
    base = f"{first}{last}".upper()
    return base or "MEMBER"


def generate_unique_join_id(first_name: str, last_name: str,
                            is_taken: Callable[[str], bool]) -> str:
    """
    Generate a Join ID nobody holds yet.

    Args:
        first_name: Member first name
        last_name: Member last name
        is_taken: Returns True when a token is already assigned

    Returns:
        The base token, or the base with the first free two-digit suffix
    """
    base = generate_join_id(first_name, last_name)
    candidate = base
    counter = 1
    while is_taken(candidate):
        candidate = f"{base}{counter:02d}"
        counter += 1
    return candidate
