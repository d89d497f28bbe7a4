"""Request context and result types for family linking.

Failures are returned as results with ``success=False`` and a message meant
to be shown to the user verbatim. Nothing here raises.
"""

from dataclasses import dataclass
from typing import Optional


NETWORK_ERROR_MESSAGE = "Network error. Please try again."


@dataclass(frozen=True)
class FamilyContext:
    """Who is acting, passed explicitly into every linking call."""
    family_id: str
    member_id: Optional[str] = None
    is_family_creator: bool = False


@dataclass
class ValidateJoinIdResult:
    """Outcome of the side-effect-free validation step."""
    success: bool
    message: str
    is_valid: bool = False
    member_name: str = ""
    family_name: str = ""
    is_family_creator: bool = False

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "memberName": self.member_name,
            "familyName": self.family_name,
            "isFamilyCreator": self.is_family_creator,
        }


@dataclass
class LinkedFamilySummary:
    """The family that was linked to."""
    id: str
    name: str
    creator_name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "creatorName": self.creator_name}


@dataclass
class LinkFamilyResult:
    """Outcome of the linking step."""
    success: bool
    message: str
    linked_family: Optional[LinkedFamilySummary] = None
    linked_members_count: int = 0
    user_linked_members_count: int = 0
    total_linked_members: int = 0

    def to_dict(self) -> dict:
        return {
            "linkedFamily": self.linked_family.to_dict() if self.linked_family else None,
            "linkedMembersCount": self.linked_members_count,
            "userLinkedMembersCount": self.user_linked_members_count,
            "totalLinkedMembers": self.total_linked_members,
        }
