"""
Family linking via Join IDs.

Two steps:
- validate_join_id(): side-effect free, safe to repeat (confirm-before-commit)
- link_family(): the only mutating step

A Join ID names exactly one member of exactly one family. The token holder
must be the creator of their family and the acting member must be the
creator of theirs. A family pair can be linked once; the combined view is
symmetric, so both families see each other's members.
"""

import logging
from typing import Optional

from famlink.family.helpers import get_member_display_name
from famlink.graph.family_store import FamilyStore
from famlink.linking.join_ids import normalize_join_id
from famlink.linking.results import (
    FamilyContext,
    LinkedFamilySummary,
    LinkFamilyResult,
    ValidateJoinIdResult,
)
from famlink.models import Family, Member

logger = logging.getLogger(__name__)

MSG_EMPTY_TOKEN = "Please enter a Join ID."
MSG_NOT_FOUND = "Invalid Join ID. Member not found."
MSG_FAMILY_NOT_FOUND = "Family not found."
MSG_SELF_LINK = "You cannot link your family to itself."
MSG_HOLDER_NOT_CREATOR = (
    "This Join ID must belong to the person who created their family tree. "
    "Only family creators can link their families."
)
MSG_ACTOR_NOT_CREATOR = "Only the family creator can link their family to another family tree."
MSG_ALREADY_LINKED = "Families are already linked."
MSG_VALID = "Join ID is valid."


class FamilyLinker:
    """Validates and executes links between families stored in a FamilyStore."""

    def __init__(self, store: FamilyStore):
        self.store = store

    def validate_join_id(self, token: Optional[str], context: FamilyContext) -> ValidateJoinIdResult:
        """Check whether the acting family may link using ``token``."""
        failure, holder, target = self._check(token, context)
        if failure:
            return ValidateJoinIdResult(
                success=False,
                message=failure,
                member_name=get_member_display_name(holder) if holder else "",
                family_name=target.name if target else "",
                is_family_creator=holder.is_family_creator if holder else False,
            )
        return ValidateJoinIdResult(
            success=True,
            message=MSG_VALID,
            is_valid=True,
            member_name=get_member_display_name(holder),
            family_name=target.name,
            is_family_creator=True,
        )

    def link_family(self, token: Optional[str], context: FamilyContext) -> LinkFamilyResult:
        """Link the acting family to the family owning ``token``."""
        failure, holder, target = self._check(token, context)
        if failure:
            return LinkFamilyResult(success=False, message=failure)

        acting = self.store.get_family(context.family_id)
        self.store.add_link(context.family_id, target.id, context.member_id or "", holder.join_id)
        self.store.mark_join_id_used(holder.id)
        logger.info("Linked family %s to %s via %s", acting.id, target.id, holder.join_id)

        linked_count = len(target.members)
        user_count = len(acting.members)
        return LinkFamilyResult(
            success=True,
            message=(
                f"Successfully linked {acting.name} to {target.name}. "
                "All family members can now see each other."
            ),
            linked_family=LinkedFamilySummary(
                id=target.id,
                name=target.name,
                creator_name=get_member_display_name(holder),
            ),
            linked_members_count=linked_count,
            user_linked_members_count=user_count,
            total_linked_members=linked_count + user_count,
        )

    def combined_members(self, family_id: str) -> list[Member]:
        """
        Own members followed by the members of every linked family.

        Linked members are decorated with ``is_linked_member`` and
        ``source_family``. A member id appears at most once.
        """
        family = self.store.get_family(family_id)
        if family is None:
            return []

        combined = list(family.members)
        seen = {m.id for m in combined}
        for linked in family.linked_families:
            for member in self.store.get_members(linked.id):
                if member.id in seen:
                    continue
                seen.add(member.id)
                combined.append(member.model_copy(update={
                    "is_linked_member": True,
                    "source_family": linked.name,
                    "original_family_id": linked.id,
                    "linked_from": linked.id,
                }))
        return combined

    def _check(self, token: Optional[str], context: FamilyContext
               ) -> tuple[Optional[str], Optional[Member], Optional[Family]]:
        """Return (failure message or None, token holder, holder's family)."""
        join_id = normalize_join_id(token)
        if join_id is None:
            return MSG_EMPTY_TOKEN, None, None

        holder = self.store.find_member_by_join_id(join_id)
        if holder is None:
            return MSG_NOT_FOUND, None, None

        target = self.store.get_family(holder.family_id)
        if target is None:
            return MSG_FAMILY_NOT_FOUND, holder, None
        if target.id == context.family_id:
            return MSG_SELF_LINK, holder, target
        if not holder.is_family_creator:
            return MSG_HOLDER_NOT_CREATOR, holder, target
        if not context.is_family_creator:
            return MSG_ACTOR_NOT_CREATOR, holder, target
        if self.store.get_family(context.family_id) is None:
            return MSG_FAMILY_NOT_FOUND, holder, target
        if self.store.is_linked(context.family_id, target.id):
            return MSG_ALREADY_LINKED, holder, target
        return None, holder, target
