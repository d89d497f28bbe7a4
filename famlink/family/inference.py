"""Relationship inference over a flat member list.

Determines the father, the mothers (wives) and the children of a family and
groups every child under exactly one mother. Explicit ``mother_id`` linkage
is used when it names a known mother; otherwise the child falls back to the
first mother in list order.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from famlink.family.helpers import get_member_display_name
from famlink.family.roles import Role, classify_role
from famlink.models import FamilyStatistics, Member

logger = logging.getLogger(__name__)


@dataclass
class FamilyStructure:
    """Classified roles of one family."""
    father: Optional[Member] = None
    mothers: list[Member] = field(default_factory=list)
    children: list[Member] = field(default_factory=list)
    children_by_mother: dict[str, list[Member]] = field(default_factory=dict)
    others: list[Member] = field(default_factory=list)
    # Children placed by the first-mother fallback rather than by mother_id
    fallback_assigned: list[str] = field(default_factory=list)

    def children_of(self, mother_id: str) -> list[Member]:
        return self.children_by_mother.get(mother_id, [])


@dataclass
class AvailableMother:
    """A mother a new child can be attached to."""
    id: str
    name: str
    spouse_order: int
    branch_name: str
    children_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "spouseOrder": self.spouse_order,
            "branchName": self.branch_name,
            "childrenCount": self.children_count,
        }


def infer_structure(members: list[Member]) -> FamilyStructure:
    """Classify members into father, mothers and children and group children."""
    structure = FamilyStructure()

    for member in members:
        role = classify_role(member)
        if role == Role.FATHER:
            if structure.father is None:
                structure.father = member
            else:
                # Single-father model: later fathers are not placed
                logger.debug("Ignoring additional father %s", member.id)
                structure.others.append(member)
        elif role == Role.MOTHER:
            structure.mothers.append(member)
        elif role == Role.CHILD:
            structure.children.append(member)
        else:
            structure.others.append(member)

    structure.children_by_mother = {m.id: [] for m in structure.mothers}
    if not structure.mothers:
        return structure

    first_mother_id = structure.mothers[0].id
    for child in structure.children:
        if child.mother_id and child.mother_id in structure.children_by_mother:
            structure.children_by_mother[child.mother_id].append(child)
        else:
            structure.children_by_mother[first_mother_id].append(child)
            structure.fallback_assigned.append(child.id)
            logger.debug("Child %s assigned to first mother %s", child.id, first_mother_id)

    return structure


def spouse_order_of(mother: Member, index: int) -> int:
    """Display order of a mother: stored ``spouse_order`` or list position."""
    return mother.spouse_order if mother.spouse_order else index + 1


def available_mothers(members: list[Member]) -> list[AvailableMother]:
    """List mothers with their branch name and current child count."""
    structure = infer_structure(members)
    result = []
    for index, mother in enumerate(structure.mothers):
        order = spouse_order_of(mother, index)
        result.append(AvailableMother(
            id=mother.id,
            name=get_member_display_name(mother),
            spouse_order=order,
            branch_name=f"Wife {order}",
            children_count=len(structure.children_of(mother.id)),
        ))
    return result


def family_statistics(members: list[Member]) -> FamilyStatistics:
    """Derive member counts for a (possibly combined) member list."""
    structure = infer_structure(members)
    linked = [m for m in members if m.is_linked_member]
    linked_sources = {m.source_family or m.original_family_id for m in linked}
    return FamilyStatistics(
        total_members=len(members),
        original_members=len(members) - len(linked),
        linked_members=len(linked),
        linked_families=len(linked_sources),
        total_branches=len(structure.mothers),
        total_children=len(structure.children),
    )
