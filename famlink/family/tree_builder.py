"""Tree builder - assembles a single-rooted tree from flat member records.

Three cases:
    1. No valid members: a sentinel root ("No Family Members").
    2. No father: the first valid member is the root and every other valid
       member is a direct child (flat tree).
    3. Father found: father -> mothers -> each mother's children, or
       father -> children when no mother is recorded.

The tree is rebuilt from scratch on every call; nodes are never shared
between builds.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from famlink.family.helpers import get_member_display_name
from famlink.family.inference import (
    family_statistics,
    infer_structure,
    spouse_order_of,
)
from famlink.family.roles import Gender, Role, classify_gender, classify_role
from famlink.models import Family, Member

logger = logging.getLogger(__name__)

EMPTY_ROOT_ID = "empty"
EMPTY_ROOT_NAME = "No Family Members"


@dataclass
class TreeNode:
    """Renderable tree node with layout coordinates."""
    id: str
    name: str
    gender: str = Gender.MALE.value
    role: str = Role.OTHER.value
    birth_year: str = ""
    is_deceased: bool = False
    death_year: Optional[str] = None
    avatar_url: Optional[str] = None
    join_id: str = ""
    relationship: str = ""
    is_linked_member: bool = False
    source_family: Optional[str] = None
    children: list["TreeNode"] = field(default_factory=list)
    x: float = 0.0
    y: float = 0.0

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, node_id: str) -> Optional["TreeNode"]:
        return next((n for n in self.walk() if n.id == node_id), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for the renderer."""
        return {
            "id": self.id,
            "name": self.name,
            "gender": self.gender,
            "role": self.role,
            "birthYear": self.birth_year,
            "isDeceased": self.is_deceased,
            "deathYear": self.death_year,
            "avatarUrl": self.avatar_url,
            "joinId": self.join_id,
            "relationship": self.relationship,
            "isLinkedMember": self.is_linked_member,
            "sourceFamily": self.source_family,
            "x": self.x,
            "y": self.y,
            "children": [child.to_dict() for child in self.children],
        }


def is_valid_member(member: Member) -> bool:
    """A member can be placed only with an id, a relationship and a birth year."""
    return bool(member.id and member.relationship and member.birth_year)


def member_to_node(member: Member) -> TreeNode:
    """Create a childless node from a member record."""
    return TreeNode(
        id=member.id,
        name=get_member_display_name(member),
        gender=classify_gender(member).value,
        role=classify_role(member).value,
        birth_year=member.birth_year,
        is_deceased=member.is_deceased,
        death_year=member.death_year if member.is_deceased else None,
        avatar_url=member.avatar_url,
        join_id=member.join_id,
        relationship=member.relationship,
        is_linked_member=member.is_linked_member,
        source_family=member.source_family,
    )


def empty_tree() -> TreeNode:
    return TreeNode(id=EMPTY_ROOT_ID, name=EMPTY_ROOT_NAME)


def build_tree(members: list[Member]) -> TreeNode:
    """Build the family tree. Always returns a root node."""
    valid = [m for m in members or [] if is_valid_member(m)]
    skipped = len(members or []) - len(valid)
    if skipped:
        logger.debug("Skipped %d member(s) missing id, relationship or birth year", skipped)

    if not valid:
        return empty_tree()

    structure = infer_structure(valid)

    if structure.father is None:
        root = member_to_node(valid[0])
        root.children = [member_to_node(m) for m in valid[1:]]
        return root

    root = member_to_node(structure.father)
    if not structure.mothers:
        # Without wives there are no branches; children hang off the father
        root.children = [member_to_node(child) for child in structure.children]
        return root

    for mother in structure.mothers:
        mother_node = member_to_node(mother)
        mother_node.children = [
            member_to_node(child) for child in structure.children_of(mother.id)
        ]
        root.children.append(mother_node)
    return root


def tree_structure(family: Family) -> dict:
    """
    Summarize a family as father, mother branches and statistics.

    Args:
        family: Family whose members are summarized

    Returns:
        dict shaped like the backend's tree-structure response
    """
    members = [m for m in family.members if is_valid_member(m)]
    structure = infer_structure(members)

    father = None
    if structure.father:
        father = {
            "id": structure.father.id,
            "name": get_member_display_name(structure.father),
            "details": structure.father.to_payload(),
        }

    mothers = []
    branches = []
    for index, mother in enumerate(structure.mothers):
        order = spouse_order_of(mother, index)
        branch = {"id": f"branch-{mother.id}", "name": f"Wife {order}", "order": order}
        branches.append(branch)
        mothers.append({
            "id": mother.id,
            "name": get_member_display_name(mother),
            "details": mother.to_payload(),
            "branch": branch,
            "children": [c.to_payload() for c in structure.children_of(mother.id)],
        })

    stats = family_statistics(members)
    return {
        "family": {"id": family.id, "name": family.name},
        "treeStructure": {
            "father": father,
            "mothers": mothers,
            # Populated only when there are no mothers to branch under
            "children": [] if structure.mothers else [c.to_payload() for c in structure.children],
            "branches": branches,
            "statistics": {
                "totalMembers": stats.total_members,
                "totalBranches": stats.total_branches,
                "totalChildren": stats.total_children,
            },
        },
    }
