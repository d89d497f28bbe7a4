"""Family tree package - classification, inference, building and layout."""
from famlink.family.roles import Role, Gender, classify_role, classify_gender
from famlink.family.inference import FamilyStructure, infer_structure
from famlink.family.tree_builder import TreeNode, build_tree, tree_structure
from famlink.family.layout import LayoutEngine, layout
from famlink.family.helpers import get_member_display_name, mask_id_number

__all__ = [
    "Role",
    "Gender",
    "classify_role",
    "classify_gender",
    "FamilyStructure",
    "infer_structure",
    "TreeNode",
    "build_tree",
    "tree_structure",
    "LayoutEngine",
    "layout",
    "get_member_display_name",
    "mask_id_number",
]
