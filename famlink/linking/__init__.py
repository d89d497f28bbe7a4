"""Family linking package - Join IDs, validation and linking.

FamilyLinker and LinkSession live in famlink.linking.protocol and
famlink.linking.session.
"""
from famlink.linking.join_ids import normalize_join_id, generate_join_id, generate_unique_join_id
from famlink.linking.results import (
    FamilyContext,
    ValidateJoinIdResult,
    LinkFamilyResult,
    LinkedFamilySummary,
)

__all__ = [
    "normalize_join_id",
    "generate_join_id",
    "generate_unique_join_id",
    "FamilyContext",
    "ValidateJoinIdResult",
    "LinkFamilyResult",
    "LinkedFamilySummary",
]
