"""Graph package - persistence for families, members and family links."""

from famlink.graph.family_store import FamilyStore

__all__ = [
    "FamilyStore",
]
