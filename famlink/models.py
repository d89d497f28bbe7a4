"""Data models for family members and families.

Member records arrive from the backend as loosely typed camelCase JSON
(``firstName``, ``birthYear``, ``motherId`` ...). The models accept either the
camelCase aliases or the snake_case field names and ignore unknown keys.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


CreationType = Literal["own_family", "parents_family"]


class SetupStep(str, Enum):
    """Where a family is in the guided creation flow."""
    INITIALIZED = "initialized"
    PARENT_SETUP = "parent_setup"
    CHILDREN_SETUP = "children_setup"
    COMPLETED = "completed"


class FamLinkModel(BaseModel):
    """Base model with camelCase aliases for backend payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        """Dump using the backend's camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Member(FamLinkModel):
    """Flat family member record."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    full_name: Optional[str] = None
    relationship: str = ""
    birth_year: str = ""
    is_deceased: bool = False
    death_year: Optional[str] = None
    is_verified: bool = False
    is_family_creator: bool = False
    join_id: str = ""
    join_id_used: bool = False
    avatar_url: Optional[str] = None

    # Explicit structure hints
    mother_id: Optional[str] = None
    parent_type: Optional[str] = None  # father, mother, child
    spouse_order: Optional[int] = None

    # Linking decoration
    family_id: Optional[str] = None
    is_linked_member: bool = False
    source_family: Optional[str] = None
    original_family_id: Optional[str] = None
    linked_from: Optional[str] = None

    @field_validator("id", "first_name", "last_name", "relationship", "birth_year", "join_id",
                     mode="before")
    @classmethod
    def _coerce_str(cls, value):
        if value is None:
            return ""
        return str(value)

    @field_validator("death_year", "mother_id", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("parent_type", mode="before")
    @classmethod
    def _normalize_parent_type(cls, value):
        if not value:
            return None
        return str(value).strip().lower()


class LinkedFamily(FamLinkModel):
    """Reference to a family linked with this one."""

    id: str
    name: str
    linked_at: str = ""
    linked_by: str = ""


class FamilyStatistics(FamLinkModel):
    """Derived member counts. Never authoritative."""

    total_members: int = 0
    original_members: int = 0
    linked_members: int = 0
    linked_families: int = 0
    total_branches: int = 0
    total_children: int = 0


class Family(FamLinkModel):
    """Family aggregate with members in discovery order."""

    id: str
    name: str
    creator_id: str = ""
    creator_join_id: str = ""
    is_main_family: bool = False
    creation_type: CreationType = "own_family"
    current_step: SetupStep = SetupStep.INITIALIZED
    created_at: str = ""
    members: list[Member] = Field(default_factory=list)
    linked_families: list[LinkedFamily] = Field(default_factory=list)
    statistics: Optional[FamilyStatistics] = None

    def get_member(self, member_id: str) -> Optional[Member]:
        """Find a member by id."""
        return next((m for m in self.members if m.id == member_id), None)

    @property
    def creator(self) -> Optional[Member]:
        """Return the member who created this family."""
        return next((m for m in self.members if m.is_family_creator), None)
