"""FastAPI backend for families, members and Join ID linking.

Responses use the envelope ``{"success": bool, "message": str, "data": ...}``
with camelCase payloads. The bearer credential identifies the acting member
(its value is the member id); issuing credentials is out of scope.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from famlink.family.inference import available_mothers, family_statistics, infer_structure
from famlink.family.layout import LayoutEngine
from famlink.family.tree_builder import build_tree, tree_structure
from famlink.graph.family_store import FamilyStore
from famlink.linking.protocol import FamilyLinker
from famlink.linking.results import FamilyContext
from famlink.family.roles import Role, classify_role
from famlink.models import CreationType, Family, FamLinkModel, Member, SetupStep

logger = logging.getLogger(__name__)

MSG_UNAUTHORIZED = "You are not authorized to perform this action."
MSG_NOT_FOUND = "The requested resource was not found."
MSG_MOTHER_NOT_FOUND = "Mother not found in this family."
MSG_PARENTS_EXIST = "Parents have already been set up for this family."
MSG_JOIN_ID_TAKEN = "This Join ID is already in use."
MSG_NO_MOTHERS = "At least one mother is required."
MSG_DUPLICATE_SPOUSE_ORDER = "Each mother needs a distinct spouse order."


class CreateFamilyRequest(BaseModel):
    name: str
    creator: Member


class InitializeCreationRequest(FamLinkModel):
    family_name: str
    creation_type: CreationType = "own_family"
    creator: Member


class SetupParentsRequest(FamLinkModel):
    father: Member
    mothers: List[Member]


class LinkFamilyRequest(FamLinkModel):
    join_id: str


def _ok(message: str, data=None) -> dict:
    return {"success": True, "message": message, "data": data}


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


class FamilyApiServer:
    """HTTP surface over a FamilyStore."""

    def __init__(self, store: Optional[FamilyStore] = None):
        self.store = store or FamilyStore()
        self.linker = FamilyLinker(self.store)
        self.layout_engine = LayoutEngine()
        self.app = FastAPI(title="FamLink Family API")
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self._setup_routes()

    def acting_member(self, authorization: Optional[str]) -> Optional[Member]:
        """Resolve the bearer credential to a member."""
        token = _bearer(authorization)
        return self.store.get_member(token) if token else None

    def context_for(self, member: Member) -> FamilyContext:
        return FamilyContext(
            family_id=member.family_id,
            member_id=member.id,
            is_family_creator=member.is_family_creator,
        )

    def combined_family(self, family_id: str) -> Optional[Family]:
        """Family with linked members merged in."""
        family = self.store.get_family(family_id)
        if family is None:
            return None
        members = self.linker.combined_members(family_id)
        return family.model_copy(update={
            "members": members,
            "statistics": family_statistics(members),
        })

    def can_view(self, member: Member, family_id: str) -> bool:
        if member.family_id == family_id:
            return True
        return self.store.is_linked(member.family_id, family_id)

    def is_mother_of(self, mother_id: str, family_id: str) -> bool:
        mother = self.store.get_member(mother_id)
        return (
            mother is not None
            and mother.family_id == family_id
            and classify_role(mother) == Role.MOTHER
        )

    def new_member(self, member: Member) -> Member:
        """Strip server-owned fields from a client-supplied member."""
        return member.model_copy(update={
            "id": "", "is_family_creator": False, "join_id": "", "join_id_used": False
        })

    def family_payload(self, family: Family) -> dict:
        return {
            "family": family.model_dump(
                by_alias=True, exclude={"members", "linked_families", "statistics"}
            ),
            "members": [m.to_payload() for m in family.members],
            "linkedFamilies": [lf.to_payload() for lf in family.linked_families],
            "statistics": family.statistics.to_payload() if family.statistics else None,
        }

    def _setup_routes(self):
        """Setup family routes."""
        app = self.app

        @app.get("/health")
        async def health():
            return {"status": "ok"}

        @app.post("/api/families")
        async def create_family(req: CreateFamilyRequest):
            try:
                family = self.store.create_family(req.name, req.creator)
            except ValueError as e:
                logger.info("Family creation rejected: %s", e)
                return _fail(400, MSG_JOIN_ID_TAKEN)
            return _ok("Family created successfully", self.family_payload(family))

        @app.post("/api/families/initialize-creation")
        async def initialize_family_creation(req: InitializeCreationRequest):
            try:
                family = self.store.create_family(
                    req.family_name, req.creator, creation_type=req.creation_type
                )
            except ValueError as e:
                logger.info("Family creation rejected: %s", e)
                return _fail(400, MSG_JOIN_ID_TAKEN)
            return _ok("Family creation initialized successfully", {
                "familyId": family.id,
                "creatorId": family.creator_id,
                "creationType": family.creation_type,
                "currentStep": family.current_step.value,
                "nextStep": SetupStep.PARENT_SETUP.value,
            })

        @app.post("/api/families/{family_id}/setup-parents")
        async def setup_parents(family_id: str, req: SetupParentsRequest,
                                authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or actor.family_id != family_id or not actor.is_family_creator:
                return _fail(403, MSG_UNAUTHORIZED)
            if not req.mothers:
                return _fail(400, MSG_NO_MOTHERS)
            orders = [m.spouse_order or i + 1 for i, m in enumerate(req.mothers)]
            if len(set(orders)) != len(orders):
                return _fail(400, MSG_DUPLICATE_SPOUSE_ORDER)
            if infer_structure(self.store.get_members(family_id)).father is not None:
                return _fail(400, MSG_PARENTS_EXIST)

            try:
                father, mothers = self.store.setup_parents(
                    family_id,
                    self.new_member(req.father),
                    [self.new_member(m) for m in req.mothers],
                )
            except ValueError as e:
                logger.info("Parent setup rejected: %s", e)
                return _fail(400, MSG_JOIN_ID_TAKEN)

            family = self.store.get_family(family_id)
            return _ok("Parents set up successfully", {
                "family": {
                    "id": family.id,
                    "name": family.name,
                    "creationType": family.creation_type,
                    "currentStep": family.current_step.value,
                },
                "father": father.to_payload(),
                "mothers": [m.to_payload() for m in mothers],
                "branches": [
                    {"id": f"branch-{m.id}", "name": f"Wife {m.spouse_order}", "order": m.spouse_order}
                    for m in mothers
                ],
            })

        @app.get("/api/families/my-family")
        async def get_my_family(authorization: Optional[str] = Header(None)):
            member = self.acting_member(authorization)
            if member is None:
                return _fail(401, MSG_UNAUTHORIZED)
            family = self.combined_family(member.family_id)
            return _ok("Family retrieved successfully", self.family_payload(family))

        @app.get("/api/families/validate-join-id/{join_id}")
        async def validate_join_id(join_id: str, authorization: Optional[str] = Header(None)):
            member = self.acting_member(authorization)
            if member is None:
                return _fail(401, MSG_UNAUTHORIZED)
            result = self.linker.validate_join_id(join_id, self.context_for(member))
            return {"success": result.success, "message": result.message, "data": result.to_dict()}

        @app.post("/api/families/link")
        async def link_family(req: LinkFamilyRequest, authorization: Optional[str] = Header(None)):
            member = self.acting_member(authorization)
            if member is None:
                return _fail(401, MSG_UNAUTHORIZED)
            result = self.linker.link_family(req.join_id, self.context_for(member))
            if not result.success:
                return {"success": False, "message": result.message}
            return _ok(result.message, result.to_dict())

        @app.get("/api/families/members/{member_id}/join-id")
        async def get_member_join_id(member_id: str, authorization: Optional[str] = Header(None)):
            member = self.acting_member(authorization)
            target = self.store.get_member(member_id)
            if member is None or target is None or target.family_id != member.family_id:
                return _fail(403, MSG_UNAUTHORIZED)
            return _ok("Join ID retrieved successfully", {
                "memberId": target.id,
                "memberName": f"{target.first_name} {target.last_name}".strip(),
                "joinId": target.join_id,
                "isFamilyCreator": target.is_family_creator,
                "canBeLinked": target.is_family_creator,
            })

        @app.post("/api/families/{family_id}/members")
        async def add_member(family_id: str, member: Member,
                             authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or actor.family_id != family_id:
                return _fail(403, MSG_UNAUTHORIZED)
            if member.mother_id and not self.is_mother_of(member.mother_id, family_id):
                return _fail(400, MSG_MOTHER_NOT_FOUND)
            saved = self.store.add_member(family_id, self.new_member(member))
            return _ok("Family member added successfully", {"member": saved.to_payload()})

        @app.put("/api/families/{family_id}/members/{member_id}")
        async def update_member(family_id: str, member_id: str, member: Member,
                                authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or actor.family_id != family_id:
                return _fail(403, MSG_UNAUTHORIZED)
            existing = self.store.get_member(member_id)
            if existing is None or existing.family_id != family_id:
                return _fail(404, MSG_NOT_FOUND)
            if member.mother_id and not self.is_mother_of(member.mother_id, family_id):
                return _fail(400, MSG_MOTHER_NOT_FOUND)
            updated = self.store.update_member(member_id, **member.model_dump(exclude_unset=True))
            return _ok("Family member updated successfully", {"member": updated.to_payload()})

        @app.delete("/api/families/{family_id}/members/{member_id}")
        async def delete_member(family_id: str, member_id: str,
                                authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or actor.family_id != family_id:
                return _fail(403, MSG_UNAUTHORIZED)
            existing = self.store.get_member(member_id)
            if existing is None or existing.family_id != family_id:
                return _fail(404, MSG_NOT_FOUND)
            if not self.store.delete_member(member_id):
                return {"success": False, "message": "The family creator cannot be removed."}
            return _ok("Family member deleted successfully")

        @app.get("/api/families/{family_id}/tree-structure")
        async def get_tree_structure(family_id: str, authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or not self.can_view(actor, family_id):
                return _fail(403, MSG_UNAUTHORIZED)
            family = self.combined_family(family_id)
            return _ok("Tree structure retrieved successfully", tree_structure(family))

        @app.get("/api/families/{family_id}/available-mothers")
        async def get_available_mothers(family_id: str, authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or not self.can_view(actor, family_id):
                return _fail(403, MSG_UNAUTHORIZED)
            mothers = available_mothers(self.store.get_members(family_id))
            return _ok("Available mothers retrieved successfully",
                       {"mothers": [m.to_dict() for m in mothers]})

        @app.get("/api/families/{family_id}/tree")
        async def get_tree(family_id: str, width: float = 1024, height: float = 768,
                           authorization: Optional[str] = Header(None)):
            actor = self.acting_member(authorization)
            if actor is None or not self.can_view(actor, family_id):
                return _fail(403, MSG_UNAUTHORIZED)
            root = build_tree(self.linker.combined_members(family_id))
            self.layout_engine.layout(root, width, height)
            return _ok("Tree retrieved successfully", root.to_dict())


def create_app(store: Optional[FamilyStore] = None) -> FastAPI:
    """Create the FastAPI application."""
    server = FamilyApiServer(store)
    return server.app
