"""Async HTTP client for the family backend.

Every call returns the backend's ``{success, message, data}`` envelope (or a
typed result built from it). Transport failures are caught here and turned
into ``{success: False, message: "Network error. Please try again."}`` so
they never reach the core as exceptions. The bearer token is passed through
untouched.
"""

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from famlink.config import settings
from famlink.linking.join_ids import normalize_join_id
from famlink.linking.protocol import MSG_EMPTY_TOKEN
from famlink.linking.results import (
    NETWORK_ERROR_MESSAGE,
    LinkedFamilySummary,
    LinkFamilyResult,
    ValidateJoinIdResult,
)
from famlink.models import Member

logger = logging.getLogger(__name__)


class FamilyApiClient:
    """Client for the /families endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.api.base_url).rstrip("/")
        self.timeout = timeout or settings.api.timeout_seconds
        self.transport = transport

    def _headers(self, token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, token: str,
                       json: Optional[dict] = None, params: Optional[dict] = None) -> dict:
        """Send one request and return the decoded envelope."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method, path, headers=self._headers(token), json=json, params=params
                )
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return {"success": False, "message": NETWORK_ERROR_MESSAGE}

        if not isinstance(body, dict):
            logger.warning("%s %s returned a non-object body", method, path)
            return {"success": False, "message": NETWORK_ERROR_MESSAGE}
        return body

    # ─────────────────────────────────────────
    # Families and members
    # ─────────────────────────────────────────

    async def create_family(self, name: str, creator: Member, token: str) -> dict:
        return await self._request("POST", "/families", token, json={
            "name": name, "creator": creator.to_payload()
        })

    async def initialize_family_creation(self, family_name: str, creation_type: str,
                                         creator: Member, token: str) -> dict:
        """Start the guided flow; ``data.familyId`` names the new family."""
        return await self._request("POST", "/families/initialize-creation", token, json={
            "familyName": family_name,
            "creationType": creation_type,
            "creator": creator.to_payload(),
        })

    async def setup_parents(self, family_id: str, father: Member, mothers: List[Member],
                            token: str) -> dict:
        """
        Record the father and his wives in one call.

        Mothers without a ``spouse_order`` are numbered by list position on
        the server. The response carries one branch per mother.
        """
        return await self._request("POST", f"/families/{family_id}/setup-parents", token, json={
            "father": father.to_payload(),
            "mothers": [m.to_payload() for m in mothers],
        })

    async def get_my_family(self, token: str) -> dict:
        return await self._request("GET", "/families/my-family", token)

    async def add_member(self, family_id: str, member: Member, token: str) -> dict:
        return await self._request("POST", f"/families/{family_id}/members", token,
                                   json=member.to_payload())

    async def add_child_with_mother(self, family_id: str, child: Member, mother_id: str,
                                    token: str) -> dict:
        """Add a child under one of the family's mothers."""
        return await self.add_member(family_id, child.model_copy(update={
            "relationship": child.relationship or "Child",
            "parent_type": "child",
            "mother_id": mother_id,
        }), token)

    async def get_member_join_id(self, member_id: str, token: str) -> dict:
        return await self._request("GET", f"/families/members/{member_id}/join-id", token)

    async def update_member(self, family_id: str, member_id: str, data: dict, token: str) -> dict:
        return await self._request("PUT", f"/families/{family_id}/members/{member_id}", token,
                                   json=data)

    async def delete_member(self, family_id: str, member_id: str, token: str) -> dict:
        return await self._request("DELETE", f"/families/{family_id}/members/{member_id}", token)

    async def get_tree_structure(self, family_id: str, token: str) -> dict:
        return await self._request("GET", f"/families/{family_id}/tree-structure", token)

    async def get_available_mothers(self, family_id: str, token: str) -> dict:
        return await self._request("GET", f"/families/{family_id}/available-mothers", token)

    async def get_tree(self, family_id: str, width: float, height: float, token: str) -> dict:
        """Built and laid-out tree for a viewport."""
        return await self._request("GET", f"/families/{family_id}/tree", token,
                                   params={"width": width, "height": height})

    # ─────────────────────────────────────────
    # Linking
    # ─────────────────────────────────────────

    async def validate_join_id(self, join_id: str, token: str) -> ValidateJoinIdResult:
        """Ask the backend whether ``join_id`` can be used to link."""
        normalized = normalize_join_id(join_id)
        if normalized is None:
            return ValidateJoinIdResult(success=False, message=MSG_EMPTY_TOKEN)

        body = await self._request(
            "GET", f"/families/validate-join-id/{quote(normalized, safe='')}", token
        )
        data = body.get("data") or {}
        return ValidateJoinIdResult(
            success=bool(body.get("success")),
            message=body.get("message", ""),
            is_valid=bool(data.get("isValid")),
            member_name=data.get("memberName", ""),
            family_name=data.get("familyName", ""),
            is_family_creator=bool(data.get("isFamilyCreator")),
        )

    async def link_family(self, join_id: str, token: str) -> LinkFamilyResult:
        """Link the caller's family to the family owning ``join_id``."""
        normalized = normalize_join_id(join_id)
        if normalized is None:
            return LinkFamilyResult(success=False, message=MSG_EMPTY_TOKEN)

        body = await self._request("POST", "/families/link", token, json={"joinId": normalized})
        data = body.get("data") or {}
        linked = data.get("linkedFamily")
        return LinkFamilyResult(
            success=bool(body.get("success")),
            message=body.get("message", ""),
            linked_family=LinkedFamilySummary(
                id=linked.get("id", ""),
                name=linked.get("name", ""),
                creator_name=linked.get("creatorName", ""),
            ) if linked else None,
            linked_members_count=data.get("linkedMembersCount", 0),
            user_linked_members_count=data.get("userLinkedMembersCount", 0),
            total_linked_members=data.get("totalLinkedMembers", 0),
        )
