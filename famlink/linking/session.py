"""
Link session - caller-side ordering for the two-step linking flow.

- validate(): last request wins. A validation superseded by a newer call
  resolves to None and its result is dropped.
- link(): only issued after the latest validation of the same token
  succeeded. The backend does not enforce this ordering; the session does.
- After a successful link the combined family view is refetched.
"""

import logging
from typing import Optional

from famlink.api.client import FamilyApiClient
from famlink.linking.join_ids import normalize_join_id
from famlink.linking.results import LinkFamilyResult, ValidateJoinIdResult

logger = logging.getLogger(__name__)

MSG_VALIDATE_FIRST = "Validate the Join ID before linking."


class LinkSession:
    """One user's validate/link flow against the backend."""

    def __init__(self, client: FamilyApiClient, token: str):
        self.client = client
        self.token = token
        self.family: Optional[dict] = None
        self._sequence = 0
        self._validated_join_id: Optional[str] = None

    @property
    def validated_join_id(self) -> Optional[str]:
        return self._validated_join_id

    async def validate(self, join_id: str) -> Optional[ValidateJoinIdResult]:
        """Validate ``join_id``; returns None if a newer validate superseded it."""
        self._sequence += 1
        request_id = self._sequence
        self._validated_join_id = None

        result = await self.client.validate_join_id(join_id, self.token)

        if request_id != self._sequence:
            logger.debug("Discarding superseded validation of %r", join_id)
            return None
        if result.success and result.is_valid:
            self._validated_join_id = normalize_join_id(join_id)
        return result

    async def link(self, join_id: str) -> LinkFamilyResult:
        """Link using a token that was just validated."""
        normalized = normalize_join_id(join_id)
        if normalized is None or normalized != self._validated_join_id:
            return LinkFamilyResult(success=False, message=MSG_VALIDATE_FIRST)

        result = await self.client.link_family(normalized, self.token)
        self._validated_join_id = None

        if result.success:
            response = await self.client.get_my_family(self.token)
            if response.get("success"):
                self.family = response.get("data")
        return result
