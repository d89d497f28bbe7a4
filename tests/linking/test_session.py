"""Tests for the caller-side validate/link ordering."""

import asyncio

from famlink.linking.results import LinkFamilyResult, ValidateJoinIdResult
from famlink.linking.session import MSG_VALIDATE_FIRST, LinkSession


class FakeClient:
    """Stands in for FamilyApiClient; validations can be held open."""

    def __init__(self):
        self.gates = {}
        self.link_calls = []
        self.family_fetches = 0

    async def validate_join_id(self, join_id, token):
        gate = self.gates.get(join_id)
        if gate is not None:
            await gate.wait()
        valid = join_id.strip().startswith("GOOD")
        return ValidateJoinIdResult(
            success=valid,
            message="Join ID is valid." if valid else "Invalid Join ID. Member not found.",
            is_valid=valid,
            family_name=join_id.strip(),
        )

    async def link_family(self, join_id, token):
        self.link_calls.append(join_id)
        return LinkFamilyResult(success=True, message="linked")

    async def get_my_family(self, token):
        self.family_fetches += 1
        return {"success": True, "message": "ok", "data": {"members": []}}


class TestLinkSession:

    def test_validate_then_link_refetches_family(self):
        async def run():
            client = FakeClient()
            session = LinkSession(client, "tok")
            assert (await session.validate(" GOOD1 ")).is_valid
            result = await session.link("GOOD1")
            return client, session, result

        client, session, result = asyncio.run(run())
        assert result.success
        assert client.link_calls == ["GOOD1"]
        assert client.family_fetches == 1
        assert session.family == {"members": []}
        assert session.validated_join_id is None

    def test_link_without_validation_is_refused(self):
        client = FakeClient()
        session = LinkSession(client, "tok")
        result = asyncio.run(session.link("GOOD1"))
        assert result.success is False
        assert result.message == MSG_VALIDATE_FIRST
        assert client.link_calls == []

    def test_link_after_failed_validation_is_refused(self):
        async def run():
            client = FakeClient()
            session = LinkSession(client, "tok")
            await session.validate("BAD")
            return client, await session.link("BAD")

        client, result = asyncio.run(run())
        assert result.message == MSG_VALIDATE_FIRST
        assert client.link_calls == []

    def test_link_with_different_token_is_refused(self):
        async def run():
            session = LinkSession(FakeClient(), "tok")
            await session.validate("GOOD1")
            return await session.link("GOOD2")

        assert asyncio.run(run()).message == MSG_VALIDATE_FIRST

    def test_last_validation_wins(self):
        """A slow earlier validation cannot overwrite a newer one."""
        async def run():
            client = FakeClient()
            slow_gate = asyncio.Event()
            client.gates["GOOD_SLOW"] = slow_gate
            session = LinkSession(client, "tok")

            slow = asyncio.create_task(session.validate("GOOD_SLOW"))
            await asyncio.sleep(0)
            fast = await session.validate("BAD")
            slow_gate.set()
            return session, await slow, fast

        session, slow_result, fast_result = asyncio.run(run())
        assert slow_result is None
        assert fast_result.success is False
        assert session.validated_join_id is None

    def test_new_validation_clears_previous_approval(self):
        async def run():
            client = FakeClient()
            session = LinkSession(client, "tok")
            await session.validate("GOOD1")
            await session.validate("BAD")
            return client, await session.link("GOOD1")

        client, result = asyncio.run(run())
        assert result.message == MSG_VALIDATE_FIRST
        assert client.link_calls == []
