"""
Tests for the provider panel.
"""

import pytest

from bookingclient.errors import DraftValidationError, ServerRejection


@pytest.fixture
def panel(client, token_factory):
    client.session.login(token_factory(["ROLE_PROVIDER"], 3), "prov")
    return client.provider_panel()


class TestProviderPanel:
    async def test_load_branches(self, panel):
        branches = await panel.load_branches()
        assert [b.name for b in branches] == ["Centro", "Norte"]

    async def test_select_branch_loads_rooms_only(self, panel, platform):
        await panel.load_branches()

        rooms = await panel.select_branch(panel.branches[0])

        assert [r.name for r in rooms] == ["Room A"]
        assert dict(platform.requests[-1].query) == {"branchId": "1", "type": "ROOM"}

    async def test_create_branch_refreshes_list(self, panel, platform):
        branch = await panel.create_branch("  Sur ", "South Rd 4")

        assert branch.name == "Sur"
        assert platform.bodies[0] == {"name": "Sur", "address": "South Rd 4"}
        assert [b.name for b in panel.branches] == ["Centro", "Norte", "Sur"]

    async def test_create_branch_requires_fields(self, panel, platform):
        with pytest.raises(DraftValidationError, match="Branch address is required"):
            await panel.create_branch("Sur", " ")
        assert platform.requests == []

    async def test_update_selected_branch(self, panel):
        await panel.load_branches()
        await panel.select_branch(panel.branches[1])

        await panel.update_branch(2, "Norte Nuevo", "North Ave 9")

        assert panel.selected.name == "Norte Nuevo"
        assert panel.branches[1].name == "Norte Nuevo"

    async def test_delete_selected_branch_clears_rooms(self, panel):
        await panel.load_branches()
        await panel.select_branch(panel.branches[0])

        await panel.delete_branch(1)

        assert panel.selected is None
        assert panel.rooms == []
        assert [b.id for b in panel.branches] == [2]

    async def test_update_missing_branch(self, panel):
        with pytest.raises(ServerRejection) as exc_info:
            await panel.update_branch(99, "Ghost", "Nowhere")
        assert panel.error == "Branch not found"
        assert exc_info.value.status == 404

    async def test_create_room(self, panel, platform):
        await panel.load_branches()
        await panel.select_branch(panel.branches[0])

        room = await panel.create_room("Room C", "30")

        assert room.base_price == 30.0
        assert platform.bodies[-2] == {"name": "Room C", "hourlyPrice": 30.0}
        assert [r.name for r in panel.rooms] == ["Room A", "Room C"]

    async def test_create_room_needs_selection(self, panel):
        with pytest.raises(DraftValidationError, match="Select a branch first"):
            await panel.create_room("Room C", 30)
