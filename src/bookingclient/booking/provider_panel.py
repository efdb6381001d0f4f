"""
Provider panel: the provider's own branches and their rooms.
"""

from typing import List, Optional

from loguru import logger

from ..errors import ApiError, DraftValidationError
from ..models import Branch, Item, ItemType
from ..network.sequencing import LatestOnly, StaleResponse
from ..network.services import CatalogApi
from .forms import validate_branch, validate_room


class ProviderPanel:
    """
    State behind the provider dashboard.

    Rooms are loaded for the selected branch only; selecting another branch
    (or deleting the selected one) clears them before anything new arrives.
    """

    def __init__(self, catalog: CatalogApi):
        self.catalog = catalog
        self.branches: List[Branch] = []
        self.selected: Optional[Branch] = None
        self.rooms: List[Item] = []
        self.error: Optional[str] = None
        self._rooms_query = LatestOnly("provider rooms")

    async def _call(self, awaitable):
        self.error = None
        try:
            return await awaitable
        except ApiError as e:
            self.error = e.message
            raise

    async def load_branches(self) -> List[Branch]:
        self.branches = await self._call(self.catalog.my_branches())
        return self.branches

    async def select_branch(self, branch: Optional[Branch]) -> List[Item]:
        self.selected = branch
        self.rooms = []
        if branch is None:
            self._rooms_query.invalidate()
            return self.rooms

        try:
            rooms = await self._rooms_query.run(
                self.catalog.list_items(branch_id=branch.id, item_type=ItemType.ROOM)
            )
        except StaleResponse:
            return self.rooms
        except ApiError as e:
            self.error = e.message
            return self.rooms

        self.rooms = rooms
        return self.rooms

    async def create_branch(self, name: str, address: str) -> Branch:
        request = validate_branch(name, address)
        branch = await self._call(self.catalog.create_branch(request))
        logger.info(f"Branch created: {branch.name} ({branch.id})")
        await self.load_branches()
        return branch

    async def update_branch(self, branch_id: int, name: str, address: str) -> Branch:
        request = validate_branch(name, address)
        branch = await self._call(self.catalog.update_branch(branch_id, request))
        if self.selected is not None and self.selected.id == branch_id:
            self.selected = branch
        await self.load_branches()
        return branch

    async def delete_branch(self, branch_id: int) -> None:
        await self._call(self.catalog.delete_branch(branch_id))
        logger.info(f"Branch {branch_id} deleted")
        if self.selected is not None and self.selected.id == branch_id:
            await self.select_branch(None)
        await self.load_branches()

    async def create_room(self, name: str, hourly_price) -> Item:
        """
        Add a room to the selected branch.

        Raises:
            DraftValidationError: No branch selected, or invalid room fields
        """
        request = validate_room(name, hourly_price)
        if self.selected is None:
            raise DraftValidationError("Select a branch first", "branch_id")

        room = await self._call(self.catalog.create_room(self.selected.id, request))
        logger.info(f"Room created: {room.name} at branch {self.selected.id}")
        await self.select_branch(self.selected)
        return room
