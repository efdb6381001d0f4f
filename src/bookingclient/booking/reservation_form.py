"""
Reservation form state machine.

Selecting a branch is the prerequisite for loading its items; changing the
branch discards whatever was loaded before, and a late response for an
earlier branch is never shown.
"""

from typing import Dict, List, Optional

from loguru import logger

from ..errors import ApiError, DraftValidationError, SubmissionInProgressError
from ..models import Branch, Item, Reservation
from ..network.sequencing import LatestOnly, StaleResponse
from ..network.services import BookingApi, CatalogApi
from .draft import DraftLine, ReservationDraft, ReservationDraftValidator


class ReservationForm:
    """
    Client-side state of the "new reservation" form.

    Attributes:
        branches: Branches offered in the branch selector
        items: Items of the selected branch (empty until loaded)
        draft: Raw field values
        error: Message to display, verbatim from the server on rejection
        submitting: True while a create request is in flight
        last_created: Reservation returned by the last successful submit
    """

    def __init__(
        self,
        catalog: CatalogApi,
        booking: BookingApi,
        validator: Optional[ReservationDraftValidator] = None,
    ):
        self.catalog = catalog
        self.booking = booking
        self.validator = validator or ReservationDraftValidator()

        self.branches: List[Branch] = []
        self.items: List[Item] = []
        self.draft = ReservationDraft()
        self.error: Optional[str] = None
        self.submitting = False
        self.last_created: Optional[Reservation] = None

        self._items_query = LatestOnly("reservation-form items")

    @property
    def items_by_id(self) -> Dict[int, Item]:
        return {item.id: item for item in self.items}

    async def load_branches(self) -> List[Branch]:
        try:
            self.branches = await self.catalog.list_branches()
        except ApiError as e:
            self.error = e.message
            raise
        return self.branches

    async def select_branch(self, branch_id) -> List[Item]:
        """
        Select a branch and load its items.

        Previously loaded items and item selections are dropped at once. If
        another branch is selected before this load finishes, its result is
        discarded.

        Returns:
            Items now shown (empty if this load was superseded or failed)
        """
        self.draft.branch_id = branch_id
        self.items = []
        self.draft.lines = [DraftLine()]

        if branch_id is None or (isinstance(branch_id, str) and not branch_id.strip()):
            self._items_query.invalidate()
            return self.items

        try:
            numeric_id = int(branch_id)
        except (TypeError, ValueError):
            self._items_query.invalidate()
            self.error = "Please select a valid branch"
            return self.items

        try:
            items = await self._items_query.run(self.catalog.list_items(branch_id=numeric_id))
        except StaleResponse:
            return self.items
        except ApiError as e:
            self.error = e.message
            return self.items

        self.items = items
        logger.debug(f"Loaded {len(items)} items for branch {numeric_id}")
        return self.items

    def set_window(self, start_at, end_at) -> None:
        self.draft.start_at = start_at
        self.draft.end_at = end_at

    def set_line(self, index: int, item_id, quantity="1") -> None:
        while len(self.draft.lines) <= index:
            self.draft.lines.append(DraftLine())
        self.draft.lines[index] = DraftLine(item_id=item_id, quantity=quantity)

    def add_line(self, item_id, quantity="1") -> None:
        self.draft.lines.append(DraftLine(item_id=item_id, quantity=quantity))

    def remove_line(self, index: int) -> None:
        del self.draft.lines[index]
        if not self.draft.lines:
            self.draft.lines.append(DraftLine())

    @property
    def can_submit(self) -> bool:
        """Whether the submit control should be enabled."""
        if self.submitting:
            return False
        try:
            self.validator.check_required(self.draft)
        except DraftValidationError:
            return False
        return True

    async def submit(self) -> Reservation:
        """
        Validate and send the draft.

        Returns:
            The created reservation; the form is reset afterwards

        Raises:
            SubmissionInProgressError: A submit is already in flight
            DraftValidationError: Draft incomplete or malformed (nothing sent)
            ApiError: Server rejected the request or it could not be sent
        """
        if self.submitting:
            raise SubmissionInProgressError("A reservation is already being submitted")

        self.error = None
        try:
            request = self.validator.validate(self.draft, self.items_by_id if self.items else None)
        except DraftValidationError as e:
            self.error = e.message
            raise

        self.submitting = True
        try:
            reservation = await self.booking.create_reservation(request)
        except ApiError as e:
            self.error = e.message
            raise
        finally:
            self.submitting = False

        logger.info(f"Reservation {reservation.id} created at branch {reservation.branch_id}")
        self.last_created = reservation
        self.reset()
        return reservation

    def reset(self) -> None:
        self.draft = ReservationDraft()
        self.items = []
        self._items_query.invalidate()
