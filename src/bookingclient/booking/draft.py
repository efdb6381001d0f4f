"""
Reservation draft validation.

Turns raw form input into a ``CreateReservationRequest`` that satisfies
the booking service's request constraints. Overlap and stock checks are
the server's job; only the request shape is checked here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Union

from loguru import logger

from ..errors import DraftValidationError
from ..models import CreateReservationRequest, Item, ReservationLineRequest


RawValue = Union[str, int, None]

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


@dataclass
class DraftLine:
    """One item line as typed into the form."""
    item_id: RawValue = ""
    quantity: RawValue = "1"


@dataclass
class ReservationDraft:
    """
    Raw reservation form state.

    Values are kept as entered (strings from the form); nothing is parsed
    until ``ReservationDraftValidator.validate``.
    """
    branch_id: RawValue = ""
    start_at: Union[str, datetime, None] = ""
    end_at: Union[str, datetime, None] = ""
    lines: List[DraftLine] = field(default_factory=lambda: [DraftLine()])


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_positive_int(value: RawValue, field_name: str, label: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise DraftValidationError(f"{label} must be a positive whole number", field_name)
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise DraftValidationError(f"{label} must be a positive whole number", field_name)
    if number < 1:
        raise DraftValidationError(f"{label} must be a positive whole number", field_name)
    return number


def _to_local(value: datetime) -> datetime:
    """Naive local time; aware values are converted first."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _parse_datetime(value, field_name: str, label: str) -> datetime:
    """
    Parse a form date-time into naive local time.

    The booking service takes local date-times without an offset.
    """
    if isinstance(value, datetime):
        return _to_local(value)
    try:
        return _to_local(datetime.fromisoformat(value.strip()))
    except (AttributeError, ValueError):
        raise DraftValidationError(f"{label} is not a valid date and time", field_name)


class ReservationDraftValidator:
    """
    Validates reservation drafts before submission.

    A draft passes when branch, start, end and at least one item are set,
    start is before end, both lie in the future, and every quantity is a
    positive integer within what the item's rental mode admits.

    Example:
        validator = ReservationDraftValidator()
        request = validator.validate(draft, items={item.id: item for item in items})
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            clock: Returns the current time (default: local ``datetime.now``)
        """
        self.clock = clock or datetime.now

    def check_required(self, draft: ReservationDraft) -> None:
        """Raise unless branch, start, end and at least one item are filled in."""
        for name in ("branch_id", "start_at", "end_at"):
            if _is_blank(getattr(draft, name)):
                raise DraftValidationError(REQUIRED_FIELDS_MESSAGE, name)

        if not draft.lines or all(_is_blank(line.item_id) for line in draft.lines):
            raise DraftValidationError(REQUIRED_FIELDS_MESSAGE, "item_id")

    def validate(
        self,
        draft: ReservationDraft,
        items: Optional[Mapping[int, Item]] = None,
    ) -> CreateReservationRequest:
        """
        Build a creation request from a draft.

        Args:
            draft: Raw form state
            items: Items loaded for the selected branch, keyed by id. When
                given, each line's item must be among them and its quantity
                must not exceed the item's rental-mode limit, summed over lines.

        Returns:
            Well-formed CreateReservationRequest

        Raises:
            DraftValidationError: First problem found, with the field name
        """
        try:
            return self._validate(draft, items)
        except DraftValidationError as e:
            logger.warning(f"Reservation draft rejected ({e.field}): {e.message}")
            raise

    def _validate(self, draft, items) -> CreateReservationRequest:
        self.check_required(draft)

        branch_id = _parse_positive_int(draft.branch_id, "branch_id", "Branch")
        start_at = _parse_datetime(draft.start_at, "start_at", "Start")
        end_at = _parse_datetime(draft.end_at, "end_at", "End")

        if start_at >= end_at:
            raise DraftValidationError("Start must be before end", "end_at")

        now = _to_local(self.clock())
        if start_at <= now:
            raise DraftValidationError("Start must be in the future", "start_at")
        if end_at <= now:
            raise DraftValidationError("End must be in the future", "end_at")

        lines = []
        requested: Dict[int, int] = {}
        for line in draft.lines:
            # Blank rows are unused form slots
            if _is_blank(line.item_id):
                continue

            item_id = _parse_positive_int(line.item_id, "item_id", "Item")
            quantity_raw = "1" if _is_blank(line.quantity) else line.quantity
            quantity = _parse_positive_int(quantity_raw, "quantity", "Quantity")
            # Limits apply per item across all lines
            requested[item_id] = requested.get(item_id, 0) + quantity

            if items is not None:
                item = items.get(item_id)
                if item is None:
                    raise DraftValidationError(
                        f"Item {item_id} is not offered at the selected branch", "item_id"
                    )
                limit = item.max_quantity
                if limit is not None and requested[item_id] > limit:
                    raise DraftValidationError(
                        f"{item.name} admits at most {limit} per reservation", "quantity"
                    )

            lines.append(ReservationLineRequest(item_id=item_id, quantity=quantity))

        return CreateReservationRequest(
            branch_id=branch_id,
            start_at=start_at,
            end_at=end_at,
            lines=lines,
        )
