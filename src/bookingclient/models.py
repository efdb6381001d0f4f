"""
Wire models for the booking platform.

Field names are snake_case in Python and camelCase on the wire; use
``to_wire()`` to produce a request body.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    """
    Platform roles.

    Tokens carry them as ``ROLE_<NAME>`` authorities.
    """
    USER = "USER"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"


ROLE_PREFIX = "ROLE_"


class ItemType(str, Enum):
    ROOM = "ROOM"
    INSTRUMENT = "INSTRUMENT"
    ACCESSORY = "ACCESSORY"
    OTHER = "OTHER"


class RentalMode(str, Enum):
    TIME_EXCLUSIVE = "TIME_EXCLUSIVE"   # one reservation per window, quantity 1
    TIME_QUANTITY = "TIME_QUANTITY"     # up to quantity_total units per window


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class ProviderRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ----------------------------------------------------------------------------
# Auth service
# ----------------------------------------------------------------------------

class LoginRequest(WireModel):
    username: str
    password: str


class RegisterRequest(WireModel):
    username: str
    email: str
    password: str
    role_type: Role = Role.USER


class AuthResponse(WireModel):
    token: str
    message: Optional[str] = None


class ProviderRequest(WireModel):
    id: int
    user_id: int
    status: ProviderRequestStatus
    created_at: Optional[datetime] = None


# ----------------------------------------------------------------------------
# Catalog service
# ----------------------------------------------------------------------------

class Branch(WireModel):
    id: int
    name: str
    address: str
    active: bool = True
    provider_id: Optional[int] = None


class Item(WireModel):
    id: int
    branch_id: int
    name: str
    type: ItemType
    rental_mode: RentalMode
    base_price: float
    active: bool = True
    quantity_total: Optional[int] = None

    @property
    def max_quantity(self) -> Optional[int]:
        """Largest quantity a single reservation line may request, None if unbounded."""
        if self.rental_mode == RentalMode.TIME_EXCLUSIVE:
            return 1
        return self.quantity_total


class CreateBranchRequest(WireModel):
    name: str
    address: str


class CreateRoomRequest(WireModel):
    name: str
    hourly_price: float


# ----------------------------------------------------------------------------
# Booking service
# ----------------------------------------------------------------------------

class ReservationLine(WireModel):
    id: int
    item_id: int
    quantity: int
    price: Optional[float] = None


class Reservation(WireModel):
    id: int
    customer_id: Optional[Union[int, str]] = None
    branch_id: int
    provider_id: Optional[int] = None
    start_at: datetime
    end_at: datetime
    status: ReservationStatus
    created_at: Optional[datetime] = None
    lines: List[ReservationLine] = Field(default_factory=list)


class ReservationLineRequest(WireModel):
    item_id: int
    quantity: int = 1


class CreateReservationRequest(WireModel):
    branch_id: int
    start_at: datetime
    end_at: datetime
    lines: List[ReservationLineRequest]
