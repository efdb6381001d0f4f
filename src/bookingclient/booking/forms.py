"""
Validation for the account and provider-panel forms.
"""

import math
from typing import Union

from ..errors import DraftValidationError
from ..models import CreateBranchRequest, CreateRoomRequest, RegisterRequest, Role


MIN_PASSWORD_LENGTH = 6

# Roles a user may pick when registering
REGISTRABLE_ROLES = (Role.USER, Role.PROVIDER)


def _required(value, field_name: str, message: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise DraftValidationError(message, field_name)
    return text


def validate_registration(
    username: str,
    email: str,
    password: str,
    role_type: Union[str, Role] = Role.USER,
) -> RegisterRequest:
    if not (username or "").strip() or not (email or "").strip() or not password:
        raise DraftValidationError("Please fill in all fields")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise DraftValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "password"
        )

    try:
        role = Role(role_type.upper() if isinstance(role_type, str) else role_type)
    except ValueError:
        role = None
    if role not in REGISTRABLE_ROLES:
        raise DraftValidationError("Account type must be USER or PROVIDER", "role_type")

    return RegisterRequest(
        username=username.strip(),
        email=email.strip(),
        password=password,
        role_type=role,
    )


def validate_branch(name: str, address: str) -> CreateBranchRequest:
    return CreateBranchRequest(
        name=_required(name, "name", "Branch name is required"),
        address=_required(address, "address", "Branch address is required"),
    )


def validate_room(name: str, hourly_price) -> CreateRoomRequest:
    room_name = _required(name, "name", "Room name is required")
    try:
        price = float(hourly_price)
    except (TypeError, ValueError):
        raise DraftValidationError("Hourly price is required", "hourly_price")
    if not math.isfinite(price):
        raise DraftValidationError("Hourly price must be a finite number", "hourly_price")
    if price <= 0:
        raise DraftValidationError("Hourly price must be positive", "hourly_price")
    return CreateRoomRequest(name=room_name, hourly_price=price)
