"""
Typed facades over the platform's REST surface.

Each facade is a thin mapping from a method to one gateway request plus
response parsing. Route and auth requirements live here and nowhere else.
"""

import asyncio
from typing import Any, List, Optional, Tuple, Type, TypeVar

from loguru import logger
from pydantic import ValidationError

from ..errors import DraftValidationError, TransportFailure
from ..models import (
    AuthResponse,
    Branch,
    CreateBranchRequest,
    CreateReservationRequest,
    CreateRoomRequest,
    Item,
    ItemType,
    LoginRequest,
    ProviderRequest,
    ProviderRequestStatus,
    RegisterRequest,
    Reservation,
    WireModel,
)
from .gateway import ApiGateway


M = TypeVar("M", bound=WireModel)


def _parse(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Unexpected {model.__name__} payload: {e}")
        raise TransportFailure(f"Unexpected response from server ({model.__name__})") from e


def _parse_list(model: Type[M], data: Any) -> List[M]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise TransportFailure(f"Unexpected response from server (expected a list of {model.__name__})")
    return [_parse(model, entry) for entry in data]


class AuthApi:
    """Login and registration against the authentication service."""

    def __init__(self, gateway: ApiGateway, session, auth_base_url: str):
        self.gateway = gateway
        self.session = session
        self.auth_base_url = auth_base_url

    async def login(self, username: str, password: str):
        """
        Exchange credentials for a token and start the session.

        Returns:
            The new Session snapshot
        """
        username = (username or "").strip()
        if not username or not password:
            raise DraftValidationError("Username and password are required")

        data = await self.gateway.request(
            "/auth/login",
            method="POST",
            body=LoginRequest(username=username, password=password),
            base_url=self.auth_base_url,
        )
        response = _parse(AuthResponse, data)
        return self.session.login(response.token, username)

    async def register(self, request: RegisterRequest):
        """
        Create an account and start its session.

        Args:
            request: Validated registration (see ``booking.forms.validate_registration``)
        """
        data = await self.gateway.request(
            "/auth/register",
            method="POST",
            body=request,
            base_url=self.auth_base_url,
        )
        response = _parse(AuthResponse, data)
        logger.info(f"Registered {request.username} as {request.role_type.value}")
        return self.session.login(response.token, request.username)


class CatalogApi:
    """Public catalog plus the provider's own branch management."""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    async def list_branches(self) -> List[Branch]:
        return _parse_list(Branch, await self.gateway.request("/api/catalog/branches"))

    async def list_items(
        self,
        branch_id: Optional[int] = None,
        item_type: Optional[ItemType] = None,
    ) -> List[Item]:
        params = {
            "branchId": branch_id,
            "type": item_type.value if item_type else None,
        }
        data = await self.gateway.request("/api/catalog/items", params=params)
        return _parse_list(Item, data)

    async def load_home(self) -> Tuple[List[Branch], List[Item]]:
        """Fetch branches and the unfiltered item list concurrently."""
        branches, items = await asyncio.gather(self.list_branches(), self.list_items())
        return branches, items

    # ========================================================================
    # Provider-owned branches (PROVIDER role)
    # ========================================================================

    async def my_branches(self) -> List[Branch]:
        data = await self.gateway.request("/api/catalog/provider/branches", requires_auth=True)
        return _parse_list(Branch, data)

    async def create_branch(self, request: CreateBranchRequest) -> Branch:
        data = await self.gateway.request(
            "/api/catalog/provider/branches",
            method="POST",
            body=request,
            requires_auth=True,
        )
        return _parse(Branch, data)

    async def update_branch(self, branch_id: int, request: CreateBranchRequest) -> Branch:
        data = await self.gateway.request(
            f"/api/catalog/provider/branches/{branch_id}",
            method="PUT",
            body=request,
            requires_auth=True,
        )
        return _parse(Branch, data)

    async def delete_branch(self, branch_id: int) -> None:
        await self.gateway.request(
            f"/api/catalog/provider/branches/{branch_id}",
            method="DELETE",
            requires_auth=True,
        )

    async def create_room(self, branch_id: int, request: CreateRoomRequest) -> Item:
        data = await self.gateway.request(
            f"/api/catalog/provider/branches/{branch_id}/rooms",
            method="POST",
            body=request,
            requires_auth=True,
        )
        return _parse(Item, data)


class BookingApi:
    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    async def my_reservations(self) -> List[Reservation]:
        data = await self.gateway.request("/api/booking/my/reservations", requires_auth=True)
        return _parse_list(Reservation, data)

    async def create_reservation(self, request: CreateReservationRequest) -> Reservation:
        data = await self.gateway.request(
            "/api/booking/reservations",
            method="POST",
            body=request,
            requires_auth=True,
        )
        return _parse(Reservation, data)


class ProviderRequestApi:
    """Provider upgrade requests: the user's own, and the admin review queue."""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    async def submit(self) -> Optional[int]:
        """
        File a provider request for the current user.

        Returns:
            Id of the created request, if the server reported one
        """
        data = await self.gateway.request("/auth/provider-requests", method="POST", requires_auth=True)
        if isinstance(data, dict) and isinstance(data.get("id"), int):
            return data["id"]
        return None

    async def mine(self) -> Optional[ProviderRequest]:
        """
        Current user's request, or None if they never filed one.

        The server answers a bare ``{"message": ...}`` when there is none.
        """
        data = await self.gateway.request("/auth/provider-requests/me", requires_auth=True)
        if not isinstance(data, dict) or "status" not in data:
            return None
        return _parse(ProviderRequest, data)

    async def list_requests(self, status: Optional[ProviderRequestStatus] = None) -> List[ProviderRequest]:
        data = await self.gateway.request(
            "/admin/provider-requests",
            params={"status": status.value if status else None},
            requires_auth=True,
        )
        return _parse_list(ProviderRequest, data)

    async def approve(self, request_id: int) -> None:
        await self.gateway.request(
            f"/admin/provider-requests/{request_id}/approve", method="POST", requires_auth=True
        )

    async def reject(self, request_id: int) -> None:
        await self.gateway.request(
            f"/admin/provider-requests/{request_id}/reject", method="POST", requires_auth=True
        )
