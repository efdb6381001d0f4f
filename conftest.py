"""
Shared fixtures: token minting, a file-backed session, and a fake
platform backend served by aiohttp's test server.
"""

import asyncio
from typing import Dict, List, Optional

import jwt
import pytest
from aiohttp import web

from bookingclient.auth import SessionService, TokenStore
from bookingclient.client import BookingClient
from bookingclient.config import ClientConfig


TEST_SECRET = "test-signing-key"


def make_token(authorities=None, user_id=7, **extra) -> str:
    """Mint a signed token shaped like the auth service's."""
    payload = {"sub": "alice", "scope": "read write"}
    if authorities is not None:
        payload["authorities"] = authorities
    if user_id is not None:
        payload["userId"] = user_id
    payload.update(extra)
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def token_file(tmp_path):
    return tmp_path / "session.json"


@pytest.fixture
def session(token_file):
    return SessionService(TokenStore(token_file))


def _item(item_id, branch_id, name, item_type="ROOM", mode="TIME_EXCLUSIVE", quantity=1):
    return {
        "id": item_id,
        "branchId": branch_id,
        "name": name,
        "type": item_type,
        "rentalMode": mode,
        "basePrice": 25.0,
        "active": True,
        "quantityTotal": quantity,
    }


class FakePlatform:
    """
    In-process stand-in for the gateway and auth service.

    Records every request it receives; item listings for a branch can be
    held back until released, to reproduce out-of-order responses.
    """

    def __init__(self):
        self.requests: List[web.Request] = []
        self.bodies: List[Optional[dict]] = []
        self.branches = [
            {"id": 1, "name": "Centro", "address": "Main St 1", "active": True, "providerId": 3},
            {"id": 2, "name": "Norte", "address": "North Ave 9", "active": True, "providerId": 3},
        ]
        self.items = [
            _item(5, 1, "Room A"),
            _item(6, 1, "Stratocaster", "INSTRUMENT", "TIME_QUANTITY", 3),
            _item(7, 2, "Room B"),
        ]
        self.reservation_error: Optional[str] = None
        self.provider_request: Optional[dict] = None
        self.all_provider_requests: List[dict] = []
        self.hold: Dict[int, asyncio.Event] = {}
        self.received: Dict[int, asyncio.Event] = {}
        self.users = {"alice": ("secret", ["ROLE_USER"], 7)}

    def hold_items(self, branch_id: int) -> asyncio.Event:
        self.hold[branch_id] = asyncio.Event()
        self.received[branch_id] = asyncio.Event()
        return self.hold[branch_id]

    async def _record(self, request: web.Request) -> Optional[dict]:
        self.requests.append(request)
        body = await request.json() if request.can_read_body else None
        self.bodies.append(body)
        return body

    @staticmethod
    def _authorized(request: web.Request) -> bool:
        return request.headers.get("Authorization", "").startswith("Bearer ")

    # ------------------------------------------------------------------
    # Auth service
    # ------------------------------------------------------------------

    async def login(self, request):
        body = await self._record(request)
        user = self.users.get(body.get("username"))
        if user is None or user[0] != body.get("password"):
            return web.json_response({"message": "Invalid username or password"}, status=401)
        return web.json_response({"message": "ok", "token": make_token(user[1], user[2])})

    async def register(self, request):
        body = await self._record(request)
        if body["username"] in self.users:
            return web.json_response({"message": "Username already taken"}, status=400)
        role = "ROLE_PROVIDER" if body.get("roleType") == "PROVIDER" else "ROLE_USER"
        self.users[body["username"]] = (body["password"], [role], 42)
        return web.json_response({"message": "created", "token": make_token([role], 42)}, status=201)

    async def create_provider_request(self, request):
        await self._record(request)
        if not self._authorized(request):
            return web.json_response({"message": "Unauthorized"}, status=401)
        if self.provider_request is not None:
            return web.json_response({"message": "You already have a request"}, status=409)
        self.provider_request = {
            "id": 11, "userId": 7, "status": "PENDING", "createdAt": "2030-01-01T09:00:00",
        }
        self.all_provider_requests.append(self.provider_request)
        return web.json_response({"message": "Request created", "id": 11}, status=201)

    async def my_provider_request(self, request):
        await self._record(request)
        if self.provider_request is None:
            return web.json_response({"message": "No requests"})
        return web.json_response(self.provider_request)

    async def admin_list(self, request):
        await self._record(request)
        status = request.query.get("status")
        return web.json_response(
            [r for r in self.all_provider_requests if status is None or r["status"] == status]
        )

    async def admin_decide(self, request):
        await self._record(request)
        request_id = int(request.match_info["id"])
        for entry in self.all_provider_requests:
            if entry["id"] == request_id:
                if entry["status"] != "PENDING":
                    return web.json_response({"message": "Request already processed"}, status=409)
                entry["status"] = "APPROVED" if request.match_info["decision"] == "approve" else "REJECTED"
                return web.json_response({"message": "done"})
        return web.json_response({"message": "Not found"}, status=404)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_branches(self, request):
        await self._record(request)
        return web.json_response(self.branches)

    async def list_items(self, request):
        await self._record(request)
        branch_id = request.query.get("branchId")
        item_type = request.query.get("type")

        if branch_id is not None and int(branch_id) in self.hold:
            self.received[int(branch_id)].set()
            await self.hold[int(branch_id)].wait()

        items = [
            i for i in self.items
            if (branch_id is None or i["branchId"] == int(branch_id))
            and (item_type is None or i["type"] == item_type)
        ]
        return web.json_response(items)

    async def my_branches(self, request):
        await self._record(request)
        return web.json_response(self.branches)

    async def create_branch(self, request):
        body = await self._record(request)
        branch = {"id": len(self.branches) + 1, "active": True, "providerId": 3, **body}
        self.branches.append(branch)
        return web.json_response(branch, status=201)

    async def update_branch(self, request):
        body = await self._record(request)
        branch_id = int(request.match_info["id"])
        for branch in self.branches:
            if branch["id"] == branch_id:
                branch.update(body)
                return web.json_response(branch)
        return web.json_response({"message": "Branch not found"}, status=404)

    async def delete_branch(self, request):
        await self._record(request)
        branch_id = int(request.match_info["id"])
        self.branches = [b for b in self.branches if b["id"] != branch_id]
        return web.Response(status=204)

    async def create_room(self, request):
        body = await self._record(request)
        branch_id = int(request.match_info["id"])
        room = _item(100 + len(self.items), branch_id, body["name"])
        room["basePrice"] = body["hourlyPrice"]
        self.items.append(room)
        return web.json_response(room, status=201)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    async def create_reservation(self, request):
        body = await self._record(request)
        if not self._authorized(request):
            return web.json_response({"detail": "Full authentication is required"}, status=401)
        if self.reservation_error:
            return web.json_response(
                {"title": "Conflicto de reserva", "status": 409, "detail": self.reservation_error},
                status=409,
            )
        return web.json_response(
            {
                "id": 900,
                "customerId": "7",
                "branchId": body["branchId"],
                "startAt": body["startAt"],
                "endAt": body["endAt"],
                "status": "CONFIRMED",
                "createdAt": "2024-12-31T12:00:00",
                "lines": [
                    {"id": n + 1, "itemId": line["itemId"], "quantity": line["quantity"], "price": 25.0}
                    for n, line in enumerate(body["lines"])
                ],
            },
            status=201,
        )

    async def my_reservations(self, request):
        await self._record(request)
        if not self._authorized(request):
            return web.json_response({"detail": "Full authentication is required"}, status=401)
        return web.json_response([])

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/auth/login", self.login)
        app.router.add_post("/auth/register", self.register)
        app.router.add_post("/auth/provider-requests", self.create_provider_request)
        app.router.add_get("/auth/provider-requests/me", self.my_provider_request)
        app.router.add_get("/admin/provider-requests", self.admin_list)
        app.router.add_post("/admin/provider-requests/{id}/{decision}", self.admin_decide)
        app.router.add_get("/api/catalog/branches", self.list_branches)
        app.router.add_get("/api/catalog/items", self.list_items)
        app.router.add_get("/api/catalog/provider/branches", self.my_branches)
        app.router.add_post("/api/catalog/provider/branches", self.create_branch)
        app.router.add_put("/api/catalog/provider/branches/{id}", self.update_branch)
        app.router.add_delete("/api/catalog/provider/branches/{id}", self.delete_branch)
        app.router.add_post("/api/catalog/provider/branches/{id}/rooms", self.create_room)
        app.router.add_post("/api/booking/reservations", self.create_reservation)
        app.router.add_get("/api/booking/my/reservations", self.my_reservations)
        return app


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
async def platform_url(platform, aiohttp_server):
    server = await aiohttp_server(platform.app())
    return str(server.make_url("/")).rstrip("/")


@pytest.fixture
async def client(platform_url, session, token_file):
    config = ClientConfig(
        api_base_url=platform_url,
        auth_base_url=platform_url,
        token_file=token_file,
        timeout=5,
    )
    booking_client = BookingClient(config, session=session)
    yield booking_client
    await booking_client.close()
