"""
Single outbound HTTP path for the booking client.

Every call to the platform goes through ``ApiGateway.request``: it attaches
the bearer token, serializes the body, and turns anything other than a
successful response into an ``ApiError``. There is no automatic retry.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from ..errors import AuthError, ServerRejection, TransportFailure
from ..models import WireModel


# Keys probed, in order, for a human-readable message in an error body
ERROR_MESSAGE_KEYS = ("detail", "message", "error")


def extract_error_message(status: int, reason: Optional[str], body: str) -> str:
    """
    Pull the server's message out of an error body.

    Args:
        status: HTTP status code
        reason: HTTP reason phrase
        body: Raw response text

    Returns:
        Server-supplied message, or ``"Error <status>: <reason>"``
    """
    try:
        data = json.loads(body) if body else None
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ERROR_MESSAGE_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value

    return f"Error {status}: {reason or ''}".rstrip()


def _serialize(body: Any) -> Any:
    if isinstance(body, WireModel):
        return body.to_wire()
    if isinstance(body, list):
        return [_serialize(b) for b in body]
    return body


class ApiGateway:
    """
    Non-blocking HTTP client bound to one session.

    Example:
        async with ApiGateway(session, "http://localhost:8080") as api:
            branches = await api.request("/api/catalog/branches")
    """

    def __init__(
        self,
        session,
        base_url: str,
        timeout: float = 15.0,
        logout_on_unauthorized: bool = True,
        http: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize gateway.

        Args:
            session: SessionService providing the bearer token
            base_url: Default base URL for relative endpoints
            timeout: Total per-request timeout in seconds
            logout_on_unauthorized: Log out when an authenticated call gets 401
            http: Existing aiohttp session to use (not closed by ``close()``)
        """
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logout_on_unauthorized = logout_on_unauthorized
        self._http = http
        self._owns_http = http is None

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _client(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        if self._http is not None and self._owns_http and not self._http.closed:
            await self._http.close()
        self._http = None

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        requires_auth: bool = False,
        params: Optional[Dict[str, Any]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """
        Perform one request.

        Args:
            endpoint: Path starting with ``/``
            method: HTTP method
            body: JSON body (dict, list or WireModel); ignored for GET
            requires_auth: Attach ``Authorization: Bearer`` if a token exists
            params: Query parameters; None values are dropped
            base_url: Override the gateway base URL (e.g. auth service)

        Returns:
            Decoded JSON, or None for 204 / empty responses

        Raises:
            AuthError: 401 or 403
            ServerRejection: Any other non-2xx status
            TransportFailure: No usable response
        """
        method = method.upper()
        url = f"{(base_url or self.base_url).rstrip('/')}{endpoint}"

        headers = {"Content-Type": "application/json"}
        sent_token = False
        if requires_auth:
            token = self.session.token
            if token:
                headers["Authorization"] = f"Bearer {token}"
                sent_token = True
            else:
                logger.debug(f"{method} {endpoint}: no token, sending without Authorization")

        payload = None
        if body is not None and method != "GET":
            payload = json.dumps(_serialize(body))

        query = None
        if params:
            query = {k: str(v) for k, v in params.items() if v is not None and v != ""}

        logger.debug(f"{method} {url} params={query}")

        try:
            async with self._client().request(
                method, url, data=payload, headers=headers, params=query
            ) as response:
                status = response.status
                reason = response.reason
                text = await response.text()
        except asyncio.TimeoutError:
            logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise TransportFailure(f"Request to {endpoint} timed out")
        except aiohttp.ClientError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportFailure(f"Could not reach server: {e}") from e

        logger.debug(f"{method} {url} -> {status}")

        if not 200 <= status < 300:
            message = extract_error_message(status, reason, text)
            logger.error(f"API request error: {method} {endpoint} -> {status}: {message}")

            if status in (401, 403):
                if status == 401 and sent_token and self.logout_on_unauthorized:
                    logger.warning("Session rejected by server; logging out")
                    self.session.logout()
                raise AuthError(message, status)
            raise ServerRejection(message, status)

        if status == 204 or not text.strip():
            return None

        try:
            return json.loads(text)
        except ValueError as e:
            logger.error(f"{method} {endpoint}: response is not JSON: {e}")
            raise TransportFailure(f"Malformed response from server ({status})") from e

