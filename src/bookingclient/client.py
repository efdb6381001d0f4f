"""
Process-wide wiring of the booking client.

``BookingClient`` builds the session service once and hands the same
instance to the gateway, the guard and every workflow.
"""

from typing import Optional

from .auth import AuthorizationGuard, SessionService, TokenStore
from .booking import (
    ProviderPanel,
    ProviderRequestReview,
    ProviderRequestTracker,
    ReservationDraftValidator,
    ReservationForm,
)
from .config import ClientConfig
from .network import (
    ApiGateway,
    AuthApi,
    BookingApi,
    CatalogApi,
    ProviderRequestApi,
)


class BookingClient:
    """
    Entry point tying session, gateway and workflows together.

    Example:
        async with BookingClient(ClientConfig.from_env()) as client:
            await client.auth.login("alice", "secret")
            branches = await client.catalog.list_branches()
    """

    def __init__(self, config: Optional[ClientConfig] = None, session: Optional[SessionService] = None):
        self.config = config or ClientConfig.from_env()
        self.session = session or SessionService(TokenStore(self.config.token_file))
        self.gateway = ApiGateway(
            self.session,
            self.config.api_base_url,
            timeout=self.config.timeout,
            logout_on_unauthorized=self.config.logout_on_unauthorized,
        )
        self.guard = AuthorizationGuard(self.session)

        self.auth = AuthApi(self.gateway, self.session, self.config.auth_base_url)
        self.catalog = CatalogApi(self.gateway)
        self.booking = BookingApi(self.gateway)
        self.provider_requests = ProviderRequestApi(self.gateway)

    async def __aenter__(self) -> "BookingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.gateway.close()

    def logout(self) -> None:
        self.session.logout()

    # ========================================================================
    # Workflow factories
    # ========================================================================

    def reservation_form(self, validator: Optional[ReservationDraftValidator] = None) -> ReservationForm:
        return ReservationForm(self.catalog, self.booking, validator)

    def provider_request_tracker(self) -> ProviderRequestTracker:
        return ProviderRequestTracker(self.provider_requests, self.session)

    def provider_request_review(self) -> ProviderRequestReview:
        return ProviderRequestReview(self.provider_requests)

    def provider_panel(self) -> ProviderPanel:
        return ProviderPanel(self.catalog)
