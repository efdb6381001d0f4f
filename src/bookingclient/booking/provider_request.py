"""
Provider-request lifecycle as seen by the requesting user, and the admin
review queue.

Status changes happen on the server (an admin approves or rejects); the
client reads and displays them. A granted PROVIDER role only shows up in
the session after the next login.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from loguru import logger

from ..errors import ApiError, ProviderRequestStateError
from ..models import ProviderRequest, ProviderRequestStatus
from ..network.sequencing import LatestOnly, StaleResponse
from ..network.services import ProviderRequestApi


class ProviderRequestState(str, Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Action(str, Enum):
    SUBMIT = "submit"
    VIEW = "view"


ALLOWED_ACTIONS: Dict[ProviderRequestState, FrozenSet[Action]] = {
    ProviderRequestState.NONE: frozenset({Action.SUBMIT}),
    ProviderRequestState.PENDING: frozenset({Action.VIEW}),
    ProviderRequestState.APPROVED: frozenset({Action.VIEW}),
    ProviderRequestState.REJECTED: frozenset({Action.VIEW}),
}

STATUS_MESSAGES: Dict[ProviderRequestState, str] = {
    ProviderRequestState.NONE: "You have not requested a provider account yet.",
    ProviderRequestState.PENDING: "Your request is being reviewed by an administrator.",
    ProviderRequestState.APPROVED: "Your request was approved. Log out and back in to open your provider panel.",
    ProviderRequestState.REJECTED: "Your request was rejected. Contact support for more information.",
}


def state_of(request: Optional[ProviderRequest]) -> ProviderRequestState:
    if request is None:
        return ProviderRequestState.NONE
    return ProviderRequestState(request.status.value)


class ProviderRequestTracker:
    """
    Tracks the current user's provider request.

    NONE -> PENDING happens through ``submit``; PENDING -> APPROVED/REJECTED
    is observed through ``refresh``. APPROVED and REJECTED are terminal for
    display purposes.
    """

    def __init__(self, api: ProviderRequestApi, session):
        self.api = api
        self.session = session
        self.request: Optional[ProviderRequest] = None
        self.state = ProviderRequestState.NONE

    @property
    def already_provider(self) -> bool:
        return self.session.has_role("PROVIDER")

    def allows(self, action: Action) -> bool:
        return action in ALLOWED_ACTIONS[self.state]

    @property
    def can_submit(self) -> bool:
        return not self.already_provider and self.allows(Action.SUBMIT)

    @property
    def status_message(self) -> str:
        if self.already_provider:
            return "You are already a provider."
        return STATUS_MESSAGES[self.state]

    async def refresh(self) -> ProviderRequestState:
        self.request = await self.api.mine()
        self.state = state_of(self.request)
        logger.debug(f"Provider request state: {self.state.value}")
        return self.state

    async def submit(self) -> ProviderRequestState:
        """
        File a provider request.

        Raises:
            ProviderRequestStateError: Already a provider, or a request exists
            ApiError: Server refused (e.g. a request is already pending)
        """
        if self.already_provider:
            raise ProviderRequestStateError("You are already a provider")
        if not self.allows(Action.SUBMIT):
            raise ProviderRequestStateError(
                f"A provider request already exists ({self.state.value.lower()})"
            )

        await self.api.submit()
        logger.info("Provider request submitted")

        await self.refresh()
        if self.state == ProviderRequestState.NONE:
            # Accepted, but not visible yet
            self.state = ProviderRequestState.PENDING
        return self.state


class ProviderRequestReview:
    """
    Admin view over provider requests, filtered by status.

    Switching filters quickly never lets an older listing overwrite the
    newer one.
    """

    def __init__(self, api: ProviderRequestApi):
        self.api = api
        self.status_filter: Optional[ProviderRequestStatus] = ProviderRequestStatus.PENDING
        self.requests: List[ProviderRequest] = []
        self.error: Optional[str] = None
        self._listing = LatestOnly("provider-request review")

    async def load(self, status_filter: Optional[ProviderRequestStatus] = ...) -> List[ProviderRequest]:
        """
        (Re)load the list.

        Args:
            status_filter: New filter; None lists every status, omitted
                keeps the current filter
        """
        if status_filter is not ...:
            self.status_filter = status_filter

        self.error = None
        try:
            requests = await self._listing.run(self.api.list_requests(self.status_filter))
        except StaleResponse:
            return self.requests
        except ApiError as e:
            self.error = e.message
            raise

        self.requests = requests
        return self.requests

    async def approve(self, request_id: int) -> List[ProviderRequest]:
        await self._decide(request_id, approve=True)
        return await self.load()

    async def reject(self, request_id: int) -> List[ProviderRequest]:
        await self._decide(request_id, approve=False)
        return await self.load()

    async def _decide(self, request_id: int, approve: bool) -> None:
        self.error = None
        try:
            if approve:
                await self.api.approve(request_id)
            else:
                await self.api.reject(request_id)
        except ApiError as e:
            self.error = e.message
            raise
        logger.info(f"Provider request {request_id} {'approved' if approve else 'rejected'}")
