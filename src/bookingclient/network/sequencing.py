"""
Latest-response-wins sequencing for repeated queries.

Requests are never cancelled; instead each logical query hands out
monotonically increasing tickets and a result is only accepted if its
ticket is still the newest one issued.
"""

from typing import Awaitable, TypeVar

from loguru import logger


T = TypeVar("T")


class StaleResponse(Exception):
    """A newer request for the same query was issued before this one finished."""

    def __init__(self, query: str, ticket: int, latest: int):
        self.query = query
        self.ticket = ticket
        self.latest = latest
        super().__init__(f"{query}: response #{ticket} superseded by #{latest}")


class LatestOnly:
    """
    Sequencer for one logical query (e.g. "items for the selected branch").

    Example:
        items_query = LatestOnly("items")
        try:
            items = await items_query.run(catalog.list_items(branch_id=3))
        except StaleResponse:
            return  # a newer selection owns the view
    """

    def __init__(self, query: str):
        self.query = query
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def invalidate(self) -> None:
        """Make every in-flight response stale without issuing a request."""
        self.issue()

    def is_latest(self, ticket: int) -> bool:
        return ticket == self._latest

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` under a fresh ticket.

        Raises:
            StaleResponse: If another ticket was issued meanwhile. Errors
                from superseded requests are reported as StaleResponse too.
        """
        ticket = self.issue()
        try:
            result = await awaitable
        except Exception as e:
            if not self.is_latest(ticket):
                logger.debug(f"{self.query}: dropping error from superseded request #{ticket}: {e}")
                raise StaleResponse(self.query, ticket, self._latest) from e
            raise

        if not self.is_latest(ticket):
            logger.debug(f"{self.query}: discarding stale response #{ticket} (latest #{self._latest})")
            raise StaleResponse(self.query, ticket, self._latest)
        return result
