"""Follow `next` references until a collection is exhausted."""

import logging
from collections.abc import AsyncIterator

from applemusic_client.domain.resources import ResourceT, ResponseEnvelope
from applemusic_client.infrastructure.integrations.auth_context import (
    AuthContext,
    RequestDescriptor,
)
from applemusic_client.infrastructure.integrations.dispatcher import RequestDispatcher
from applemusic_client.infrastructure.observability.logger_template import log_operation

logger = logging.getLogger(__name__)


class Paginator:
    """Aggregates every page of a collection endpoint.

    Hey future me - this is a plain loop, not recursion. A library with 20k songs is
    ~200 pages and must not grow the stack. Pages are fetched strictly one after the
    other (each URL comes from the previous page), and every page goes through the
    dispatcher, so a 429 on page 37 is retried transparently.

    Failure is all-or-nothing for fetch_all_pages(): if any page fails the error
    propagates and the items collected so far are dropped. Use iter_pages() if you
    want to keep partial results.
    """

    def __init__(self, dispatcher: RequestDispatcher, auth: AuthContext) -> None:
        self._dispatcher = dispatcher
        self._auth = auth

    @property
    def auth(self) -> AuthContext:
        return self._auth

    @auth.setter
    def auth(self, auth: AuthContext) -> None:
        # Swapped by the client once the storefront is resolved
        self._auth = auth

    async def iter_pages(
        self,
        descriptor: RequestDescriptor,
        resource_model: type[ResourceT],
    ) -> AsyncIterator[ResponseEnvelope[ResourceT]]:
        """Yield each page envelope in server order.

        Follow-up pages are always GET requests, authenticated at the same level
        as the first request.

        Args:
            descriptor: Request for the first page
            resource_model: Resource type of the collection (e.g. LibrarySong)

        Yields:
            One decoded envelope per page
        """
        envelope_model = ResponseEnvelope[resource_model]  # type: ignore[valid-type]
        current: RequestDescriptor | None = descriptor
        page = 0

        while current is not None:
            envelope = await self._dispatcher.dispatch(current, envelope_model)
            page += 1
            logger.debug(
                "Fetched page %d of %s (%d items, next=%s)",
                page,
                resource_model.__name__,
                len(envelope.data),
                envelope.next,
            )
            yield envelope

            if envelope.next:
                current = self._auth.build_request(
                    self._auth.resolve_next(envelope.next),
                    method="GET",
                    requires_user_access=descriptor.requires_user_access,
                )
            else:
                current = None

    async def fetch_all_pages(
        self,
        descriptor: RequestDescriptor,
        resource_model: type[ResourceT],
    ) -> list[ResourceT]:
        """Fetch every page and concatenate the items in server order.

        Args:
            descriptor: Request for the first page
            resource_model: Resource type of the collection (e.g. LibrarySong)

        Returns:
            All items of all pages (empty list if the first page is empty)

        Raises:
            TransportError, HttpStatusError, DecodeError: From any page; nothing
                is returned in that case
        """
        items: list[ResourceT] = []
        async with log_operation(
            logger,
            "fetch_all_pages",
            resource=resource_model.__name__,
            url=descriptor.url,
        ) as summary:
            pages = 0
            async for envelope in self.iter_pages(descriptor, resource_model):
                items.extend(envelope.data)
                pages += 1
            summary["pages"] = pages
            summary["items"] = len(items)
        return items


__all__ = ["Paginator"]
