"""Walks a paginated listing end to end.

Used where the UI needs the whole set rather than one page (client-side
filtering and search). The walk is paced and capped: the upstream is shared
and rate limited, so the result is best-effort complete and always reported
together with the server's true `count`.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from ganjoorcli.domain.events.api_events import DomainEvent, PageFetched, log_event
from ganjoorcli.domain.models.catalog import CrawlResult, Page
from ganjoorcli.infrastructure.resilience.retry_policy import Sleeper

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[int], Awaitable[Page[T]]]

DEFAULT_PAGE_DELAY_SECONDS = 0.2
DEFAULT_MAX_PAGES = 10


class CollectionCrawler:
    """Accumulates every page of a listing, following `next` until it is null."""

    def __init__(
        self,
        page_delay_s: float = DEFAULT_PAGE_DELAY_SECONDS,
        max_pages: int = DEFAULT_MAX_PAGES,
        sleep: Sleeper = asyncio.sleep,
        event_listener: Callable[[DomainEvent], None] = log_event,
    ):
        """Initializes the crawler.

        Args:
            page_delay_s: Pause before every request after the first.
            max_pages: Hard ceiling on requests per crawl.
            sleep: Awaitable sleep used for pacing (inject a fake in tests).
            event_listener: Receives a PageFetched event per page.
        """
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.page_delay_s = page_delay_s
        self.max_pages = max_pages
        self._sleep = sleep
        self._dispatch = event_listener

    async def crawl(self, fetch_page: PageFetcher, into: Optional[List[T]] = None) -> CrawlResult[T]:
        """Fetches pages 1, 2, ... and concatenates their results in order.

        Args:
            fetch_page: Coroutine function returning the given 1-based page,
                already bound to whatever filters the caller wants.
            into: Optional accumulator. Items are appended to it as pages
                arrive, so a caller that catches a failure can still use
                what was collected up to that point.

        Returns:
            The accumulated items, the server-reported count and whether the
            page ceiling cut the walk short.

        Raises:
            ApiError: Whatever the page fetch raised; the crawl is aborted.
        """
        items: List[T] = into if into is not None else []
        count = 0
        page_number = 0
        has_next = True

        while has_next and page_number < self.max_pages:
            if page_number > 0:
                await self._sleep(self.page_delay_s)
            page_number += 1

            page = await fetch_page(page_number)
            if page_number == 1:
                count = page.count
            items.extend(page.results)
            has_next = page.has_next

            logger.debug(
                f"Crawl page {page_number}: {len(page.results)} items, "
                f"{len(items)}/{count} accumulated, next={'yes' if has_next else 'no'}"
            )
            self._dispatch(PageFetched(
                page_number=page_number, items_on_page=len(page.results),
                accumulated=len(items), total_count=count, has_next=has_next,
            ))

        truncated = has_next
        if truncated:
            logger.warning(
                f"Crawl stopped at the {self.max_pages}-page ceiling with {len(items)} of {count} items."
            )
        else:
            logger.info(f"Crawl finished: {len(items)} items in {page_number} pages.")

        return CrawlResult(items=items, count=count, pages_fetched=page_number, truncated=truncated)
