"""
Incremental fetcher backing bulk selection.

Pages are requested strictly one after another because the pagination
metadata of page k decides whether page k+1 is needed. Fetched records are
cached (deduplicated by id, fetch order kept) for the whole session.
"""

from typing import Callable, List, Optional, Protocol, Set

from .logger import get_logger
from .models import Page, Record
from .source import PageFetchError

logger = get_logger()


class PageFetcher(Protocol):
    def fetch(self, page: int) -> Page:
        ...


class IncrementalFetcher:
    """Accumulates distinct records across sequential page fetches."""

    def __init__(self, source: PageFetcher, on_busy: Optional[Callable[[bool], None]] = None):
        self.source = source
        self.on_busy = on_busy
        self._cache: List[Record] = []
        self._seen: Set[int] = set()
        self.next_page = 1
        self.exhausted = False
        self.last_error: Optional[PageFetchError] = None

    @property
    def cache(self) -> List[Record]:
        return list(self._cache)

    def __len__(self) -> int:
        return len(self._cache)

    def _set_busy(self, busy: bool) -> None:
        if self.on_busy is not None:
            self.on_busy(busy)

    def _absorb(self, page: Page) -> int:
        added = 0
        for record in page.records:
            if record.id in self._seen:
                continue
            self._seen.add(record.id)
            self._cache.append(record)
            added += 1
        return added

    def ensure_at_least(self, n: int) -> List[Record]:
        """
        Make sure at least ``n`` distinct records are cached, fetching more pages if needed.

        Fetching resumes at the first page not yet fetched and stops once the
        cache holds ``n`` records or the source reports its last page. A fetch
        error stops the loop and whatever is cached so far is returned; the
        failed page is requested again on the next call.

        Args:
            n: Number of records wanted

        Returns:
            The cached records in fetch order (fewer than ``n`` if the collection
            is smaller or a fetch failed)
        """
        self.last_error = None
        if len(self._cache) >= n or self.exhausted:
            return self.cache

        self._set_busy(True)
        try:
            while len(self._cache) < n:
                page_number = self.next_page
                try:
                    page = self.source.fetch(page_number)
                except PageFetchError as e:
                    self.last_error = e
                    logger.error(
                        "Bulk fetch aborted",
                        page=page_number,
                        cached=len(self._cache),
                        wanted=n,
                        error=str(e),
                    )
                    break

                added = self._absorb(page)
                logger.debug(
                    "Fetched page for bulk selection",
                    page=page_number,
                    received=len(page.records),
                    new=added,
                    cached=len(self._cache),
                )

                if page.pagination.is_last:
                    self.exhausted = True
                    break
                self.next_page = page_number + 1
        finally:
            self._set_busy(False)

        return self.cache
