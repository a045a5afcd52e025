"""Select the first N records of the whole collection, merging them into the selection."""

from dataclasses import dataclass
from typing import Any, List, Optional

from .fetcher import IncrementalFetcher
from .logger import get_logger
from .models import Record
from .selection import Reconciler, SelectionStore

logger = get_logger()


class InvalidCountError(ValueError):
    """Raised when a bulk-select count is not a positive integer."""


def parse_count(raw: Any) -> int:
    """
    Convert raw user input into a bulk-select count.

    Raises:
        InvalidCountError: If the input is not a positive integer
    """
    if isinstance(raw, bool):
        raise InvalidCountError(f"Count must be a positive integer, got {raw!r}")
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise InvalidCountError(f"Count must be a positive integer, got {raw!r}")
    if value <= 0:
        raise InvalidCountError(f"Count must be a positive integer, got {value}")
    return value


@dataclass
class BulkSelectResult:
    requested: int
    available: int
    newly_selected: int
    total_selected: int
    records: List[Record]
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        """True when fewer records than requested could be selected."""
        return self.available < self.requested


class BulkSelector:
    """Merges the top N fetched records into a SelectionStore (union, never reset)."""

    def __init__(
        self,
        store: SelectionStore,
        fetcher: IncrementalFetcher,
        reconciler: Optional[Reconciler] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.reconciler = reconciler

    def select_top_n(self, n: int) -> BulkSelectResult:
        """
        Select the first ``n`` records of the collection in fetch order.

        Records already selected stay selected. If the collection (or the
        fetch, on failure) yields fewer than ``n`` records, all of them are
        selected and the result reports the shortfall.

        Raises:
            InvalidCountError: If ``n`` is not a positive integer; nothing is fetched or changed
        """
        n = parse_count(n)

        records = self.fetcher.ensure_at_least(n)
        top = records[:n]

        newly_selected = 0
        for record in top:
            if not self.store.has(record.id):
                newly_selected += 1
            self.store.put(record)

        if self.reconciler is not None:
            self.reconciler.refresh()

        error = str(self.fetcher.last_error) if self.fetcher.last_error is not None else None
        logger.record_bulk_select(len(top))
        logger.info(
            "Bulk selection applied",
            requested=n,
            available=len(top),
            newly_selected=newly_selected,
            total_selected=self.store.size(),
        )
        return BulkSelectResult(
            requested=n,
            available=len(top),
            newly_selected=newly_selected,
            total_selected=self.store.size(),
            records=top,
            error=error,
        )
