"""
Command dispatcher tying the selection engine together.

UI events arrive as commands (``PageChanged``, ``SelectionEdited``,
``BulkSelectRequested``, ``SubmitRequested``) and are applied one at a time
under a lock, so the selection store and the fetched-record cache are
never mutated concurrently. A bulk select issued while another one is
running waits for it and then reuses the warm cache.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from .bulk import BulkSelector, BulkSelectResult, InvalidCountError
from .database import SubmissionError
from .fetcher import IncrementalFetcher, PageFetcher
from .logger import get_logger
from .models import Page, Record
from .notify import Notifier
from .selection import Reconciler, SelectionStore
from .source import PageFetchError

logger = get_logger()


@dataclass(frozen=True)
class PageChanged:
    page: int


@dataclass(frozen=True)
class SelectionEdited:
    """The complete set of checked rows on the current page (not a delta)."""

    records: Sequence[Record]


@dataclass(frozen=True)
class BulkSelectRequested:
    count: Any


@dataclass(frozen=True)
class SubmitRequested:
    pass


Command = Union[PageChanged, SelectionEdited, BulkSelectRequested, SubmitRequested]


@dataclass
class ViewState:
    page: int
    total_pages: int
    total_records: int
    first_row: int
    rows: List[Record] = field(default_factory=list)
    checked_ids: List[int] = field(default_factory=list)
    total_selected: int = 0
    loading: bool = False
    bulk_loading: bool = False


class SelectionSession:
    """
    Owns the selection state of one user session over a paginated source.

    Args:
        source: Anything with ``fetch(page) -> Page``
        store: Selection store to use (default: a fresh empty one)
        notifier: Receives user-facing messages (default: a collecting Notifier)
        submit_sink: Called with the selected records on submit; its return
            value is passed back from ``dispatch(SubmitRequested())``. A
            ``SubmissionError`` it raises is reported, not propagated
        page_size: Rows per page, used for the first-row offset
    """

    def __init__(
        self,
        source: PageFetcher,
        store: Optional[SelectionStore] = None,
        notifier: Optional[Notifier] = None,
        submit_sink: Optional[Callable[[List[Record]], Any]] = None,
        page_size: int = 10,
    ):
        self.source = source
        self.store = store if store is not None else SelectionStore()
        self.notifier = notifier if notifier is not None else Notifier()
        self.submit_sink = submit_sink
        self.page_size = page_size

        self.reconciler = Reconciler(self.store)
        self.fetcher = IncrementalFetcher(source, on_busy=self._set_bulk_loading)
        self.bulk = BulkSelector(self.store, self.fetcher, self.reconciler)

        self.page = 1
        self.total_pages = 0
        self.total_records = 0
        self.loading = False
        self.bulk_loading = False
        self._lock = threading.Lock()

    def _set_bulk_loading(self, busy: bool) -> None:
        self.bulk_loading = busy

    def dispatch(self, command: Command) -> Any:
        """Apply one command. Fetch and input errors are reported, never raised."""
        with self._lock:
            if isinstance(command, PageChanged):
                return self._on_page_changed(command.page)
            if isinstance(command, SelectionEdited):
                return self._on_selection_edited(command.records)
            if isinstance(command, BulkSelectRequested):
                return self._on_bulk_select(command.count)
            if isinstance(command, SubmitRequested):
                return self._on_submit()
        raise TypeError(f"Unknown command: {command!r}")

    def _on_page_changed(self, page: int) -> Optional[Page]:
        self.loading = True
        try:
            loaded = self.source.fetch(page)
        except PageFetchError as e:
            # Keep showing the previous page; the selection is untouched.
            logger.error("Error fetching page", page=page, error=str(e))
            self.notifier.show("error", "Fetch Failed", str(e))
            return None
        finally:
            self.loading = False

        self.page = page
        self.total_pages = loaded.total_pages
        self.total_records = loaded.total_records
        self.reconciler.on_page_loaded(loaded)
        return loaded

    def _on_selection_edited(self, records: Sequence[Record]) -> List[Record]:
        return self.reconciler.on_manual_selection_change(records, self.reconciler.page_records)

    def _on_bulk_select(self, count: Any) -> Optional[BulkSelectResult]:
        try:
            result = self.bulk.select_top_n(count)
        except InvalidCountError as e:
            logger.warning("Rejected bulk selection", count=str(count), error=str(e))
            self.notifier.show("warn", "Invalid Number", "Please enter a positive number")
            return None

        if result.error is not None:
            self.notifier.show(
                "warn",
                "Partial Selection",
                f"Only {result.available} of {result.requested} rows could be fetched: {result.error}",
            )
        self.notifier.show(
            "success",
            "Selection Updated",
            f"Selected top {result.total_selected} rows (global)",
        )
        return result

    def _on_submit(self) -> Any:
        total = self.store.size()
        self.notifier.show("info", "Selected Artworks", f"{total} rows selected")
        if self.submit_sink is None:
            return None
        try:
            return self.submit_sink(self.selected_records())
        except SubmissionError as e:
            logger.error("Error saving submission", selected=total, error=str(e))
            self.notifier.show("error", "Submit Failed", str(e))
            return None

    def selected_records(self) -> List[Record]:
        """Selected records ordered by id."""
        snapshot = self.store.snapshot()
        return [snapshot[k] for k in sorted(snapshot)]

    def records_for_ids(self, ids: Iterable[int]) -> List[Record]:
        """Map ids to rows of the current page, dropping ids that are not on it."""
        by_id: Dict[int, Record] = {r.id: r for r in self.reconciler.page_records}
        return [by_id[i] for i in ids if i in by_id]

    def view(self) -> ViewState:
        return ViewState(
            page=self.page,
            total_pages=self.total_pages,
            total_records=self.total_records,
            first_row=(self.page - 1) * self.page_size,
            rows=list(self.reconciler.page_records),
            checked_ids=[r.id for r in self.reconciler.visible_selection],
            total_selected=self.store.size(),
            loading=self.loading,
            bulk_loading=self.bulk_loading,
        )
