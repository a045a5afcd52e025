"""
Page-independent selection state.

``SelectionStore`` is the authoritative set of selected records keyed by
identity. ``Reconciler`` maps it onto whatever page is on screen: it
derives the checked rows for a freshly loaded page and folds the table's
checked set back into the store when the user edits checkboxes.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from .logger import get_logger
from .models import Page, Record

logger = get_logger()


class SelectionStore:
    """Mapping of record id -> record for every globally selected record."""

    def __init__(self, records: Optional[Iterable[Record]] = None):
        self._records: Dict[int, Record] = {}
        for record in records or ():
            self.put(record)

    def put(self, record: Record) -> None:
        """Mark a record as selected. Re-putting an id replaces the stored record."""
        self._records[record.id] = record

    def delete(self, record_id: int) -> None:
        """Unselect a record id. Unknown ids are ignored."""
        self._records.pop(record_id, None)

    def has(self, record_id: int) -> bool:
        return record_id in self._records

    def size(self) -> int:
        return len(self._records)

    def snapshot(self) -> Dict[int, Record]:
        """Return a copy of the current mapping."""
        return dict(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __repr__(self) -> str:
        return f"SelectionStore(size={len(self._records)})"


class Reconciler:
    """Keeps the visible page's checked rows consistent with a SelectionStore."""

    def __init__(self, store: SelectionStore):
        self.store = store
        self.page_records: List[Record] = []
        self.visible_selection: List[Record] = []

    def on_page_loaded(self, page: Page) -> List[Record]:
        """
        Recompute the checked rows for a newly displayed page.

        Returns:
            Records of ``page`` whose ids are in the store, in page order
        """
        self.page_records = list(page.records)
        return self.refresh()

    def refresh(self) -> List[Record]:
        """Re-derive the checked rows of the current page from the store."""
        self.visible_selection = [r for r in self.page_records if self.store.has(r.id)]
        return list(self.visible_selection)

    def on_manual_selection_change(
        self,
        new_visible_selection: Sequence[Record],
        current_page_records: Optional[Sequence[Record]] = None,
    ) -> List[Record]:
        """
        Apply the table's complete checked set for the current page.

        The table reports the full set of checked rows, never a delta, so
        every id on the current page is cleared first and the new checked
        set is inserted afterwards. Ids from other pages are left alone.

        Args:
            new_visible_selection: Every checked row on the current page
            current_page_records: Rows of the current page (default: last loaded page)

        Returns:
            The new visible selection
        """
        page_records = self.page_records if current_page_records is None else list(current_page_records)

        for record in page_records:
            self.store.delete(record.id)
        for record in new_visible_selection:
            self.store.put(record)

        self.visible_selection = list(new_visible_selection)
        logger.debug(
            "Manual selection applied",
            page_rows=len(page_records),
            checked=len(self.visible_selection),
            total_selected=self.store.size(),
        )
        return list(self.visible_selection)
