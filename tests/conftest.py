"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Iterable, List, Optional, Sequence

from artselect.logger import get_logger

# Quiet, file-less logger for every module that grabs it at import time
get_logger(enable_file=False, enable_console=False)

from artselect.models import Page, Pagination, Record  # noqa: E402
from artselect.session import SelectionSession  # noqa: E402
from artselect.source import PageFetchError  # noqa: E402


def make_record(record_id: int, title: Optional[str] = None) -> Record:
    return Record(
        id=record_id,
        fields={
            "title": title or f"Artwork {record_id}",
            "place_of_origin": "France",
            "artist_display": "Unknown artist",
            "inscriptions": None,
            "date_start": 1900,
            "date_end": 1901,
        },
    )


class FakePageSource:
    """In-memory page source that records every page it was asked for."""

    def __init__(
        self,
        records: Optional[Sequence[Record]] = None,
        page_size: int = 10,
        pages: Optional[List[List[Record]]] = None,
        fail_pages: Iterable[int] = (),
    ):
        if pages is None:
            records = list(records or [])
            pages = [records[i:i + page_size] for i in range(0, len(records), page_size)] or [[]]
        self.pages = pages
        self.fail_pages = set(fail_pages)
        self.calls: List[int] = []

    @property
    def total(self) -> int:
        return sum(len(p) for p in self.pages)

    def fetch(self, page: int) -> Page:
        self.calls.append(page)
        if page in self.fail_pages:
            raise PageFetchError(f"Page {page} request timed out. Try again later.", page=page)
        if page < 1 or page > len(self.pages):
            raise PageFetchError(f"Page {page} not found (404)", page=page, status=404)
        return Page(
            records=tuple(self.pages[page - 1]),
            pagination=Pagination(
                current_page=page,
                total_pages=len(self.pages),
                total=self.total,
            ),
        )


@pytest.fixture
def records() -> List[Record]:
    """Thirty records with ids 1..30, three pages of ten."""
    return [make_record(i) for i in range(1, 31)]


@pytest.fixture
def source(records) -> FakePageSource:
    return FakePageSource(records, page_size=10)


@pytest.fixture
def session(source) -> SelectionSession:
    return SelectionSession(source, page_size=10)


@pytest.fixture
def valid_page_payload() -> dict:
    """Page payload in the collection endpoint's response shape."""
    return {
        "pagination": {
            "total": 25,
            "limit": 10,
            "offset": 0,
            "total_pages": 3,
            "current_page": 1,
        },
        "data": [
            {
                "id": 27992,
                "title": "A Sunday on La Grande Jatte",
                "place_of_origin": "France",
                "artist_display": "Georges Seurat\nFrench, 1859-1891",
                "inscriptions": None,
                "date_start": 1884,
                "date_end": 1886,
            },
            {
                "id": 28560,
                "title": "The Bedroom",
                "place_of_origin": "France",
                "artist_display": "Vincent van Gogh\nDutch, 1853-1890",
                "inscriptions": None,
                "date_start": 1889,
                "date_end": 1889,
            },
        ],
    }


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def source_factory():
    return FakePageSource
