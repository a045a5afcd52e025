"""
Records and pages as delivered by the remote collection.

A record is opaque apart from its integer ``id``; display fields are
kept as-is and only read for rendering.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

DISPLAY_FIELDS = [
    "title",
    "place_of_origin",
    "artist_display",
    "inscriptions",
    "date_start",
    "date_end",
]


@dataclass(frozen=True)
class Record:
    """A single item of the collection, identified by ``id``."""

    id: int
    fields: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Build a record from a raw payload item (``id`` must already be validated)."""
        return cls(id=data["id"], fields={k: v for k, v in data.items() if k != "id"})

    def get(self, name: str, default: Any = None) -> Any:
        if name == "id":
            return self.id
        return self.fields.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.fields}

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total: int
    limit: int = 0

    @property
    def is_last(self) -> bool:
        """True when no page follows this one."""
        return self.current_page >= self.total_pages


@dataclass(frozen=True)
class Page:
    """One page of records plus the pagination metadata reported with it."""

    records: Tuple[Record, ...]
    pagination: Pagination

    @property
    def current_page(self) -> int:
        return self.pagination.current_page

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages

    @property
    def total_records(self) -> int:
        return self.pagination.total

    def ids(self) -> List[int]:
        return [r.id for r in self.records]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
