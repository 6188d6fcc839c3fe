"""
Admin listing queries over objections.

Both admin listings (active queue and archive) are described by a
ListingDefinition. The same definition builds the data query and the count
query, so the row set and totalPages always agree on the filter.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_

from database.connection import Storage
from database.models import Farmer, Objection, ACTIVE_STATUSES, STATUS_RESOLVED
from objections.roles import ROLE_ADMIN, require_role

PAGE_SIZE = 10


@dataclass(frozen=True)
class ListingDefinition:
    """Shape of one paginated listing."""
    name: str
    statuses: Tuple[str, ...]
    search_columns: Tuple[Any, ...]
    sort_column: Any
    join_farmer: bool = False
    extra_columns: Tuple[Any, ...] = ()


ACTIVE_LISTING = ListingDefinition(
    name="active",
    statuses=ACTIVE_STATUSES,
    search_columns=(Objection.code, Objection.transaction_number),
    sort_column=Objection.created_at,
)

ARCHIVE_LISTING = ListingDefinition(
    name="archive",
    statuses=(STATUS_RESOLVED,),
    search_columns=(
        Objection.code,
        Farmer.first_name,
        Farmer.last_name,
        Objection.transaction_number,
    ),
    sort_column=Objection.updated_at,
    join_farmer=True,
    extra_columns=(Farmer.first_name, Farmer.last_name),
)


@dataclass
class Page:
    """One page of a listing."""
    rows: List[Dict[str, Any]]
    page: int
    total_pages: int
    search_term: str
    total: int = 0
    page_size: int = PAGE_SIZE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "page": self.page,
            "totalPages": self.total_pages,
            "searchTerm": self.search_term,
        }


def parse_page(raw) -> int:
    """
    Parse a page parameter.

    Anything missing, non-integer, zero or negative becomes page 1.

    >>> parse_page("3"), parse_page("abc"), parse_page("0"), parse_page(None)
    (3, 1, 1, 1)
    """
    if raw is None or isinstance(raw, bool):
        return 1
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return 1
    return value if value > 0 else 1


def normalize_search(raw: Optional[str]) -> str:
    return (raw or "").strip()


def total_pages_for(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size)


class AdminQueryEngine:
    """Paginated, searchable admin listings."""

    def __init__(self, storage: Storage, page_size: int = PAGE_SIZE):
        self.storage = storage
        self.page_size = page_size

    def _apply_filters(self, query, listing: ListingDefinition, search_term: str):
        """Joins and WHERE clause shared by data and count queries."""
        query = query.select_from(Objection)
        if listing.join_farmer:
            query = query.join(Farmer, Objection.farmer_id == Farmer.id)
        query = query.filter(Objection.status.in_(listing.statuses))
        if search_term:
            query = query.filter(or_(*[
                column.contains(search_term, autoescape=True)
                for column in listing.search_columns
            ]))
        return query

    def fetch_page(self, listing: ListingDefinition, page=None, search_term: Optional[str] = None) -> Page:
        page = parse_page(page)
        search_term = normalize_search(search_term)
        offset = (page - 1) * self.page_size
        columns = tuple(Objection.__table__.columns) + listing.extra_columns

        with self.storage.session() as db:
            count_query = self._apply_filters(db.query(func.count(Objection.id)), listing, search_term)
            total = count_query.scalar() or 0

            # Past the last row: nothing to fetch, and huge offsets overflow the driver
            rows = []
            if offset < total:
                data_query = self._apply_filters(db.query(*columns), listing, search_term)
                rows = data_query\
                    .order_by(listing.sort_column.desc(), Objection.id.desc())\
                    .limit(self.page_size)\
                    .offset(offset)\
                    .all()

        return Page(
            rows=[dict(row._mapping) for row in rows],
            page=page,
            total_pages=total_pages_for(total, self.page_size),
            search_term=search_term,
            total=total,
            page_size=self.page_size,
        )

    def list_active(self, page=None, search_term: Optional[str] = None,
                    actor_role: Optional[str] = None) -> Page:
        """Pending and reviewed objections, newest first."""
        require_role(actor_role, ROLE_ADMIN)
        return self.fetch_page(ACTIVE_LISTING, page, search_term)

    def list_archive(self, page=None, search_term: Optional[str] = None,
                     actor_role: Optional[str] = None) -> Page:
        """Resolved objections with farmer names, most recently updated first."""
        require_role(actor_role, ROLE_ADMIN)
        return self.fetch_page(ARCHIVE_LISTING, page, search_term)
