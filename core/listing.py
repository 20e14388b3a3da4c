"""
Filtered, paginated listing over a queryset.

Used by the verification queue. Filters are structured values interpreted
here with Q objects, never strings spliced into a query:

- equality filters are ANDed together;
- a free-text search is matched case-insensitively against one or more
  text fields, ORed among those fields and ANDed with the equality filters.

Results are always ordered newest first with the primary key as a
tie-break, so a fixed filter over fixed data pages without gaps or
duplicates.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from django.db.models import Q, QuerySet

DEFAULT_PAGE_SIZE = 10
ORDERING = ("-created_at", "-pk")

OP_EXACT = "exact"
OP_ICONTAINS = "icontains"
OPERATORS = (OP_EXACT, OP_ICONTAINS)


class InvalidFilter(ValueError):
    pass


@dataclass(frozen=True)
class Filter:
    field: str
    value: Any
    op: str = OP_EXACT

    def as_q(self, allowed_fields: Iterable[str]) -> Q:
        if self.field not in allowed_fields:
            raise InvalidFilter(f"Filtering on {self.field!r} is not allowed")
        if self.op not in OPERATORS:
            raise InvalidFilter(f"Unknown filter operator {self.op!r}")
        return Q(**{f"{self.field}__{self.op}": self.value})


@dataclass(frozen=True)
class Page:
    items: list
    total: int
    number: int
    page_size: int

    @property
    def num_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.num_pages

    @property
    def start_index(self) -> int:
        # 1-based index of the first item, 0 for an empty page
        if not self.items:
            return 0
        return (self.number - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        if not self.items:
            return 0
        return self.start_index + len(self.items) - 1

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


@dataclass(frozen=True)
class ListingQuery:
    filters: Sequence[Filter] = field(default_factory=tuple)
    search: str = ""
    search_fields: Sequence[str] = field(default_factory=tuple)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


def build_queryset(queryset: QuerySet, query: ListingQuery, allowed_fields: Iterable[str]) -> QuerySet:
    allowed = set(allowed_fields)
    for flt in query.filters:
        queryset = queryset.filter(flt.as_q(allowed))

    term = (query.search or "").strip()
    if term and query.search_fields:
        text_q = Q()
        for name in query.search_fields:
            text_q |= Filter(name, term, OP_ICONTAINS).as_q(allowed)
        queryset = queryset.filter(text_q)

    return queryset.order_by(*ORDERING)


def paginate(queryset: QuerySet, query: ListingQuery, allowed_fields: Iterable[str]) -> Page:
    """
    Return the requested page and the pre-pagination total.

    Pages are 1-indexed. A page past the last one is an empty page, not an
    error.
    """
    if query.page < 1:
        raise InvalidFilter("Page numbers start at 1")
    if query.page_size < 1:
        raise InvalidFilter("Page size must be positive")

    qs = build_queryset(queryset, query, allowed_fields)
    total = qs.count()
    offset = (query.page - 1) * query.page_size
    items = list(qs[offset:offset + query.page_size]) if offset < total else []
    return Page(items=items, total=total, number=query.page, page_size=query.page_size)
