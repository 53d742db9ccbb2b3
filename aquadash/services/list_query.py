# aquadash/services/list_query.py
"""
list_query - filtering, sorting and pagination of management tables.

Every page holds the full list it fetched once and derives what it shows
from (items, filters, sort key, sort order, page, page size). Nothing here
talks to the API, so the same function serves every table.

    page = query_list(requests,
                      ListFilters(search="net", search_fields=("description",),
                                  equals={"status": "PENDING"}),
                      sort_key="createdAt", sort_order="desc", page=2)
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Iterable, Mapping, Optional, Sequence, TypeVar

from aquadash.settings import settings

T = TypeVar("T")

ALL = "ALL"
ASC = "asc"
DESC = "desc"


@dataclass
class ListFilters:
    search: str = ""
    search_fields: Sequence[str] = ()
    # field -> value; "ALL" / None switches a filter off
    equals: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """1-based position of the first row on the page (0 when empty)."""
        return (self.page - 1) * self.page_size + 1 if self.items else 0


def resolve(obj: Any, path: str) -> Any:
    """
    Read a dotted path from dicts / objects: "asset.name", "employee.full_name".
    Missing links resolve to None.
    """
    current = obj
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def matches_search(item: Any, term: str, fields: Iterable[str]) -> bool:
    term = term.strip().lower()
    if not term:
        return True
    for path in fields:
        value = _plain(resolve(item, path))
        if value is None:
            continue
        if term in str(value).lower():
            return True
    return False


def matches_equals(item: Any, equals: Mapping[str, Any]) -> bool:
    for path, expected in equals.items():
        if expected is None or expected == ALL or expected == "":
            continue
        if _plain(resolve(item, path)) != _plain(expected):
            return False
    return True


def filter_items(items: Iterable[T], filters: Optional[ListFilters]) -> list[T]:
    if filters is None:
        return list(items)
    return [
        item for item in items
        if matches_search(item, filters.search, filters.search_fields)
        and matches_equals(item, filters.equals)
    ]


def _sort_key(path: str):
    def key(item):
        value = _plain(resolve(item, path))
        if value is None:
            # missing values first in ascending order
            return (0, 0, "")
        if isinstance(value, (int, float)):
            return (1, 0, value)
        # strings and anything else compare as text, after numbers
        return (1, 1, str(value).lower())
    return key


def sort_items(items: Sequence[T], sort_key: Optional[str], sort_order: str = ASC) -> list[T]:
    """Stable sort; unknown order strings are treated as ascending."""
    if not sort_key:
        return list(items)
    return sorted(items, key=_sort_key(sort_key), reverse=(sort_order == DESC))


def total_pages(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


def paginate(items: Sequence[T], page: int = 1, page_size: Optional[int] = None) -> Page[T]:
    """
    Slice one page. Pages are 1-based; an out-of-range page is pulled back
    into 1..total_pages.
    """
    page_size = page_size or settings.PAGE_SIZE
    if page_size < 1:
        raise ValueError("page_size must be positive")

    total = len(items)
    pages = total_pages(total, page_size)
    page = min(max(int(page or 1), 1), max(pages, 1))
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total=total,
        total_pages=pages,
    )


def query_list(
    items: Iterable[T],
    filters: Optional[ListFilters] = None,
    sort_key: Optional[str] = None,
    sort_order: str = ASC,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Page[T]:
    """filter → sort → paginate"""
    filtered = filter_items(items, filters)
    ordered = sort_items(filtered, sort_key, sort_order)
    return paginate(ordered, page, page_size)
