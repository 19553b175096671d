"""Generic record store interface shared by the REST and SQL backends"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

Record = Dict[str, Any]

OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "is")


@dataclass(frozen=True)
class Filter:
    """Single column predicate, e.g. Filter("user_id", "eq", "u1")"""

    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


class RecordStore(Protocol):
    """
    Collection-oriented store. Every method raises RecordStoreError on failure;
    calls are independent (no transaction spans two calls).
    """

    async def select(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Record]: ...

    async def insert(self, collection: str, records: Sequence[Record]) -> List[Record]: ...

    async def update(self, collection: str, filters: Sequence[Filter], patch: Record) -> List[Record]: ...

    async def delete(self, collection: str, filters: Sequence[Filter]) -> None: ...


PAGE_SIZE = 1000


async def select_all(
    store: RecordStore,
    collection: str,
    filters: Sequence[Filter] = (),
    order: Optional[Order] = None,
    page_size: int = PAGE_SIZE,
) -> List[Record]:
    """
    Read every matching row, page by page.

    The hosted store caps a single response at 1000 rows by default. Pages
    are ordered by `order`, falling back to id so offsets stay stable.
    """
    order = order or Order("id")
    rows: List[Record] = []
    while True:
        page = await store.select(collection, filters, order, limit=page_size, offset=len(rows))
        rows.extend(page)
        if len(page) < page_size:
            return rows
