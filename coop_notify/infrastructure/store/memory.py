"""In-memory remote store for development and tests"""

import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.domain.models import KIND_DUE_DATE
from coop_notify.infrastructure.store.base import (
    COLLECTIONS,
    TRANSACTION_NOTIFICATIONS,
    Filter,
    Order,
    RemoteStore,
    Row,
    eq,
)

ServerFunction = Callable[["InMemoryStore", Row], Awaitable[List[Row]]]


def _matches(row: Row, flt: Filter) -> bool:
    value = row.get(flt.column)
    if flt.op == "eq":
        return value == flt.value
    if flt.op == "in":
        return value in flt.value
    if value is None:
        return False
    try:
        if flt.op == "gte":
            return value >= flt.value
        if flt.op == "lte":
            return value <= flt.value
    except TypeError as e:
        raise TransientRemoteError(f"Cannot compare {flt.column}: {e}") from e
    raise TransientRemoteError(f"Unsupported filter operator: {flt.op}")


class InMemoryStore(RemoteStore):
    """Dict-backed store; rows are copied in and out so callers never alias storage"""

    def __init__(self, functions: Optional[Dict[str, ServerFunction]] = None):
        self.tables: Dict[str, List[Row]] = {name: [] for name in COLLECTIONS}
        self.functions: Dict[str, ServerFunction] = dict(functions or {})

    def _table(self, collection: str) -> List[Row]:
        if collection not in self.tables:
            raise TransientRemoteError(f"Unknown collection: {collection}")
        return self.tables[collection]

    def seed(self, collection: str, *rows: Row) -> None:
        """Load fixture rows without going through insert()"""
        self._table(collection).extend(dict(row) for row in rows)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        rows = [row for row in self._table(collection) if all(_matches(row, f) for f in filters)]
        if order is not None:
            rows.sort(key=lambda r: r.get(order.column), reverse=order.descending)
        if limit is not None:
            rows = rows[:limit]
        return [dict(row) for row in rows]

    async def insert(self, collection: str, row: Row) -> Row:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        self._table(collection).append(stored)
        return dict(stored)

    async def update(self, collection: str, filters: Sequence[Filter], patch: Row) -> List[Row]:
        updated = []
        for row in self._table(collection):
            if all(_matches(row, f) for f in filters):
                row.update(patch)
                updated.append(dict(row))
        return updated

    async def call_server_function(self, name: str, args: Row) -> List[Row]:
        function = self.functions.get(name)
        if function is None:
            raise TransientRemoteError(f"Server function not found: {name}")
        return await function(self, args)

    async def ping(self) -> None:
        return None

    def rows(self, collection: str) -> List[Dict[str, Any]]:
        """Snapshot of a collection, for assertions"""
        return [dict(row) for row in self._table(collection)]


async def due_date_notifications(store: InMemoryStore, args: Row) -> List[Row]:
    """In-memory counterpart of the get_due_date_notifications server function"""
    member_id = args.get("member_id")
    if member_id is None:
        raise TransientRemoteError("get_due_date_notifications requires member_id")
    return await store.query(
        TRANSACTION_NOTIFICATIONS,
        [eq("owner_id", member_id), eq("kind", KIND_DUE_DATE)],
        order=Order("created_at"),
    )
