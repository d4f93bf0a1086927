"""Remote store interface shared by all backends"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

# Collection names
LOANS = "loan"
TRANSACTION_NOTIFICATIONS = "transaction-notification"
GLOBAL_NOTIFICATIONS = "global-notification"
GLOBAL_READ_STATUS = "global-read-status"
TRANSACTIONS = "transaction"

COLLECTIONS = (LOANS, TRANSACTION_NOTIFICATIONS, GLOBAL_NOTIFICATIONS, GLOBAL_READ_STATUS, TRANSACTIONS)

FILTER_OPERATORS = ("eq", "gte", "lte", "in")

Row = Dict[str, Any]


@dataclass(frozen=True)
class Filter:
    """Single column predicate"""

    column: str
    value: Any
    op: str = "eq"  # eq | gte | lte | in


@dataclass(frozen=True)
class Order:
    """Result ordering"""

    column: str
    descending: bool = True


def eq(column: str, value: Any) -> Filter:
    return Filter(column, value, "eq")


def gte(column: str, value: Any) -> Filter:
    return Filter(column, value, "gte")


def lte(column: str, value: Any) -> Filter:
    return Filter(column, value, "lte")


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, tuple(values), "in")


class RemoteStore(ABC):
    """
    Filtered reads and writes against named collections.

    Every backend wraps its library failures into TransientRemoteError so
    callers handle one error type regardless of transport.
    """

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Return rows matching all filters"""

    @abstractmethod
    async def insert(self, collection: str, row: Row) -> Row:
        """Insert a row and return it as stored (with generated id)"""

    @abstractmethod
    async def update(self, collection: str, filters: Sequence[Filter], patch: Row) -> List[Row]:
        """Apply patch to matching rows and return the updated rows"""

    @abstractmethod
    async def call_server_function(self, name: str, args: Row) -> List[Row]:
        """Invoke a server-side aggregation function"""

    @abstractmethod
    async def ping(self) -> None:
        """Cheapest possible round trip, used by the connectivity probe"""

    async def close(self) -> None:
        """Release backend resources"""
        return None
