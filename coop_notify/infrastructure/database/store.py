"""Remote store backed by SQLAlchemy async sessions"""

from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.domain.models import KIND_DUE_DATE
from coop_notify.infrastructure.observability.metrics import remote_store_failures_counter
from coop_notify.infrastructure.database.models import (
    GlobalNotificationRecord,
    GlobalReadStatusRecord,
    LoanRecord,
    TransactionNotificationRecord,
    TransactionRecord,
)
from coop_notify.infrastructure.store.base import (
    GLOBAL_NOTIFICATIONS,
    GLOBAL_READ_STATUS,
    LOANS,
    TRANSACTION_NOTIFICATIONS,
    TRANSACTIONS,
    Filter,
    Order,
    RemoteStore,
    Row,
)

MODELS = {
    LOANS: LoanRecord,
    TRANSACTION_NOTIFICATIONS: TransactionNotificationRecord,
    GLOBAL_NOTIFICATIONS: GlobalNotificationRecord,
    GLOBAL_READ_STATUS: GlobalReadStatusRecord,
    TRANSACTIONS: TransactionRecord,
}


def _to_row(record: Any) -> Row:
    return {attr.key: getattr(record, attr.key) for attr in inspect(record).mapper.column_attrs}


class SqlStore(RemoteStore):
    """Maps collection-level calls onto ORM models; one session per call"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.engine = engine
        self.functions = {"get_due_date_notifications": self._due_date_notifications}

    def _model(self, collection: str):
        try:
            return MODELS[collection]
        except KeyError:
            raise TransientRemoteError(f"Unknown collection: {collection}") from None

    def _predicates(self, model, filters: Sequence[Filter]) -> list:
        predicates = []
        for flt in filters:
            column = getattr(model, flt.column, None)
            if column is None:
                raise TransientRemoteError(f"Unknown column {model.__tablename__}.{flt.column}")
            if flt.op == "eq":
                predicates.append(column == flt.value)
            elif flt.op == "gte":
                predicates.append(column >= flt.value)
            elif flt.op == "lte":
                predicates.append(column <= flt.value)
            elif flt.op == "in":
                predicates.append(column.in_(list(flt.value)))
            else:
                raise TransientRemoteError(f"Unsupported filter operator: {flt.op}")
        return predicates

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        model = self._model(collection)
        stmt = select(model).where(*self._predicates(model, filters))
        if order is not None:
            column = getattr(model, order.column)
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [_to_row(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            remote_store_failures_counter.labels(operation="query").inc()
            raise TransientRemoteError(f"Query on {collection} failed: {e}") from e

    async def insert(self, collection: str, row: Row) -> Row:
        model = self._model(collection)
        try:
            record = model(**row)
        except TypeError as e:
            raise TransientRemoteError(f"Invalid row for {collection}: {e}") from e

        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
                return _to_row(record)
        except SQLAlchemyError as e:
            remote_store_failures_counter.labels(operation="insert").inc()
            raise TransientRemoteError(f"Insert into {collection} failed: {e}") from e

    async def update(self, collection: str, filters: Sequence[Filter], patch: Row) -> List[Row]:
        model = self._model(collection)
        stmt = select(model).where(*self._predicates(model, filters))

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                records = result.scalars().all()
                for record in records:
                    for key, value in patch.items():
                        setattr(record, key, value)
                await session.commit()
                return [_to_row(record) for record in records]
        except SQLAlchemyError as e:
            remote_store_failures_counter.labels(operation="update").inc()
            raise TransientRemoteError(f"Update on {collection} failed: {e}") from e

    async def call_server_function(self, name: str, args: Row) -> List[Row]:
        function = self.functions.get(name)
        if function is None:
            raise TransientRemoteError(f"Server function not found: {name}")
        return await function(args)

    async def _due_date_notifications(self, args: Dict[str, Any]) -> List[Row]:
        """SQL counterpart of the hosted get_due_date_notifications(member_id) function"""
        if "member_id" not in args:
            raise TransientRemoteError("get_due_date_notifications requires member_id")
        return await self.query(
            TRANSACTION_NOTIFICATIONS,
            [
                Filter("owner_id", args["member_id"]),
                Filter("kind", KIND_DUE_DATE),
            ],
            order=Order("created_at"),
        )

    async def ping(self) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            remote_store_failures_counter.labels(operation="ping").inc()
            raise TransientRemoteError(f"Database unreachable: {e}") from e

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
