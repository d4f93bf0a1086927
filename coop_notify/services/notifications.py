"""Notification service: cached listing, read-state changes and reminder triggers"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from coop_notify.config import settings
from coop_notify.domain.exceptions import DecodeError, DomainException
from coop_notify.domain.models import (
    KIND_DUE_DATE,
    KIND_TRANSACTION,
    Notification,
    NotificationSource,
    Transaction,
)
from coop_notify.infrastructure.store.base import (
    GLOBAL_NOTIFICATIONS,
    GLOBAL_READ_STATUS,
    TRANSACTION_NOTIFICATIONS,
    TRANSACTIONS,
    Order,
    RemoteStore,
    Row,
    eq,
    in_,
)
from coop_notify.infrastructure.store.rows import (
    global_notification_from_row,
    transaction_from_row,
    transaction_notification_from_row,
)
from coop_notify.services.cache import FetchCache
from coop_notify.services.fallback import FallbackRead
from coop_notify.services.read_status import ReadStatusResolver
from coop_notify.services.reminders import ALL_OWNERS, InstallmentReminderService
from coop_notify.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def unread_count(notifications: List[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)


class NotificationService:
    """
    Facade used by the UI/session layer.

    Owns the notification and transaction fetch caches; every successful
    read-state change invalidates the affected owner's entries.
    """

    def __init__(
        self,
        store: RemoteStore,
        resolver: Optional[ReadStatusResolver] = None,
        reminders: Optional[InstallmentReminderService] = None,
        cache_ttl_seconds: Optional[float] = None,
        cache_clock: Callable[[], float] = time.monotonic,
        page_size: Optional[int] = None,
        due_date_function: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock
        self.resolver = resolver or ReadStatusResolver(store, clock=clock)
        self.reminders = reminders or InstallmentReminderService(store, clock=clock)
        self.page_size = page_size or settings.notification_page_size
        self.due_date_function = due_date_function or settings.due_date_function

        ttl = cache_ttl_seconds if cache_ttl_seconds is not None else settings.cache_ttl_seconds
        self.notification_cache: FetchCache[Notification] = FetchCache("notifications", ttl, cache_clock)
        self.transaction_cache: FetchCache[Transaction] = FetchCache("transactions", ttl, cache_clock)

    # Listing

    async def get_notifications(
        self,
        owner_id: str,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> List[Notification]:
        """
        Owner's notifications, newest first, served from cache while fresh.

        Raises:
            TransientRemoteError: the remote fetch failed
        """
        page = limit or self.page_size
        return await self.notification_cache.fetch(
            owner_id,
            lambda: self._load_notifications(owner_id, page),
            force_refresh=force_refresh,
        )

    async def get_transactions(self, owner_id: str, force_refresh: bool = False) -> List[Transaction]:
        """Owner's ledger entries, newest first, served from cache while fresh"""
        return await self.transaction_cache.fetch(
            owner_id,
            lambda: self._load_transactions(owner_id),
            force_refresh=force_refresh,
        )

    def due_date_reader(self, owner_id: str) -> FallbackRead:
        """Due-date reminders via the server function, with a direct query fallback"""
        return FallbackRead(
            name="due_date_notifications",
            primary=lambda: self.store.call_server_function(self.due_date_function, {"member_id": owner_id}),
            fallback=lambda: self.store.query(
                TRANSACTION_NOTIFICATIONS,
                [eq("owner_id", owner_id), eq("kind", KIND_DUE_DATE)],
                order=Order("created_at"),
            ),
        )

    async def _load_notifications(self, owner_id: str, limit: int) -> List[Notification]:
        logger.info("Fetching notifications", extra={"owner_id": owner_id, "limit": limit})

        owner_rows = await self.store.query(
            TRANSACTION_NOTIFICATIONS,
            [eq("owner_id", owner_id)],
            order=Order("created_at"),
            limit=limit,
        )
        global_rows = await self.store.query(GLOBAL_NOTIFICATIONS, order=Order("created_at"), limit=limit)

        read_global_ids = set()
        if global_rows:
            status_rows = await self.store.query(
                GLOBAL_READ_STATUS,
                [eq("owner_id", owner_id), in_("global_notification_id", [str(r["id"]) for r in global_rows])],
            )
            read_global_ids = {str(r["global_notification_id"]) for r in status_rows if r.get("is_read")}

        due_rows = await self.due_date_reader(owner_id)()

        # Collections have independent id spaces
        merged: Dict[Tuple[NotificationSource, str], Notification] = {}
        for row in owner_rows + due_rows:
            self._merge(merged, row, NotificationSource.TRANSACTION)
        for row in global_rows:
            self._merge(merged, row, NotificationSource.GLOBAL, is_read=str(row.get("id")) in read_global_ids)

        notifications = sorted(merged.values(), key=lambda n: n.created_at, reverse=True)
        logger.debug(
            "Notifications assembled",
            extra={"owner_id": owner_id, "count": len(notifications), "due_date_count": len(due_rows)},
        )
        return notifications

    @staticmethod
    def _merge(
        merged: Dict[Tuple[NotificationSource, str], Notification],
        row: Row,
        source: NotificationSource,
        is_read: bool = False,
    ) -> None:
        try:
            if source is NotificationSource.GLOBAL:
                notification = global_notification_from_row(row, is_read=is_read)
            else:
                notification = transaction_notification_from_row(row)
        except DecodeError as e:
            logger.warning(f"Skipping malformed notification row: {e}", extra={"notification_id": row.get("id")})
            return
        merged.setdefault((notification.source, notification.id), notification)

    async def _load_transactions(self, owner_id: str) -> List[Transaction]:
        logger.info("Fetching transactions", extra={"owner_id": owner_id})
        rows = await self.store.query(TRANSACTIONS, [eq("owner_id", owner_id)], order=Order("created_at"))

        transactions = []
        for row in rows:
            try:
                transactions.append(transaction_from_row(row))
            except DecodeError as e:
                logger.warning(f"Skipping malformed transaction row: {e}", extra={"transaction_id": row.get("id")})
        return transactions

    # Read state

    async def mark_as_read(
        self,
        notification_id: str,
        source: NotificationSource | str | None = None,
        owner_id: Optional[str] = None,
    ) -> bool:
        """Mark one notification read; on success the owner's cache (or every cache, owner unknown) is dropped"""
        success = await self.resolver.mark_as_read(notification_id, source, owner_id)
        if success:
            self.invalidate_cache(owner_id)
        return success

    async def mark_all_as_read(self, owner_id: str) -> bool:
        success = await self.resolver.mark_all_as_read(owner_id)
        if success:
            self.invalidate_cache(owner_id)
        return success

    def invalidate_cache(self, owner_id: Optional[str] = None) -> None:
        """Drop cached lists for one owner, or for everyone (logout) when owner_id is None"""
        self.notification_cache.invalidate(owner_id)
        self.transaction_cache.invalidate(owner_id)

    # Creation and reminders

    async def create_notification(
        self,
        owner_id: str,
        title: str,
        message: str,
        kind: str = KIND_TRANSACTION,
        payload: Optional[Any] = None,
    ) -> bool:
        timestamp = self.clock()
        try:
            await self.store.insert(
                TRANSACTION_NOTIFICATIONS,
                {
                    "owner_id": owner_id,
                    "title": title,
                    "message": message,
                    "kind": kind,
                    "is_read": False,
                    "payload": payload,
                    "created_at": timestamp,
                    "updated_at": timestamp,
                },
            )
        except DomainException as e:
            logger.error(f"Error creating notification: {e}", extra={"owner_id": owner_id, "kind": kind})
            return False

        self.invalidate_cache(owner_id)
        return True

    async def reconcile_loans(self, owner_id: str = ALL_OWNERS, now: Optional[datetime] = None) -> int:
        created = await self.reminders.reconcile_loans(owner_id, now)
        if created:
            self.invalidate_cache(None if owner_id == ALL_OWNERS else owner_id)
        return created

    async def start_session(self, owner_id: str, now: Optional[datetime] = None) -> List[Notification]:
        """Session bootstrap: reconcile the owner's loans, then reload their notifications"""
        await self.reconcile_loans(owner_id, now)
        return await self.get_notifications(owner_id, force_refresh=True)
