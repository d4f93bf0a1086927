"""Mark notifications read across the per-owner and global collections"""

import logging
from datetime import datetime
from typing import Callable, Optional
from coop_notify.domain.exceptions import (
    DecodeError,
    DomainException,
    NotFoundError,
    TransientRemoteError,
    UnauthorizedError,
)
from coop_notify.domain.models import NotificationSource
from coop_notify.infrastructure.observability.metrics import record_mark_read
from coop_notify.infrastructure.store.base import (
    GLOBAL_NOTIFICATIONS,
    GLOBAL_READ_STATUS,
    TRANSACTION_NOTIFICATIONS,
    RemoteStore,
    eq,
)
from coop_notify.infrastructure.store.rows import read_status_from_row, transaction_notification_from_row
from coop_notify.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class ReadStatusResolver:
    """
    Resolve which collection a notification lives in and mark it read there.

    Without a source hint the transaction collection is probed first, then the
    global one. Existence is always checked with a read before any write, so
    an unknown id never causes a write. Marking something already read is a
    no-op success that leaves its updated_at untouched.

    The resolver does not own any cache; callers invalidate on success.
    """

    def __init__(self, store: RemoteStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    async def mark_as_read(
        self,
        notification_id: str,
        source: NotificationSource | str | None = None,
        owner_id: Optional[str] = None,
    ) -> bool:
        """
        Mark one notification read for an owner.

        Returns:
            True when the notification is read after the call. False when it
            was not found, the owner does not match, or a remote call failed.
        """
        log_context = {"notification_id": notification_id, "owner_id": owner_id}
        try:
            hint = NotificationSource(source) if source is not None else None
        except ValueError:
            logger.warning(f"Unknown notification source: {source}", extra=log_context)
            record_mark_read("unknown", "error")
            return False

        label = hint.value if hint else "unknown"
        try:
            resolved = await self._resolve_and_mark(notification_id, hint, owner_id)
        except NotFoundError as e:
            logger.info(f"Notification not found: {e}", extra=log_context)
            record_mark_read(label, "not_found")
            return False
        except UnauthorizedError as e:
            logger.warning(f"Mark as read rejected: {e}", extra=log_context)
            record_mark_read(label, "unauthorized")
            return False
        except (TransientRemoteError, DecodeError) as e:
            logger.error(f"Error marking notification as read: {e}", extra=log_context)
            record_mark_read(label, "error")
            return False

        logger.info("Notification marked as read", extra={**log_context, "source": resolved.value})
        record_mark_read(resolved.value, "success")
        return True

    async def _resolve_and_mark(
        self,
        notification_id: str,
        hint: Optional[NotificationSource],
        owner_id: Optional[str],
    ) -> NotificationSource:
        if hint is NotificationSource.TRANSACTION:
            await self._mark_transaction(notification_id, owner_id)
            return NotificationSource.TRANSACTION

        if hint is NotificationSource.GLOBAL:
            await self._mark_global(notification_id, owner_id)
            return NotificationSource.GLOBAL

        # Auto-detect: sequential existence probe, transaction collection first
        try:
            await self._mark_transaction(notification_id, owner_id)
            return NotificationSource.TRANSACTION
        except NotFoundError:
            pass

        await self._mark_global(notification_id, owner_id)
        return NotificationSource.GLOBAL

    async def _mark_transaction(self, notification_id: str, owner_id: Optional[str]) -> None:
        rows = await self.store.query(TRANSACTION_NOTIFICATIONS, [eq("id", notification_id)], limit=1)
        if not rows:
            raise NotFoundError(f"No transaction notification {notification_id}")

        notification = transaction_notification_from_row(rows[0])
        if owner_id is not None and notification.owner_id != owner_id:
            raise UnauthorizedError(f"Notification {notification_id} belongs to another owner")

        if notification.is_read:
            return

        filters = [eq("id", notification_id)]
        if owner_id is not None:
            filters.append(eq("owner_id", owner_id))

        updated = await self.store.update(
            TRANSACTION_NOTIFICATIONS,
            filters,
            {"is_read": True, "updated_at": self.clock()},
        )
        if not updated:
            raise NotFoundError(f"Transaction notification {notification_id} disappeared before update")

    async def _mark_global(self, notification_id: str, owner_id: Optional[str]) -> None:
        rows = await self.store.query(GLOBAL_NOTIFICATIONS, [eq("id", notification_id)], limit=1)
        if not rows:
            raise NotFoundError(f"No notification {notification_id} in either collection")

        if owner_id is None:
            raise UnauthorizedError("Owner id is required to mark a global notification as read")

        existing = await self.store.query(
            GLOBAL_READ_STATUS,
            [eq("global_notification_id", notification_id), eq("owner_id", owner_id)],
            limit=1,
        )
        now = self.clock()

        if existing:
            status = read_status_from_row(existing[0])
            if status.is_read:
                return
            updated = await self.store.update(
                GLOBAL_READ_STATUS,
                [eq("id", status.id)],
                {"is_read": True, "updated_at": now},
            )
            if not updated:
                raise NotFoundError(f"Read status {status.id} disappeared before update")
            return

        await self.store.insert(
            GLOBAL_READ_STATUS,
            {
                "global_notification_id": notification_id,
                "owner_id": owner_id,
                "is_read": True,
                "created_at": now,
                "updated_at": now,
            },
        )

    async def mark_all_as_read(self, owner_id: str) -> bool:
        """Mark every unread transaction notification and global notification read for an owner"""
        now = self.clock()
        try:
            await self.store.update(
                TRANSACTION_NOTIFICATIONS,
                [eq("owner_id", owner_id), eq("is_read", False)],
                {"is_read": True, "updated_at": now},
            )

            global_rows = await self.store.query(GLOBAL_NOTIFICATIONS)
            status_rows = await self.store.query(GLOBAL_READ_STATUS, [eq("owner_id", owner_id)])
            statuses = {}
            for row in status_rows:
                status = read_status_from_row(row)
                statuses[status.global_notification_id] = status

            for row in global_rows:
                global_id = str(row["id"])
                status = statuses.get(global_id)
                if status is None:
                    await self.store.insert(
                        GLOBAL_READ_STATUS,
                        {
                            "global_notification_id": global_id,
                            "owner_id": owner_id,
                            "is_read": True,
                            "created_at": now,
                            "updated_at": now,
                        },
                    )
                elif not status.is_read:
                    await self.store.update(
                        GLOBAL_READ_STATUS,
                        [eq("id", status.id)],
                        {"is_read": True, "updated_at": now},
                    )
        except DomainException as e:
            logger.error(f"Error marking all notifications as read: {e}", extra={"owner_id": owner_id})
            return False

        logger.info("All notifications marked as read", extra={"owner_id": owner_id})
        return True
