"""Installment due-date reminders: schedule, classify, deduplicate, create"""

import logging
import time
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Set, Tuple
from coop_notify.config import settings
from coop_notify.domain.due_soon import classify_due_soon
from coop_notify.domain.exceptions import DecodeError, DomainException
from coop_notify.domain.installments import generate_installment_schedule, installment_amount
from coop_notify.domain.models import KIND_DUE_DATE, Loan
from coop_notify.domain.payloads import DueDateReminderPayload, decode_reminder_payload, encode_reminder_payload
from coop_notify.infrastructure.observability.logging import log_reconcile_summary
from coop_notify.infrastructure.observability.metrics import reconcile_failures_counter, reminders_created_counter
from coop_notify.infrastructure.store.base import LOANS, TRANSACTION_NOTIFICATIONS, RemoteStore, eq, gte
from coop_notify.infrastructure.store.rows import loan_from_row
from coop_notify.utils.date_utils import ensure_utc, format_long_date, utc_now

logger = logging.getLogger(__name__)

ALL_OWNERS = "all"

TODAY_TITLE = "Payment due today"
UPCOMING_TITLE = "Upcoming payment reminder"


class InstallmentReminderService:
    """Creates at most one due-date reminder per (loan, installment date)"""

    def __init__(
        self,
        store: RemoteStore,
        lookahead_days: Optional[int] = None,
        lookback_days: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.lookahead_days = lookahead_days if lookahead_days is not None else settings.reminder_lookahead_days
        self.lookback_days = lookback_days if lookback_days is not None else settings.reminder_lookback_days
        self.clock = clock

    async def reconcile_loans(self, owner_id: str = ALL_OWNERS, now: Optional[datetime] = None) -> int:
        """
        Reconcile every active loan, for one owner or for all owners.

        A failure on one loan is logged and the batch carries on.

        Returns:
            Number of reminders created
        """
        start_time = time.time()
        now = ensure_utc(now) if now is not None else self.clock()

        filters = [eq("status", "active")]
        if owner_id != ALL_OWNERS:
            filters.append(eq("owner_id", owner_id))

        try:
            rows = await self.store.query(LOANS, filters)
        except DomainException as e:
            reconcile_failures_counter.inc()
            logger.error(f"Error fetching active loans: {e}", extra={"owner_id": owner_id})
            return 0

        created = 0
        for row in rows:
            try:
                loan = loan_from_row(row)
            except DecodeError as e:
                logger.warning(f"Skipping malformed loan row: {e}", extra={"loan_id": row.get("id")})
                continue
            created += await self.reconcile(loan, now)

        duration_ms = (time.time() - start_time) * 1000
        log_reconcile_summary(owner_id, len(rows), created, duration_ms)
        return created

    async def reconcile(self, loan: Loan, now: Optional[datetime] = None) -> int:
        """
        Create the missing due-date reminders for one loan.

        Flow:
        1. Derive the installment schedule and classify it against today
        2. Read reminders created for the owner within the lookback window
        3. Create a reminder for each today/upcoming installment not yet notified

        The existing-reminder read always completes before any write. Remote
        failures are logged and end the run for this loan.

        Returns:
            Number of reminders created
        """
        now = ensure_utc(now) if now is not None else self.clock()
        log_context = {"loan_id": loan.id, "owner_id": loan.owner_id}

        schedule = generate_installment_schedule(loan)
        due_soon = classify_due_soon(schedule, now.date(), self.lookahead_days)
        logger.debug(
            "Classified installment schedule",
            extra={**log_context, "installments": len(schedule), "upcoming": len(due_soon.upcoming)},
        )

        if not due_soon.has_candidates:
            return 0

        created = 0
        try:
            notified = await self._notified_installments(loan.owner_id, now)

            if due_soon.today is not None and (loan.id, due_soon.today) not in notified:
                await self._create_reminder(
                    loan,
                    due_soon.today,
                    TODAY_TITLE,
                    f"Your {loan.loan_type} loan installment is due today. Please make your payment as soon as possible.",
                    now,
                )
                reminders_created_counter.labels(kind="today").inc()
                created += 1

            for upcoming in due_soon.upcoming:
                if (loan.id, upcoming.due_date) in notified:
                    continue
                days = "day" if upcoming.days_until == 1 else "days"
                await self._create_reminder(
                    loan,
                    upcoming.due_date,
                    UPCOMING_TITLE,
                    f"Your {loan.loan_type} loan installment is due in {upcoming.days_until} {days}. "
                    "Please prepare your payment.",
                    now,
                )
                reminders_created_counter.labels(kind="upcoming").inc()
                created += 1

        except DomainException as e:
            reconcile_failures_counter.inc()
            logger.error(f"Error reconciling loan installments: {e}", extra=log_context)

        return created

    async def _notified_installments(self, owner_id: str, now: datetime) -> Set[Tuple[str, date]]:
        """(loan id, installment date) pairs already reminded within the lookback window"""
        since = now - timedelta(days=self.lookback_days)
        rows = await self.store.query(
            TRANSACTION_NOTIFICATIONS,
            [eq("owner_id", owner_id), eq("kind", KIND_DUE_DATE), gte("created_at", since)],
        )

        notified = set()
        for row in rows:
            try:
                payload = decode_reminder_payload(row.get("payload"))
            except DecodeError as e:
                # Undecodable reminders never match
                logger.debug(f"Ignoring reminder payload: {e}", extra={"notification_id": row.get("id")})
                continue
            notified.add(payload.dedup_key)
        return notified

    async def _create_reminder(
        self,
        loan: Loan,
        installment_date: date,
        title: str,
        message: str,
        now: datetime,
    ) -> None:
        """Insert one reminder stamped with the reconcile instant, so the lookback read sees it"""
        payload = DueDateReminderPayload(
            loan_id=loan.id,
            installment_date=installment_date,
            installment_amount=installment_amount(loan),
            loan_type=loan.loan_type,
            total_payment=loan.total_payment,
            remaining_payment=loan.remaining_payment,
        )
        await self.store.insert(
            TRANSACTION_NOTIFICATIONS,
            {
                "owner_id": loan.owner_id,
                "title": title,
                "message": f"{message} ({format_long_date(installment_date)})",
                "kind": KIND_DUE_DATE,
                "is_read": False,
                "payload": encode_reminder_payload(payload),
                "created_at": now,
                "updated_at": now,
            },
        )
        logger.info(
            "Due date reminder created",
            extra={"loan_id": loan.id, "owner_id": loan.owner_id, "installment_date": installment_date.isoformat()},
        )
