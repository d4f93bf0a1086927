"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Union

LOAN_STATUSES = ("proposed", "approved", "rejected", "active", "settled")

KIND_TRANSACTION = "transaction"
KIND_DUE_DATE = "due-date"
KIND_SYSTEM = "system"
KIND_ANNOUNCEMENT = "announcement"


class NotificationSource(str, Enum):
    """Collection a notification lives in"""

    TRANSACTION = "transaction"
    GLOBAL = "global"


@dataclass
class Loan:
    """Member financing record, read-only to this service"""

    id: str
    owner_id: str
    loan_type: str
    created_at: datetime
    due_date: date
    total_payment: int
    remaining_payment: int
    status: str  # proposed | approved | rejected | active | settled
    amount: int = 0


@dataclass
class TransactionNotification:
    """Per-owner notification, mutated in place when read"""

    id: str
    owner_id: str
    title: str
    message: str
    kind: str  # transaction | due-date | system | announcement
    is_read: bool
    created_at: datetime
    updated_at: datetime
    payload: Optional[Any] = None  # JSON text, or a dict when the store decodes JSONB
    source: NotificationSource = field(default=NotificationSource.TRANSACTION, init=False)


@dataclass
class GlobalNotification:
    """Shared notification; is_read is the viewing owner's state from the join rows"""

    id: str
    title: str
    message: str
    kind: str  # system | announcement
    created_at: datetime
    is_read: bool = False
    source: NotificationSource = field(default=NotificationSource.GLOBAL, init=False)


Notification = Union[TransactionNotification, GlobalNotification]


@dataclass
class GlobalReadStatus:
    """Per-owner read marker for a global notification"""

    id: str
    global_notification_id: str
    owner_id: str
    is_read: bool
    created_at: datetime
    updated_at: datetime


@dataclass
class Transaction:
    """Ledger entry on a member's savings account"""

    id: str
    owner_id: str
    direction: str  # in | out
    category: str
    description: str
    amount: int
    balance_before: int
    balance_after: int
    created_at: datetime


@dataclass
class UpcomingInstallment:
    """Installment falling inside the lookahead window but not today"""

    due_date: date
    days_until: int


@dataclass
class DueSoon:
    """Classifier output for one loan's schedule"""

    today: Optional[date] = None
    upcoming: List[UpcomingInstallment] = field(default_factory=list)

    @property
    def has_candidates(self) -> bool:
        return self.today is not None or bool(self.upcoming)


@dataclass
class ConnectionStatus:
    """Result of the remote store connectivity probe"""

    success: bool
    message: str
