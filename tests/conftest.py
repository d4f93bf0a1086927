"""Pytest fixtures for testing"""

import json
import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List
from fastapi.testclient import TestClient
from coop_notify.api.main import create_app
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.domain.models import KIND_DUE_DATE, KIND_TRANSACTION
from coop_notify.infrastructure.store.base import (
    GLOBAL_NOTIFICATIONS,
    LOANS,
    TRANSACTION_NOTIFICATIONS,
    TRANSACTIONS,
)
from coop_notify.infrastructure.store.memory import InMemoryStore, due_date_notifications
from coop_notify.services.notifications import NotificationService


# Fixed instant: the 2024-02-15 installment of the sample loan is due today
NOW = datetime(2024, 2, 15, 8, 0, tzinfo=timezone.utc)
OWNER = "user-123"


class SpyStore(InMemoryStore):
    """In-memory store that records every call and can be told to fail"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: List[tuple] = []
        self.fail_on: set = set()

    def _record(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if operation in self.fail_on or (operation, collection) in self.fail_on:
            raise TransientRemoteError(f"{operation} on {collection} unavailable")

    def count(self, operation: str, collection: str | None = None) -> int:
        return sum(1 for op, coll in self.calls if op == operation and (collection is None or coll == collection))

    @property
    def writes(self) -> List[tuple]:
        return [call for call in self.calls if call[0] in ("insert", "update")]

    async def query(self, collection, filters=(), order=None, limit=None):
        self._record("query", collection)
        return await super().query(collection, filters, order, limit)

    async def insert(self, collection, row):
        self._record("insert", collection)
        return await super().insert(collection, row)

    async def update(self, collection, filters, patch):
        self._record("update", collection)
        return await super().update(collection, filters, patch)

    async def call_server_function(self, name, args):
        self._record("rpc", name)
        return await super().call_server_function(name, args)


def loan_row(**overrides) -> dict:
    row = {
        "id": "loan-1",
        "owner_id": OWNER,
        "loan_type": "Productive",
        "status": "active",
        "amount": 2700000,
        "total_payment": 3000000,
        "remaining_payment": 3000000,
        "created_at": datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
        "due_date": date(2024, 4, 15),
    }
    row.update(overrides)
    return row


def notification_row(**overrides) -> dict:
    row = {
        "id": "123",
        "owner_id": OWNER,
        "title": "Deposit received",
        "message": "Your deposit of 500000 was received",
        "kind": KIND_TRANSACTION,
        "is_read": False,
        "payload": None,
        "created_at": NOW - timedelta(hours=2),
        "updated_at": NOW - timedelta(hours=2),
    }
    row.update(overrides)
    return row


def global_row(**overrides) -> dict:
    row = {
        "id": "global-1",
        "title": "Annual member meeting",
        "message": "The annual meeting is on 1 March",
        "kind": "announcement",
        "created_at": NOW - timedelta(days=1),
    }
    row.update(overrides)
    return row


def reminder_row(loan_id: str, installment_date: date, **overrides) -> dict:
    payload = {
        "loanId": loan_id,
        "installmentDate": installment_date.isoformat(),
        "installmentAmount": 1000000,
        "loanType": "Productive",
        "totalPayment": 3000000,
        "remainingPayment": 3000000,
    }
    row = notification_row(
        id=f"reminder-{loan_id}-{installment_date.isoformat()}",
        title="Payment due today",
        message="Your Productive loan installment is due today.",
        kind=KIND_DUE_DATE,
        payload=json.dumps(payload),
        created_at=NOW - timedelta(hours=1),
        updated_at=NOW - timedelta(hours=1),
    )
    row.update(overrides)
    return row


def transaction_row(**overrides) -> dict:
    row = {
        "id": "tx-1",
        "owner_id": OWNER,
        "direction": "in",
        "category": "voluntary_savings",
        "description": "Monthly savings",
        "amount": 500000,
        "balance_before": 1000000,
        "balance_after": 1500000,
        "created_at": NOW - timedelta(days=2),
    }
    row.update(overrides)
    return row


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def store() -> SpyStore:
    """Spy store with the due-date server function registered"""
    return SpyStore(functions={"get_due_date_notifications": due_date_notifications})


@pytest.fixture
def seeded_store(store: SpyStore) -> SpyStore:
    store.seed(LOANS, loan_row())
    store.seed(TRANSACTION_NOTIFICATIONS, notification_row())
    store.seed(GLOBAL_NOTIFICATIONS, global_row())
    store.seed(TRANSACTIONS, transaction_row())
    return store


@pytest.fixture
def service(seeded_store: SpyStore, clock) -> NotificationService:
    return NotificationService(seeded_store, cache_ttl_seconds=300.0, clock=clock)


@pytest.fixture
def client(service: NotificationService) -> TestClient:
    """Create FastAPI test client over the in-memory store"""
    app = create_app(service=service)
    return TestClient(app)
