"""Unit tests for marking notifications read"""

import pytest
from datetime import timedelta
from coop_notify.infrastructure.store.base import (
    GLOBAL_NOTIFICATIONS,
    GLOBAL_READ_STATUS,
    TRANSACTION_NOTIFICATIONS,
)
from coop_notify.services.read_status import ReadStatusResolver
from conftest import NOW, OWNER, global_row, notification_row


@pytest.fixture
def resolver(seeded_store, clock) -> ReadStatusResolver:
    return ReadStatusResolver(seeded_store, clock=clock)


def _transaction(store, notification_id="123"):
    return next(r for r in store.rows(TRANSACTION_NOTIFICATIONS) if r["id"] == notification_id)


async def test_mark_transaction_with_source_and_owner(resolver, seeded_store):
    assert await resolver.mark_as_read("123", "transaction", OWNER) is True

    row = _transaction(seeded_store)
    assert row["is_read"] is True
    assert row["updated_at"] == NOW


async def test_auto_detect_transaction_only(resolver, seeded_store):
    """Test id present only in the transaction collection"""
    assert await resolver.mark_as_read("123") is True

    assert _transaction(seeded_store)["is_read"] is True
    assert seeded_store.count("query", GLOBAL_NOTIFICATIONS) == 0


async def test_auto_detect_global_creates_read_status(resolver, seeded_store):
    assert await resolver.mark_as_read("global-1", owner_id=OWNER) is True

    statuses = seeded_store.rows(GLOBAL_READ_STATUS)
    assert len(statuses) == 1
    assert statuses[0]["global_notification_id"] == "global-1"
    assert statuses[0]["owner_id"] == OWNER
    assert statuses[0]["is_read"] is True


async def test_global_existing_unread_status_is_updated(resolver, seeded_store):
    seeded_store.seed(
        GLOBAL_READ_STATUS,
        {
            "id": "status-1",
            "global_notification_id": "global-1",
            "owner_id": OWNER,
            "is_read": False,
            "created_at": NOW - timedelta(days=1),
            "updated_at": NOW - timedelta(days=1),
        },
    )

    assert await resolver.mark_as_read("global-1", "global", OWNER) is True

    statuses = seeded_store.rows(GLOBAL_READ_STATUS)
    assert len(statuses) == 1
    assert statuses[0]["is_read"] is True
    assert seeded_store.count("insert", GLOBAL_READ_STATUS) == 0


async def test_unknown_id_returns_false_without_writes(resolver, seeded_store):
    assert await resolver.mark_as_read("non-existent-id") is False

    assert seeded_store.writes == []


async def test_owner_mismatch_is_rejected(resolver, seeded_store):
    assert await resolver.mark_as_read("123", "transaction", "someone-else") is False

    assert _transaction(seeded_store)["is_read"] is False
    assert seeded_store.writes == []


async def test_global_without_owner_is_rejected(resolver, seeded_store):
    assert await resolver.mark_as_read("global-1", "global") is False

    assert seeded_store.rows(GLOBAL_READ_STATUS) == []


async def test_already_read_is_noop_success(resolver, seeded_store):
    earlier = NOW - timedelta(days=3)
    seeded_store.seed(
        TRANSACTION_NOTIFICATIONS,
        notification_row(id="read-1", is_read=True, updated_at=earlier),
    )

    assert await resolver.mark_as_read("read-1", owner_id=OWNER) is True

    assert _transaction(seeded_store, "read-1")["updated_at"] == earlier
    assert seeded_store.writes == []


async def test_unknown_source_returns_false(resolver, seeded_store):
    assert await resolver.mark_as_read("123", "broadcast", OWNER) is False

    assert seeded_store.calls == []


async def test_remote_failure_returns_false(resolver, seeded_store):
    seeded_store.fail_on.add("update")

    assert await resolver.mark_as_read("123", "transaction", OWNER) is False


async def test_mark_all_as_read(resolver, seeded_store):
    seeded_store.seed(TRANSACTION_NOTIFICATIONS, notification_row(id="124"))
    seeded_store.seed(TRANSACTION_NOTIFICATIONS, notification_row(id="other", owner_id="user-456"))
    seeded_store.seed(GLOBAL_NOTIFICATIONS, global_row(id="global-2"))

    assert await resolver.mark_all_as_read(OWNER) is True

    own = [r for r in seeded_store.rows(TRANSACTION_NOTIFICATIONS) if r["owner_id"] == OWNER]
    assert all(r["is_read"] for r in own)
    assert _transaction(seeded_store, "other")["is_read"] is False
    statuses = seeded_store.rows(GLOBAL_READ_STATUS)
    assert {s["global_notification_id"] for s in statuses} == {"global-1", "global-2"}
    assert all(s["is_read"] for s in statuses)


async def test_mark_all_as_read_failure_returns_false(resolver, seeded_store):
    seeded_store.fail_on.add(("query", GLOBAL_NOTIFICATIONS))

    assert await resolver.mark_all_as_read(OWNER) is False
