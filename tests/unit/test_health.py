"""Unit tests for the remote store connectivity probe"""

import asyncio
import pytest
from coop_notify.domain.exceptions import ConnectivityTimeoutError, TransientRemoteError
from coop_notify.infrastructure.store.health import check_connectivity, probe
from coop_notify.infrastructure.store.memory import InMemoryStore


class SlowStore(InMemoryStore):
    async def ping(self) -> None:
        await asyncio.sleep(1)


class BrokenStore(InMemoryStore):
    async def ping(self) -> None:
        raise TransientRemoteError("connection refused")


async def test_check_connectivity_success():
    status = await check_connectivity(InMemoryStore(), timeout=1.0)

    assert status.success is True
    assert status.message == "Connection successful"


async def test_probe_times_out():
    with pytest.raises(ConnectivityTimeoutError):
        await probe(SlowStore(), timeout=0.01)


async def test_check_connectivity_timeout_status():
    status = await check_connectivity(SlowStore(), timeout=0.01)

    assert status.success is False
    assert "timeout" in status.message.lower()


async def test_check_connectivity_remote_error():
    status = await check_connectivity(BrokenStore(), timeout=1.0)

    assert status.success is False
    assert status.message == "Connection error: connection refused"
