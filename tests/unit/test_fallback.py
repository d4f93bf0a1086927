"""Unit tests for the server-function fallback read"""

import pytest
from unittest.mock import AsyncMock
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.services.fallback import FallbackRead


async def test_primary_rows_skip_fallback():
    primary = AsyncMock(return_value=[{"id": "1"}])
    fallback = AsyncMock(return_value=[{"id": "2"}])

    rows = await FallbackRead("due_date", primary, fallback)()

    assert rows == [{"id": "1"}]
    fallback.assert_not_awaited()


async def test_primary_failure_uses_fallback():
    primary = AsyncMock(side_effect=TransientRemoteError("function not deployed"))
    fallback = AsyncMock(return_value=[{"id": "2"}])

    rows = await FallbackRead("due_date", primary, fallback)()

    assert rows == [{"id": "2"}]
    fallback.assert_awaited_once()


async def test_primary_empty_uses_fallback():
    primary = AsyncMock(return_value=[])
    fallback = AsyncMock(return_value=[{"id": "2"}])

    rows = await FallbackRead("due_date", primary, fallback)()

    assert rows == [{"id": "2"}]


async def test_fallback_failure_propagates():
    primary = AsyncMock(side_effect=TransientRemoteError("down"))
    fallback = AsyncMock(side_effect=TransientRemoteError("also down"))

    with pytest.raises(TransientRemoteError, match="also down"):
        await FallbackRead("due_date", primary, fallback)()
