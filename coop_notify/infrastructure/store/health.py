"""Connectivity probe for the remote store"""

import asyncio
import logging
from coop_notify.domain.exceptions import ConnectivityTimeoutError, TransientRemoteError
from coop_notify.domain.models import ConnectionStatus
from coop_notify.infrastructure.store.base import RemoteStore

logger = logging.getLogger(__name__)


async def probe(store: RemoteStore, timeout: float = 10.0) -> None:
    """
    Race the store's ping against a fixed timeout.

    No retry follows a timeout; callers re-invoke.

    Raises:
        ConnectivityTimeoutError: ping did not finish within timeout seconds
        TransientRemoteError: ping failed
    """
    try:
        await asyncio.wait_for(store.ping(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ConnectivityTimeoutError(f"Connection timeout after {timeout}s") from e


async def check_connectivity(store: RemoteStore, timeout: float = 10.0) -> ConnectionStatus:
    """Probe the store and report the outcome instead of raising"""
    try:
        await probe(store, timeout)
    except ConnectivityTimeoutError as e:
        logger.warning("Remote store probe timed out", extra={"timeout_seconds": timeout})
        return ConnectionStatus(success=False, message=str(e))
    except TransientRemoteError as e:
        logger.error(f"Remote store probe failed: {e}")
        return ConnectionStatus(success=False, message=f"Connection error: {e}")

    return ConnectionStatus(success=True, message="Connection successful")
