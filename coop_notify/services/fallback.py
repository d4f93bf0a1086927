"""Two-step read strategy: server-side function first, direct query as fallback"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.infrastructure.observability.metrics import aggregation_fallback_counter
from coop_notify.infrastructure.store.base import Row

logger = logging.getLogger(__name__)

RowsReader = Callable[[], Awaitable[List[Row]]]


@dataclass
class FallbackRead:
    """
    Read rows through a primary callable, falling back when it fails or is empty.

    The primary is usually a server function that may not be deployed; the
    fallback is an equivalent direct query. Errors from the fallback propagate.
    """

    name: str
    primary: RowsReader
    fallback: RowsReader

    async def __call__(self) -> List[Row]:
        try:
            rows = await self.primary()
        except TransientRemoteError as e:
            logger.info(f"Primary read '{self.name}' failed, using fallback: {e}")
        else:
            if rows:
                return rows
            logger.debug(f"Primary read '{self.name}' returned no rows, using fallback")

        aggregation_fallback_counter.labels(read=self.name).inc()
        return await self.fallback()
