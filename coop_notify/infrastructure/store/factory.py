"""Build the configured remote store backend"""

import logging
from coop_notify.config import settings
from coop_notify.infrastructure.clients.postgrest import PostgrestStore
from coop_notify.infrastructure.database.session import create_engine, create_session_factory
from coop_notify.infrastructure.database.store import SqlStore
from coop_notify.infrastructure.store.base import RemoteStore
from coop_notify.infrastructure.store.memory import InMemoryStore, due_date_notifications

logger = logging.getLogger(__name__)


def build_store(backend: str | None = None) -> RemoteStore:
    """
    Create the store named by backend (defaults to settings.store_backend).

    Raises:
        ValueError: unknown backend name
    """
    backend = backend or settings.store_backend

    if backend == "sql":
        engine = create_engine()
        store: RemoteStore = SqlStore(create_session_factory(engine), engine=engine)
    elif backend == "postgrest":
        store = PostgrestStore()
    elif backend == "memory":
        store = InMemoryStore(functions={settings.due_date_function: due_date_notifications})
    else:
        raise ValueError(f"Unknown store backend: {backend}")

    logger.info("Remote store configured", extra={"backend": backend})
    return store
