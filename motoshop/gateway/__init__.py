"""
Backend gateway: the hosted platform's auth, tables and storage, consumed
through its public contracts.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import httpx
from sqlalchemy.orm import sessionmaker

from motoshop.core.config import Settings
from motoshop.gateway.auth import AuthClient, AuthEvent, AuthSession, AuthUser
from motoshop.gateway.storage import StorageClient
from motoshop.gateway.tables import OrderBy, TableStore

logger = logging.getLogger(__name__)


@dataclass
class Backend:
    """Per-workspace handles on the platform."""
    auth: AuthClient
    tables: TableStore
    storage: StorageClient


def create_backend(config: Settings, http: httpx.Client, session_factory: sessionmaker) -> Backend:
    """
    Wire one set of platform clients. Missing URL or key still yields
    clients; their calls fail with GatewayError.
    """
    auth = AuthClient(http, config.SUPABASE_URL, config.SUPABASE_ANON_KEY)

    def access_token() -> Optional[str]:
        session = auth.current_session
        return session.access_token if session else None

    storage = StorageClient(
        http, config.SUPABASE_URL, config.SUPABASE_ANON_KEY, config.STORAGE_BUCKET, access_token
    )
    return Backend(auth=auth, tables=TableStore(session_factory), storage=storage)


__all__ = [
    "AuthClient",
    "AuthEvent",
    "AuthSession",
    "AuthUser",
    "Backend",
    "OrderBy",
    "StorageClient",
    "TableStore",
    "create_backend",
]
