"""Supabase client utilities.

Provides a lazily created, module-level cached **async** Supabase client via
`get_supabase()`. The service-role client is used by administrative paths
that must see every row regardless of row-level security.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from supabase import AsyncClient, create_async_client

from nodex.core.config import get_settings

# ---- Async clients (singletons) ----------------------------------------------
_client_async: Optional[AsyncClient] = None
_service_client_async: Optional[AsyncClient] = None
_client_lock = asyncio.Lock()


async def get_supabase() -> AsyncClient:
    """Return a cached `AsyncClient` instance (lazy-created, task-safe)."""
    global _client_async
    if _client_async is not None:
        return _client_async

    async with _client_lock:
        if _client_async is None:
            settings = get_settings()
            try:
                _client_async = await create_async_client(
                    settings.supabase_url, settings.supabase_key
                )
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase async client") from exc
    return _client_async


async def get_service_supabase() -> AsyncClient:
    """Return a cached service-role `AsyncClient` (falls back to the anon key)."""
    global _service_client_async
    if _service_client_async is not None:
        return _service_client_async

    async with _client_lock:
        if _service_client_async is None:
            settings = get_settings()
            key = settings.supabase_service_role_key or settings.supabase_key
            try:
                _service_client_async = await create_async_client(settings.supabase_url, key)
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase service client") from exc
    return _service_client_async
