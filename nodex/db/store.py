"""Entity store adapter over the Supabase query builder.

All workflow persistence goes through ``EntityStore`` so timeouts, row-level
authorization denials and constraint violations surface as the workflow's own
error types instead of transport exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from postgrest.exceptions import APIError

from nodex.common.errors import (
    DuplicateRecordError,
    ForbiddenError,
    StorageTimeoutError,
    StoreError,
)
from nodex.core.config import get_settings
from nodex.db.client import get_supabase

logger = logging.getLogger("db.store")

ClientFactory = Callable[[], Awaitable[Any]]
Filters = Mapping[str, Any]

_FORBIDDEN_CODES = {"42501", "PGRST301", "PGRST302"}
_UNIQUE_VIOLATION = "23505"


def _apply_filters(query, filters: Optional[Filters]):
    for column, value in (filters or {}).items():
        if value is None:
            query = query.is_(column, "null")
        elif isinstance(value, (list, tuple, set, frozenset)):
            query = query.in_(column, list(value))
        else:
            query = query.eq(column, value)
    return query


def _has_empty_in(filters: Optional[Filters]) -> bool:
    return any(
        isinstance(v, (list, tuple, set, frozenset)) and not v
        for v in (filters or {}).values()
    )


def _translate_api_error(exc: APIError, op: str) -> Exception:
    code = str(getattr(exc, "code", "") or "")
    message = str(getattr(exc, "message", "") or exc)
    if code in _FORBIDDEN_CODES or "permission denied" in message.lower():
        return ForbiddenError(f"Store denied {op}: {message}")
    if code == _UNIQUE_VIOLATION:
        return DuplicateRecordError(f"Unique constraint violated during {op}: {message}")
    return StoreError(f"Store failure during {op}: {message}")


class EntityStore:
    """read / insert / update / delete against named tables.

    Each call accepts an optional ``timeout`` (seconds); when omitted the
    configured ``SUPABASE_QUERY_TIMEOUT`` applies.
    """

    def __init__(self, client_factory: ClientFactory = get_supabase, timeout: Optional[float] = None):
        self._client_factory = client_factory
        self._timeout = timeout

    def _resolve_timeout(self, timeout: Optional[float]) -> float:
        if timeout is not None:
            return timeout
        if self._timeout is not None:
            return self._timeout
        return get_settings().query_timeout

    async def _exec(self, build: Callable[[Any], Any], op: str, timeout: Optional[float]):
        limit = self._resolve_timeout(timeout)
        t0 = time.perf_counter()
        try:
            client = await asyncio.wait_for(self._client_factory(), timeout=limit)
            query = build(client)
            resp = await asyncio.wait_for(query.execute(), timeout=limit)
        except asyncio.TimeoutError as exc:
            raise StorageTimeoutError(f"Store {op} timed out after {limit}s") from exc
        except APIError as exc:
            raise _translate_api_error(exc, op) from exc
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("supabase_%s_ms=%d", op, ms)
        return resp

    async def read(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        columns: str = "*",
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        if _has_empty_in(filters):
            return []

        def build(client):
            query = _apply_filters(client.table(table).select(columns), filters)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            return query

        resp = await self._exec(build, f"{table}.select", timeout)
        return list(getattr(resp, "data", None) or [])

    async def insert(
        self,
        table: str,
        rows: Dict[str, Any] | Iterable[Dict[str, Any]],
        *,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        payload = [rows] if isinstance(rows, dict) else list(rows)
        if not payload:
            return []
        resp = await self._exec(
            lambda client: client.table(table).insert(payload), f"{table}.insert", timeout
        )
        return list(getattr(resp, "data", None) or [])

    async def update(
        self,
        table: str,
        filters: Filters,
        patch: Dict[str, Any],
        *,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        if not filters:
            raise StoreError(f"Refusing unfiltered update on {table}")
        if _has_empty_in(filters):
            return []
        resp = await self._exec(
            lambda client: _apply_filters(client.table(table).update(patch), filters),
            f"{table}.update",
            timeout,
        )
        return list(getattr(resp, "data", None) or [])

    async def delete(
        self,
        table: str,
        filters: Filters,
        *,
        timeout: Optional[float] = None,
    ) -> int:
        if not filters:
            raise StoreError(f"Refusing unfiltered delete on {table}")
        if _has_empty_in(filters):
            return 0
        resp = await self._exec(
            lambda client: _apply_filters(client.table(table).delete(), filters),
            f"{table}.delete",
            timeout,
        )
        return len(getattr(resp, "data", None) or [])
