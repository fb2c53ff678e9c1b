"""Shared FastAPI dependencies for authentication and service wiring."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nodex.core.config import get_settings
from nodex.db.client import get_service_supabase, get_supabase
from nodex.db.store import EntityStore
from nodex.features.notifications.service import NotificationService
from nodex.features.profiles.repository import ProfileRepository
from nodex.features.profiles.schemas import Role
from nodex.features.workflow.schemas import Actor
from nodex.features.workflow.service import WorkflowService, get_workflow_service

logger = logging.getLogger("auth.deps")
security = HTTPBearer(auto_error=True)

_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service


def get_workflow() -> WorkflowService:
    return get_workflow_service()


def get_admin_workflow() -> WorkflowService:
    """Workflow bound to the service-role client; cascading deletes cross RLS boundaries."""
    return WorkflowService(EntityStore(client_factory=get_service_supabase))


def get_profiles() -> ProfileRepository:
    return ProfileRepository()


async def get_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    x_acting_role: Optional[str] = Header(default=None),
    profiles: ProfileRepository = Depends(get_profiles),
) -> Actor:
    """Resolve the bearer token to a user and pick the role they act under.

    Users holding several roles (a faculty member who is also a counsellor)
    choose one with the ``X-Acting-Role`` header; otherwise the first
    assigned role is used.
    """
    client = await get_supabase()
    try:
        t0 = time.perf_counter()
        auth_user = await asyncio.wait_for(
            client.auth.get_user(credentials.credentials), timeout=get_settings().query_timeout
        )
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("auth.get_user_ms=%d", ms)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials") from exc

    if not auth_user or not auth_user.user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials")

    user_id = str(auth_user.user.id)
    roles = await profiles.get_roles(user_id)
    if not roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned to this user")

    role = roles[0]
    if x_acting_role:
        try:
            role = Role(x_acting_role.strip().lower())
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown role: {x_acting_role}")
        if role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"User does not hold the {role.value} role")

    actor = Actor(user_id=user_id, role=role)
    request.state.actor = actor
    logger.info(
        "auth_resolved user_id=%s role=%s request_id=%s path=%s",
        actor.user_id,
        actor.role.value,
        getattr(request.state, "request_id", None),
        request.url.path,
    )
    return actor
