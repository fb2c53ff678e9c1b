from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from nodex.common.deps import get_actor, get_notification_service
from nodex.features.workflow.schemas import Actor
from .routing import notifications_route
from .schemas import NotificationInbox
from .service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationInbox)
async def list_notifications(
    unread: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    actor: Actor = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.list_for_user(actor.user_id, only_unread=unread, limit=limit)


@router.get("/unread-count")
async def unread_count(
    actor: Actor = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
):
    count = await service.unread_count(actor.user_id)
    return {"count": count, "route": notifications_route(actor.role)}


@router.post("/read-all")
async def mark_all_read(
    actor: Actor = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
):
    updated = await service.mark_all_read(actor.user_id)
    return {"updated": updated}


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    actor: Actor = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
):
    if not await service.mark_read(notification_id, actor.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"status": "ok"}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    actor: Actor = Depends(get_actor),
    service: NotificationService = Depends(get_notification_service),
):
    if not await service.delete_notification(notification_id, actor.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"status": "ok"}
