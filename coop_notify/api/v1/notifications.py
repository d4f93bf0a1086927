"""Notification listing and read-state endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from coop_notify.api.dependencies import get_notification_service, get_request_id
from coop_notify.api.v1.schemas import (
    MarkAllReadRequest,
    MarkReadRequest,
    MarkReadResponse,
    NotificationListResponse,
    NotificationSchema,
)
from coop_notify.domain.exceptions import DomainException, TransientRemoteError
from coop_notify.services.notifications import NotificationService, unread_count

router = APIRouter()


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    request: Request,
    owner_id: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, gt=0, le=200),
    force_refresh: bool = Query(False),
    service: NotificationService = Depends(get_notification_service),
):
    """Owner's transaction, global and due-date notifications, newest first"""
    request_id = get_request_id(request)

    try:
        notifications = await service.get_notifications(owner_id, limit=limit, force_refresh=force_refresh)
    except TransientRemoteError as e:
        logging.error(f"Remote store error: {e}", extra={"request_id": request_id, "owner_id": owner_id})
        raise HTTPException(status_code=503, detail="Notification store unavailable")
    except DomainException as e:
        logging.error(f"Unexpected domain error: {e}", extra={"request_id": request_id, "owner_id": owner_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return NotificationListResponse(
        owner_id=owner_id,
        unread_count=unread_count(notifications),
        notifications=[NotificationSchema.from_domain(n) for n in notifications],
    )


@router.post("/notifications/read-all", response_model=MarkReadResponse)
async def mark_all_notifications_read(
    request_body: MarkAllReadRequest,
    service: NotificationService = Depends(get_notification_service),
):
    success = await service.mark_all_as_read(request_body.owner_id)
    return MarkReadResponse(success=success)


@router.post("/notifications/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: str,
    request_body: MarkReadRequest,
    service: NotificationService = Depends(get_notification_service),
):
    """
    Mark a notification read.

    Always answers 200; success=false covers not found, owner mismatch and
    remote failures alike.
    """
    success = await service.mark_as_read(notification_id, request_body.source, request_body.owner_id)
    return MarkReadResponse(success=success)
