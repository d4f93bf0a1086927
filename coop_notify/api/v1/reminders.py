"""POST /v1/reminders/reconcile - installment reminder trigger"""

import time
import logging
from fastapi import APIRouter, Depends, Request

from coop_notify.api.dependencies import get_notification_service, get_request_id
from coop_notify.api.v1.schemas import ReconcileRequest, ReconcileResponse
from coop_notify.services.notifications import NotificationService

router = APIRouter()


@router.post("/reminders/reconcile", response_model=ReconcileResponse)
async def reconcile_reminders(
    request: Request,
    request_body: ReconcileRequest,
    service: NotificationService = Depends(get_notification_service),
):
    """
    Create missing due-date reminders for one owner's active loans, or all.

    Called by the session bootstrap and by the periodic scheduler. Per-loan
    failures are logged and skipped, so this endpoint reports a count
    rather than an error.
    """
    start_time = time.time()
    created = await service.reconcile_loans(request_body.owner_id, request_body.now)

    logging.info(
        "Reconcile request handled",
        extra={
            "request_id": get_request_id(request),
            "owner_id": request_body.owner_id,
            "reminders_created": created,
            "duration_ms": round((time.time() - start_time) * 1000, 2),
        },
    )
    return ReconcileResponse(owner_id=request_body.owner_id, reminders_created=created)
