"""Transaction listing and cache control endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from coop_notify.api.dependencies import get_notification_service, get_request_id
from coop_notify.api.v1.schemas import TransactionListResponse, TransactionSchema
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.services.notifications import NotificationService

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    request: Request,
    owner_id: str = Query(..., min_length=1),
    force_refresh: bool = Query(False),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        transactions = await service.get_transactions(owner_id, force_refresh=force_refresh)
    except TransientRemoteError as e:
        logging.error(f"Remote store error: {e}", extra={"request_id": get_request_id(request), "owner_id": owner_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    return TransactionListResponse(
        owner_id=owner_id,
        transactions=[TransactionSchema.from_domain(t) for t in transactions],
    )


@router.delete("/cache", status_code=204)
def invalidate_cache(
    owner_id: Optional[str] = Query(None, min_length=1),
    service: NotificationService = Depends(get_notification_service),
):
    """Drop one owner's cached lists; without owner_id every entry goes (logout)"""
    service.invalidate_cache(owner_id)
    return Response(status_code=204)
