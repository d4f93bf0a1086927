"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, List, Literal, Optional

from coop_notify.domain.models import GlobalNotification, Notification, Transaction


class MarkReadRequest(BaseModel):
    """Request body for POST /v1/notifications/{notification_id}/read"""

    owner_id: Optional[str] = Field(None, min_length=1, description="Member the read applies to")
    source: Optional[Literal["transaction", "global"]] = Field(
        None, description="Collection hint; omitted means auto-detect"
    )


class MarkAllReadRequest(BaseModel):
    """Request body for POST /v1/notifications/read-all"""

    owner_id: str = Field(..., min_length=1, description="Member identifier")


class MarkReadResponse(BaseModel):
    success: bool


class ReconcileRequest(BaseModel):
    """Request body for POST /v1/reminders/reconcile"""

    owner_id: str = Field("all", min_length=1, description="Member identifier, or 'all'")
    now: Optional[datetime] = Field(None, description="Evaluation instant; defaults to the current time")


class ReconcileResponse(BaseModel):
    owner_id: str
    reminders_created: int


class NotificationSchema(BaseModel):
    """Single notification from either collection"""

    id: str
    source: Literal["transaction", "global"]
    owner_id: Optional[str] = None
    title: str
    message: str
    kind: str
    is_read: bool
    created_at: datetime
    payload: Optional[Any] = None

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationSchema":
        if isinstance(notification, GlobalNotification):
            return cls(
                id=notification.id,
                source=notification.source.value,
                title=notification.title,
                message=notification.message,
                kind=notification.kind,
                is_read=notification.is_read,
                created_at=notification.created_at,
            )
        return cls(
            id=notification.id,
            source=notification.source.value,
            owner_id=notification.owner_id,
            title=notification.title,
            message=notification.message,
            kind=notification.kind,
            is_read=notification.is_read,
            created_at=notification.created_at,
            payload=notification.payload,
        )


class NotificationListResponse(BaseModel):
    """Response for GET /v1/notifications"""

    owner_id: str
    unread_count: int
    notifications: List[NotificationSchema]


class TransactionSchema(BaseModel):
    id: str
    direction: str
    category: str
    description: Optional[str] = None
    amount: float
    balance_before: float
    balance_after: float
    created_at: datetime

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionSchema":
        return cls(
            id=transaction.id,
            direction=transaction.direction,
            category=transaction.category,
            description=transaction.description,
            amount=transaction.amount,
            balance_before=transaction.balance_before,
            balance_after=transaction.balance_after,
            created_at=transaction.created_at,
        )


class TransactionListResponse(BaseModel):
    """Response for GET /v1/transactions"""

    owner_id: str
    transactions: List[TransactionSchema]
