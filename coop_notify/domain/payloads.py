"""Structured payload stored inside due-date reminder notifications"""

from datetime import date, datetime
from typing import Any, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from coop_notify.domain.exceptions import DecodeError


class DueDateReminderPayload(BaseModel):
    """
    Reminder metadata serialized as JSON text in the notification payload.

    Keys are camelCase on the wire so rows written by earlier mobile clients
    still deduplicate against ours.
    """

    model_config = ConfigDict(populate_by_name=True)

    loan_id: str = Field(..., alias="loanId")
    installment_date: date = Field(..., alias="installmentDate")
    installment_amount: int = Field(..., alias="installmentAmount")
    loan_type: str = Field(..., alias="loanType")
    total_payment: int | float = Field(..., alias="totalPayment")
    remaining_payment: int | float = Field(..., alias="remainingPayment")

    @field_validator("installment_date", mode="before")
    @classmethod
    def _calendar_day(cls, value: Any) -> Any:
        # Older rows carry a full ISO timestamp
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @property
    def dedup_key(self) -> Tuple[str, date]:
        return self.loan_id, self.installment_date


def encode_reminder_payload(payload: DueDateReminderPayload) -> str:
    """Serialize payload to the JSON text stored on the notification row"""
    return payload.model_dump_json(by_alias=True)


def decode_reminder_payload(raw: Any) -> DueDateReminderPayload:
    """
    Decode a notification payload (JSON text or already-decoded JSONB dict).

    Raises:
        DecodeError: payload missing, not JSON, or missing required fields
    """
    if raw is None:
        raise DecodeError("Notification has no payload")

    try:
        if isinstance(raw, (str, bytes)):
            return DueDateReminderPayload.model_validate_json(raw)
        return DueDateReminderPayload.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Invalid reminder payload: {e.error_count()} error(s)") from e
