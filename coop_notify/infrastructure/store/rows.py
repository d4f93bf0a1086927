"""Map raw remote rows onto domain dataclasses"""

from coop_notify.domain.exceptions import DecodeError
from coop_notify.domain.models import (
    GlobalNotification,
    GlobalReadStatus,
    Loan,
    Transaction,
    TransactionNotification,
)
from coop_notify.infrastructure.store.base import Row
from coop_notify.utils.date_utils import parse_date, parse_timestamp


def loan_from_row(row: Row) -> Loan:
    """
    Raises:
        DecodeError: row is missing fields or carries unparseable values
    """
    try:
        return Loan(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            loan_type=row["loan_type"],
            created_at=parse_timestamp(row["created_at"]),
            due_date=parse_date(row["due_date"]),
            total_payment=row["total_payment"],
            remaining_payment=row.get("remaining_payment") or 0,
            status=row["status"],
            amount=row.get("amount") or 0,
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Invalid loan row: {e}") from e


def transaction_notification_from_row(row: Row) -> TransactionNotification:
    try:
        created_at = parse_timestamp(row["created_at"])
        return TransactionNotification(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            title=row["title"],
            message=row["message"],
            kind=row["kind"],
            is_read=bool(row.get("is_read", False)),
            created_at=created_at,
            updated_at=parse_timestamp(row["updated_at"]) if row.get("updated_at") else created_at,
            payload=row.get("payload"),
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Invalid notification row: {e}") from e


def global_notification_from_row(row: Row, is_read: bool = False) -> GlobalNotification:
    try:
        return GlobalNotification(
            id=str(row["id"]),
            title=row["title"],
            message=row["message"],
            kind=row["kind"],
            created_at=parse_timestamp(row["created_at"]),
            is_read=is_read,
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Invalid global notification row: {e}") from e


def read_status_from_row(row: Row) -> GlobalReadStatus:
    try:
        created_at = parse_timestamp(row["created_at"])
        return GlobalReadStatus(
            id=str(row["id"]),
            global_notification_id=str(row["global_notification_id"]),
            owner_id=str(row["owner_id"]),
            is_read=bool(row["is_read"]),
            created_at=created_at,
            updated_at=parse_timestamp(row["updated_at"]) if row.get("updated_at") else created_at,
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Invalid read status row: {e}") from e


def transaction_from_row(row: Row) -> Transaction:
    try:
        return Transaction(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            direction=row["direction"],
            category=row["category"],
            description=row.get("description") or "",
            amount=row["amount"],
            balance_before=row.get("balance_before") or 0,
            balance_after=row.get("balance_after") or 0,
            created_at=parse_timestamp(row["created_at"]),
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Invalid transaction row: {e}") from e
