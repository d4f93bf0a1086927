"""SQLAlchemy ORM models backing the SQL remote store"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class LoanRecord(Base):
    """Member loan (financing) record"""

    __tablename__ = "loan"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(Text, nullable=False, index=True)
    loan_type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="proposed", index=True)
    amount = Column(BigInteger, nullable=False, default=0)
    due_date = Column(Date, nullable=False)
    total_payment = Column(BigInteger, nullable=False)
    remaining_payment = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionNotificationRecord(Base):
    """Per-owner notification (transaction, due-date, ...)"""

    __tablename__ = "transaction_notification"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    kind = Column(Text, nullable=False, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    payload = Column(Text, nullable=True)  # JSON text
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GlobalNotificationRecord(Base):
    """Notification shared by every owner"""

    __tablename__ = "global_notification"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    kind = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GlobalReadStatusRecord(Base):
    """Lazily created read marker, one per (global notification, owner)"""

    __tablename__ = "global_read_status"
    __table_args__ = (UniqueConstraint("global_notification_id", "owner_id", name="uq_global_read_status_owner"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    global_notification_id = Column(
        String(36), ForeignKey("global_notification.id", ondelete="CASCADE"), nullable=False
    )
    owner_id = Column(Text, nullable=False, index=True)
    is_read = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRecord(Base):
    """Savings ledger entry"""

    __tablename__ = "member_transaction"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(Text, nullable=False, index=True)
    direction = Column(Text, nullable=False)  # in | out
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(BigInteger, nullable=False)
    balance_before = Column(BigInteger, nullable=False, default=0)
    balance_after = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
