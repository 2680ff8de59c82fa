"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from walletdesk.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    email = Column(String(100), unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    last_login_at = Column(DateTime(timezone=True))


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),)

    account_id = Column(String(36), ForeignKey("accounts.id"), primary_key=True)
    balance_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    is_frozen = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    account = relationship("Account")


class TransferIntent(Base):
    __tablename__ = "transfer_intents"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    sender_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    recipient_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False, index=True)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, completed, rejected
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    settled_at = Column(DateTime(timezone=True))

    sender = relationship("Account", foreign_keys=[sender_id])
    recipient = relationship("Account", foreign_keys=[recipient_id])


class TransactionRecord(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="USD")
    type = Column(String(20), nullable=False)  # income, expense, transfer
    name = Column(String(255), nullable=False)
    category = Column(String(100))
    status = Column(String(20), nullable=False, default="pending", index=True)
    note = Column(Text)
    transfer_id = Column(String(36), ForeignKey("transfer_intents.id"), nullable=True, index=True)
    counterparty_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    account = relationship("Account", foreign_keys=[account_id])
    transfer = relationship("TransferIntent")


class WalletTopupOrder(Base):
    __tablename__ = "wallet_topup_orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="pending")  # pending, success, failed
    payment_channel = Column(String(50))
    reference_no = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    confirmed_at = Column(DateTime(timezone=True))

    account = relationship("Account")


class AdminActivityLog(Base):
    __tablename__ = "admin_activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    target_table = Column(String(50), nullable=False)
    target_id = Column(String(36), nullable=False, index=True)
    old_values = Column(Text)
    new_values = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    recipient = Column(String(255), nullable=False, index=True)
    kind = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="sent")  # sent, failed
    message = Column(Text)
    payload = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class SettlementRun(Base):
    __tablename__ = "settlement_runs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    transaction_id = Column(String(36), nullable=False, index=True)
    target_status = Column(String(20), nullable=False)
    state = Column(String(40), nullable=False, default="initiated", index=True)
    transfer_id = Column(String(36), nullable=True)
    match_strategy = Column(String(20), nullable=True)  # linked, amount, none
    actor_id = Column(String(36), nullable=True)
    error = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    events = relationship(
        "SettlementEvent",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="SettlementEvent.id",
    )


class SettlementEvent(Base):
    __tablename__ = "settlement_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), ForeignKey("settlement_runs.id"), nullable=False, index=True)
    from_state = Column(String(40))
    to_state = Column(String(40), nullable=False)
    detail = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    run = relationship("SettlementRun", back_populates="events")
