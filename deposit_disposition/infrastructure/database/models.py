"""SQLAlchemy ORM models for leases, inspections, damage items and dispositions"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, BigInteger, Boolean, Numeric, DateTime, Date, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Lease(Base):
    """Lease columns the disposition engine reads (deposit terms) or keeps in sync"""

    __tablename__ = "lease"

    id = Column(String(36), primary_key=True, default=_new_id)
    status = Column(Text, nullable=False, default="ACTIVE")
    start_date = Column(Date, nullable=False)
    move_out_date = Column(Date, nullable=True)
    security_deposit_cents = Column(BigInteger, nullable=False, default=0)
    deposit_paid_date = Column(Date, nullable=True)
    deposit_interest_rate = Column(Numeric(7, 5), nullable=True)
    deposit_bank_name = Column(Text, nullable=True)
    deposit_account_last4 = Column(String(4), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    disposition = relationship("DepositDisposition", back_populates="lease", uselist=False)
    inspections = relationship("Inspection", back_populates="lease", cascade="all, delete-orphan")


class Inspection(Base):
    """Move-in or move-out inspection of a unit"""

    __tablename__ = "inspection"

    id = Column(String(36), primary_key=True, default=_new_id)
    lease_id = Column(String(36), ForeignKey("lease.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Text, nullable=False)  # MOVE_IN | MOVE_OUT
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    lease = relationship("Lease", back_populates="inspections")
    items = relationship("InspectionItem", back_populates="inspection", cascade="all, delete-orphan")
    damage_items = relationship("DamageItem", back_populates="inspection", cascade="all, delete-orphan")


class InspectionItem(Base):
    """Condition of one item in one room"""

    __tablename__ = "inspection_item"

    id = Column(String(36), primary_key=True, default=_new_id)
    inspection_id = Column(String(36), ForeignKey("inspection.id", ondelete="CASCADE"), nullable=False, index=True)
    room = Column(Text, nullable=False)
    item = Column(Text, nullable=False)
    condition = Column(Text, nullable=False)
    has_damage = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    inspection = relationship("Inspection", back_populates="items")


class DamageItem(Base):
    """Damage recorded on a move-out inspection"""

    __tablename__ = "damage_item"

    id = Column(String(36), primary_key=True, default=_new_id)
    inspection_id = Column(String(36), ForeignKey("inspection.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=True)
    repair_cost_cents = Column(BigInteger, nullable=False)
    is_normal_wear = Column(Boolean, nullable=False, default=False)
    is_pre_existing = Column(Boolean, nullable=False, default=False)
    photo_urls = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    move_in_item_id = Column(String(36), nullable=True)
    # Python-side default keeps microseconds so creation order is stable
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    inspection = relationship("Inspection", back_populates="damage_items")


class DepositDisposition(Base):
    """Deposit disposition, one per lease"""

    __tablename__ = "deposit_disposition"

    id = Column(String(36), primary_key=True, default=_new_id)
    lease_id = Column(String(36), ForeignKey("lease.id", ondelete="CASCADE"), nullable=False, unique=True)
    move_out_date = Column(Date, nullable=False)
    deadline_date = Column(Date, nullable=False, index=True)
    original_deposit_cents = Column(BigInteger, nullable=False)
    interest_accrued_cents = Column(BigInteger, nullable=False, default=0)
    total_deductions_cents = Column(BigInteger, nullable=False, default=0)
    refund_amount_cents = Column(BigInteger, nullable=False)
    itemized_deductions = Column(JSON, nullable=False, default=list)
    move_in_inspection_id = Column(String(36), ForeignKey("inspection.id"), nullable=True)
    move_out_inspection_id = Column(String(36), ForeignKey("inspection.id"), nullable=True, index=True)
    bank_name = Column(Text, nullable=True)
    account_last4 = Column(String(4), nullable=True)
    notes = Column(Text, nullable=True)
    sent_date = Column(Date, nullable=True)
    sent_method = Column(Text, nullable=True)
    tracking_number = Column(Text, nullable=True)
    refund_processed_date = Column(Date, nullable=True)
    refund_method = Column(Text, nullable=True)
    refund_check_number = Column(Text, nullable=True)
    dispute_reason = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="DRAFT")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now, onupdate=_utc_now)

    lease = relationship("Lease", back_populates="disposition")
