"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class DispositionStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    SENT = "SENT"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    DISPUTED = "DISPUTED"


class SendMethod(str, Enum):
    CERTIFIED_MAIL = "CERTIFIED_MAIL"
    REGULAR_MAIL = "REGULAR_MAIL"
    EMAIL = "EMAIL"
    HAND_DELIVERED = "HAND_DELIVERED"


class RefundMethod(str, Enum):
    CHECK = "CHECK"
    ACH = "ACH"
    CASH = "CASH"


class InspectionType(str, Enum):
    MOVE_IN = "MOVE_IN"
    MOVE_OUT = "MOVE_OUT"


class LeaseStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MONTH_TO_MONTH = "MONTH_TO_MONTH"
    EXPIRED = "EXPIRED"
    TERMINATED = "TERMINATED"


@dataclass
class LeaseDeposit:
    """Deposit terms recorded on the lease (read-only input)"""

    lease_id: str
    amount_cents: int
    lease_start_date: date
    paid_date: Optional[date] = None
    interest_rate: Optional[Decimal] = None
    bank_name: Optional[str] = None
    account_last4: Optional[str] = None

    @property
    def effective_paid_date(self) -> date:
        """Deposit date used for interest; the lease start when never recorded"""
        return self.paid_date or self.lease_start_date


@dataclass
class Inspection:
    """Inspection header (items are fetched separately as a snapshot)"""

    id: str
    lease_id: str
    type: InspectionType


@dataclass
class InspectionItem:
    """Condition of one item in one room at inspection time"""

    room: str
    item: str
    condition: str
    has_damage: bool = False
    id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.room}|{self.item}"


@dataclass
class DamageItem:
    """Damage found at move-out, possibly deductible from the deposit"""

    id: str
    inspection_id: str
    description: str
    repair_cost_cents: int
    location: Optional[str] = None
    is_normal_wear: bool = False
    is_pre_existing: bool = False
    photo_urls: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    move_in_item_id: Optional[str] = None


@dataclass(frozen=True)
class ItemizedDeduction:
    """Single line of the itemization sent to the tenant"""

    description: str
    location: Optional[str]
    amount_cents: int
    notes: Optional[str]

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "location": self.location,
            "amount_cents": self.amount_cents,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ItemizedDeduction":
        return cls(
            description=data["description"],
            location=data.get("location"),
            amount_cents=data["amount_cents"],
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class DispositionTotals:
    """Output of the disposition calculator"""

    total_deductions_cents: int
    refund_amount_cents: int
    itemized_deductions: List[ItemizedDeduction]


@dataclass
class Disposition:
    """Lease-end deposit disposition record (one per lease)"""

    id: str
    lease_id: str
    move_out_date: date
    deadline_date: date
    original_deposit_cents: int
    interest_accrued_cents: int
    total_deductions_cents: int
    refund_amount_cents: int
    status: DispositionStatus = DispositionStatus.DRAFT
    itemized_deductions: List[ItemizedDeduction] = field(default_factory=list)
    move_in_inspection_id: Optional[str] = None
    move_out_inspection_id: Optional[str] = None
    bank_name: Optional[str] = None
    account_last4: Optional[str] = None
    notes: Optional[str] = None
    sent_date: Optional[date] = None
    sent_method: Optional[SendMethod] = None
    tracking_number: Optional[str] = None
    refund_processed_date: Optional[date] = None
    refund_method: Optional[RefundMethod] = None
    refund_check_number: Optional[str] = None
    dispute_reason: Optional[str] = None


@dataclass
class ComparisonRow:
    """Move-in vs move-out pairing for one (room, item)"""

    room: str
    item: str
    move_in: Optional[InspectionItem]
    move_out: Optional[InspectionItem]
    condition_changed: bool
    damage_added: bool = False
    item_removed: bool = False


@dataclass
class InspectionComparison:
    """Result of comparing move-in and move-out inspections"""

    rows: List[ComparisonRow]
    missing_move_in: bool = False
    missing_move_out: bool = False


@dataclass
class ComplianceStatus:
    """Deadline and disclosure state of a disposition"""

    deadline_date: date
    days_until_deadline: int
    is_overdue: bool
    is_urgent: bool
    is_sent: bool
    missing_disclosures: List[str]
    deductions_exceed_deposit: bool


@dataclass
class MoveOutStatus:
    """Move-out progress for a lease; disposition is None until initiated"""

    lease_id: str
    status: str
    disposition: Optional[Disposition] = None
    damage_items: List[DamageItem] = field(default_factory=list)


@dataclass
class DepositStats:
    """Portfolio view of deposits still held and dispositions still owed"""

    as_of: date
    total_deposits_held_cents: int
    total_interest_accrued_cents: int
    active_deposits_count: int
    pending_dispositions: int
    interest_due_soon: int
    default_interest_rate: Decimal
