"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from deposit_disposition.domain.models import (
    ComparisonRow,
    ComplianceStatus,
    DamageItem,
    DepositStats,
    Disposition,
    DispositionStatus,
    InspectionComparison,
    InspectionItem,
    RefundMethod,
    SendMethod,
)
from deposit_disposition.domain.policy import JurisdictionPolicy


class InitiateMoveOutRequest(BaseModel):
    """Request body for POST /v1/move-out"""

    lease_id: str = Field(..., min_length=1, description="Lease identifier")
    move_out_date: date
    notes: Optional[str] = None


class LinkInspectionRequest(BaseModel):
    inspection_id: str = Field(..., min_length=1)


class SendLetterRequest(BaseModel):
    """Request body for POST /v1/dispositions/{lease_id}/send"""

    method: SendMethod
    tracking_number: Optional[str] = None


class ProcessRefundRequest(BaseModel):
    """Request body for POST /v1/dispositions/{lease_id}/refund"""

    method: RefundMethod
    amount_cents: int = Field(..., ge=0, description="Amount actually refunded, in cents")
    check_number: Optional[str] = None


class DisputeRequest(BaseModel):
    reason: Optional[str] = None


class CreateDamageItemRequest(BaseModel):
    """Request body for POST /v1/inspections/{inspection_id}/damage-items"""

    description: str = Field(..., min_length=1)
    repair_cost_cents: int = Field(..., ge=0)
    location: Optional[str] = None
    is_normal_wear: bool = False
    is_pre_existing: bool = False
    photo_urls: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    move_in_item_id: Optional[str] = None


class UpdateDamageItemRequest(BaseModel):
    """Partial update; only fields present in the body change"""

    description: Optional[str] = Field(None, min_length=1)
    repair_cost_cents: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    is_normal_wear: Optional[bool] = None
    is_pre_existing: Optional[bool] = None
    photo_urls: Optional[List[str]] = None
    notes: Optional[str] = None


class ItemizedDeductionSchema(BaseModel):
    description: str
    location: Optional[str] = None
    amount_cents: int
    notes: Optional[str] = None


class DispositionResponse(BaseModel):
    """Deposit disposition as returned by every lifecycle endpoint"""

    id: str
    lease_id: str
    status: DispositionStatus
    move_out_date: date
    deadline_date: date
    original_deposit_cents: int
    interest_accrued_cents: int
    total_deductions_cents: int
    refund_amount_cents: int
    itemized_deductions: List[ItemizedDeductionSchema]
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

    @classmethod
    def from_domain(cls, d: Disposition) -> "DispositionResponse":
        return cls(
            id=d.id,
            lease_id=d.lease_id,
            status=d.status,
            move_out_date=d.move_out_date,
            deadline_date=d.deadline_date,
            original_deposit_cents=d.original_deposit_cents,
            interest_accrued_cents=d.interest_accrued_cents,
            total_deductions_cents=d.total_deductions_cents,
            refund_amount_cents=d.refund_amount_cents,
            itemized_deductions=[ItemizedDeductionSchema(**line.to_dict()) for line in d.itemized_deductions],
            move_in_inspection_id=d.move_in_inspection_id,
            move_out_inspection_id=d.move_out_inspection_id,
            bank_name=d.bank_name,
            account_last4=d.account_last4,
            notes=d.notes,
            sent_date=d.sent_date,
            sent_method=d.sent_method,
            tracking_number=d.tracking_number,
            refund_processed_date=d.refund_processed_date,
            refund_method=d.refund_method,
            refund_check_number=d.refund_check_number,
            dispute_reason=d.dispute_reason,
        )


class DispositionListResponse(BaseModel):
    """Response for GET /v1/dispositions"""

    dispositions: List[DispositionResponse]
    total: int
    limit: int
    offset: int


class DamageItemResponse(BaseModel):
    id: str
    inspection_id: str
    description: str
    repair_cost_cents: int
    location: Optional[str] = None
    is_normal_wear: bool
    is_pre_existing: bool
    is_deductible: bool
    photo_urls: List[str]
    notes: Optional[str] = None
    move_in_item_id: Optional[str] = None

    @classmethod
    def from_domain(cls, item: DamageItem, is_deductible: bool) -> "DamageItemResponse":
        return cls(
            id=item.id,
            inspection_id=item.inspection_id,
            description=item.description,
            repair_cost_cents=item.repair_cost_cents,
            location=item.location,
            is_normal_wear=item.is_normal_wear,
            is_pre_existing=item.is_pre_existing,
            is_deductible=is_deductible,
            photo_urls=item.photo_urls,
            notes=item.notes,
            move_in_item_id=item.move_in_item_id,
        )


class MoveOutStatusResponse(BaseModel):
    """Response for GET /v1/move-out/{lease_id}"""

    lease_id: str
    status: str  # NOT_STARTED or a disposition status
    disposition: Optional[DispositionResponse] = None
    damage_items: List[DamageItemResponse] = Field(default_factory=list)


class DeadlineResponse(BaseModel):
    """Response for GET /v1/dispositions/{lease_id}/deadline"""

    lease_id: str
    deadline_date: date
    days_until_deadline: int
    is_overdue: bool
    is_urgent: bool
    is_sent: bool
    missing_disclosures: List[str]
    deductions_exceed_deposit: bool

    @classmethod
    def from_domain(cls, lease_id: str, status: ComplianceStatus) -> "DeadlineResponse":
        return cls(
            lease_id=lease_id,
            deadline_date=status.deadline_date,
            days_until_deadline=status.days_until_deadline,
            is_overdue=status.is_overdue,
            is_urgent=status.is_urgent,
            is_sent=status.is_sent,
            missing_disclosures=status.missing_disclosures,
            deductions_exceed_deposit=status.deductions_exceed_deposit,
        )


class InspectionItemSchema(BaseModel):
    room: str
    item: str
    condition: str
    has_damage: bool
    id: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, item: Optional[InspectionItem]) -> Optional["InspectionItemSchema"]:
        if item is None:
            return None
        return cls(
            room=item.room,
            item=item.item,
            condition=item.condition,
            has_damage=item.has_damage,
            id=item.id,
            notes=item.notes,
        )


class ComparisonRowSchema(BaseModel):
    room: str
    item: str
    move_in: Optional[InspectionItemSchema] = None
    move_out: Optional[InspectionItemSchema] = None
    condition_changed: bool
    damage_added: bool
    item_removed: bool

    @classmethod
    def from_domain(cls, row: ComparisonRow) -> "ComparisonRowSchema":
        return cls(
            room=row.room,
            item=row.item,
            move_in=InspectionItemSchema.from_domain(row.move_in),
            move_out=InspectionItemSchema.from_domain(row.move_out),
            condition_changed=row.condition_changed,
            damage_added=row.damage_added,
            item_removed=row.item_removed,
        )


class ComparisonResponse(BaseModel):
    """Response for GET /v1/dispositions/{lease_id}/comparison"""

    lease_id: str
    comparison: List[ComparisonRowSchema]
    missing_move_in: bool
    missing_move_out: bool

    @classmethod
    def from_domain(cls, lease_id: str, result: InspectionComparison) -> "ComparisonResponse":
        return cls(
            lease_id=lease_id,
            comparison=[ComparisonRowSchema.from_domain(row) for row in result.rows],
            missing_move_in=result.missing_move_in,
            missing_move_out=result.missing_move_out,
        )


class DepositStatsResponse(BaseModel):
    """Response for GET /v1/deposits/stats"""

    as_of: date
    total_deposits_held_cents: int
    total_interest_accrued_cents: int
    active_deposits_count: int
    pending_dispositions: int
    interest_due_soon: int
    default_interest_rate: Decimal

    @classmethod
    def from_domain(cls, stats: DepositStats) -> "DepositStatsResponse":
        return cls(
            as_of=stats.as_of,
            total_deposits_held_cents=stats.total_deposits_held_cents,
            total_interest_accrued_cents=stats.total_interest_accrued_cents,
            active_deposits_count=stats.active_deposits_count,
            pending_dispositions=stats.pending_dispositions,
            interest_due_soon=stats.interest_due_soon,
            default_interest_rate=stats.default_interest_rate,
        )


class DamageGuidanceResponse(BaseModel):
    """Classification guidance for whoever records damage items"""

    jurisdiction: str
    normal_wear_examples: List[str]
    deductible_damage_examples: List[str]
    required_disclosures: List[str]

    @classmethod
    def from_policy(cls, policy: JurisdictionPolicy) -> "DamageGuidanceResponse":
        return cls(
            jurisdiction=policy.name,
            normal_wear_examples=list(policy.normal_wear_examples),
            deductible_damage_examples=list(policy.deductible_damage_examples),
            required_disclosures=list(policy.required_disclosures),
        )
