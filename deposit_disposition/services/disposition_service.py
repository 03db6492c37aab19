"""Move-out lifecycle: initiate, recalculate, send, refund, dispute"""

import uuid
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from deposit_disposition.domain import compliance
from deposit_disposition.domain.calculator import calculate_disposition
from deposit_disposition.domain.comparison import compare_inspections
from deposit_disposition.domain.deposit_stats import summarize_deposits
from deposit_disposition.domain.exceptions import (
    DamageItemNotFoundError,
    DispositionAlreadyInitiatedError,
    DispositionNotFoundError,
    DispositionValidationError,
    InspectionNotFoundError,
    InvalidTransitionError,
    LeaseNotFoundError,
)
from deposit_disposition.domain.lifecycle import ensure_editable, ensure_recalculable, ensure_transition
from deposit_disposition.domain.models import (
    ComplianceStatus,
    DamageItem,
    DepositStats,
    Disposition,
    DispositionStatus,
    InspectionComparison,
    InspectionType,
    LeaseStatus,
    MoveOutStatus,
    RefundMethod,
    SendMethod,
)
from deposit_disposition.domain.policy import MINNESOTA, JurisdictionPolicy
from deposit_disposition.infrastructure.observability.logging import log_disposition_event
from deposit_disposition.infrastructure.observability.metrics import (
    damage_item_mutation_counter,
    disposition_initiated_counter,
    recalculation_counter,
    record_letter_sent,
    record_refund,
    rejected_transition_counter,
)
from deposit_disposition.services.store import DispositionStore
from deposit_disposition.utils.date_utils import today as system_today

NOT_STARTED = "NOT_STARTED"

UPDATABLE_DAMAGE_FIELDS = frozenset(
    {"description", "location", "repair_cost_cents", "is_normal_wear", "is_pre_existing", "photo_urls", "notes"}
)


def _validate_damage_fields(fields: Dict[str, Any]) -> None:
    if "description" in fields and not (fields["description"] or "").strip():
        raise DispositionValidationError("Description is required")
    if "repair_cost_cents" in fields:
        cost = fields["repair_cost_cents"]
        if cost is None or cost < 0:
            raise DispositionValidationError(f"Repair cost must be zero or more, got {cost}")
    for name in ("is_normal_wear", "is_pre_existing", "photo_urls"):
        if name in fields and fields[name] is None:
            raise DispositionValidationError(f"{name} cannot be null")


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise DispositionValidationError(f"Unknown {label}: {value}") from e


class DispositionService:
    """
    Orchestrates the deposit disposition lifecycle over a DispositionStore.

    Every public operation runs inside one store transaction. Damage-item
    changes and the recalculation they trigger commit together, so stale
    totals are never visible and a failed recalculation leaves the previous
    record untouched.
    """

    def __init__(
        self,
        store: DispositionStore,
        policy: JurisdictionPolicy = MINNESOTA,
        clock: Callable[[], date] = system_today,
        strict: bool = True,
    ):
        self.store = store
        self.policy = policy
        self.clock = clock
        self.strict = strict

    # Helpers

    async def _require_disposition(self, lease_id: str, for_update: bool = False) -> Disposition:
        disposition = await self.store.get_disposition_by_lease(lease_id, for_update=for_update)
        if disposition is None:
            raise DispositionNotFoundError(lease_id)
        return disposition

    async def _recalculate(self, disposition: Disposition) -> Disposition:
        """Single choke point for derived totals; caller holds the transaction"""
        items: List[DamageItem] = []
        if disposition.move_out_inspection_id:
            items = await self.store.list_damage_items(disposition.move_out_inspection_id)

        totals = calculate_disposition(
            disposition.original_deposit_cents,
            disposition.interest_accrued_cents,
            items,
        )
        updated = await self.store.update_disposition(
            disposition.lease_id,
            {
                "total_deductions_cents": totals.total_deductions_cents,
                "refund_amount_cents": totals.refund_amount_cents,
                "itemized_deductions": totals.itemized_deductions,
            },
        )
        recalculation_counter.inc()
        return updated

    def _check(self, check: Callable[..., None], *args: Any) -> None:
        try:
            check(*args, strict=self.strict)
        except InvalidTransitionError as e:
            rejected_transition_counter.labels(status=e.current).inc()
            raise

    # Initiation and status

    async def initiate_move_out(self, lease_id: str, move_out_date: date, notes: Optional[str] = None) -> Disposition:
        """
        Start the disposition for a lease.

        Flow:
        1. Load deposit terms (lease must exist, no disposition yet)
        2. Derive deadline and accrued interest
        3. Seed totals with no deductions, link the latest move-in inspection
        4. Record the move-out date on the lease

        Raises:
            LeaseNotFoundError, DispositionAlreadyInitiatedError, DispositionValidationError
        """
        async with self.store.transaction():
            deposit = await self.store.get_lease_deposit(lease_id)
            if deposit is None:
                raise LeaseNotFoundError(lease_id)
            if await self.store.get_disposition_by_lease(lease_id) is not None:
                raise DispositionAlreadyInitiatedError(lease_id)

            interest = compliance.calculate_deposit_interest(
                deposit.amount_cents,
                deposit.effective_paid_date,
                move_out_date,
                deposit.interest_rate,
                self.policy,
            )
            totals = calculate_disposition(deposit.amount_cents, interest, [])
            move_in = await self.store.latest_inspection(lease_id, InspectionType.MOVE_IN)

            disposition = await self.store.create_disposition(
                Disposition(
                    id=str(uuid.uuid4()),
                    lease_id=lease_id,
                    move_out_date=move_out_date,
                    deadline_date=compliance.calculate_deadline_date(move_out_date, self.policy),
                    original_deposit_cents=deposit.amount_cents,
                    interest_accrued_cents=interest,
                    total_deductions_cents=totals.total_deductions_cents,
                    refund_amount_cents=totals.refund_amount_cents,
                    itemized_deductions=totals.itemized_deductions,
                    move_in_inspection_id=move_in.id if move_in else None,
                    bank_name=deposit.bank_name,
                    account_last4=deposit.account_last4,
                    notes=notes,
                )
            )
            await self.store.set_lease_move_out_date(lease_id, move_out_date)

        disposition_initiated_counter.inc()
        log_disposition_event(
            "move_out_initiated",
            lease_id,
            disposition.status.value,
            disposition.refund_amount_cents,
            deadline_date=disposition.deadline_date.isoformat(),
            interest_accrued_cents=interest,
        )
        return disposition

    async def get_disposition(self, lease_id: str) -> Disposition:
        async with self.store.transaction():
            return await self._require_disposition(lease_id)

    async def get_move_out_status(self, lease_id: str) -> MoveOutStatus:
        """NOT_STARTED before initiation, otherwise the disposition with its damage items"""
        async with self.store.transaction():
            disposition = await self.store.get_disposition_by_lease(lease_id)
            if disposition is None:
                if await self.store.get_lease_deposit(lease_id) is None:
                    raise LeaseNotFoundError(lease_id)
                return MoveOutStatus(lease_id=lease_id, status=NOT_STARTED)

            items: List[DamageItem] = []
            if disposition.move_out_inspection_id:
                items = await self.store.list_damage_items(disposition.move_out_inspection_id)
            return MoveOutStatus(
                lease_id=lease_id,
                status=disposition.status.value,
                disposition=disposition,
                damage_items=items,
            )

    async def list_dispositions(
        self,
        status: Optional[DispositionStatus] = None,
        overdue_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Disposition], int]:
        """Page through dispositions, soonest deadline first"""
        if not 1 <= limit <= 100:
            raise DispositionValidationError(f"limit must be between 1 and 100, got {limit}")
        if offset < 0:
            raise DispositionValidationError(f"offset cannot be negative, got {offset}")

        async with self.store.transaction():
            return await self.store.list_dispositions(
                status=_coerce(DispositionStatus, status, "status") if status is not None else None,
                overdue_as_of=self.clock() if overdue_only else None,
                limit=limit,
                offset=offset,
            )

    # Calculation

    async def recalculate_disposition(self, lease_id: str) -> Disposition:
        """Recompute totals and itemization from current damage items; status unchanged"""
        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_recalculable, disposition.status)
            updated = await self._recalculate(disposition)

        log_disposition_event(
            "recalculated",
            lease_id,
            updated.status.value,
            updated.refund_amount_cents,
            total_deductions_cents=updated.total_deductions_cents,
        )
        return updated

    async def link_move_out_inspection(self, lease_id: str, inspection_id: str) -> Disposition:
        """Attach the move-out inspection whose damage items drive deductions"""
        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_editable, disposition.status, "link a move-out inspection")

            inspection = await self.store.get_inspection(inspection_id)
            if inspection is None:
                raise InspectionNotFoundError(inspection_id)
            if inspection.lease_id != lease_id:
                raise DispositionValidationError(f"Inspection {inspection_id} belongs to another lease")
            if inspection.type != InspectionType.MOVE_OUT:
                raise DispositionValidationError(f"Inspection {inspection_id} is not a move-out inspection")

            linked = await self.store.update_disposition(lease_id, {"move_out_inspection_id": inspection_id})
            updated = await self._recalculate(linked)

        log_disposition_event(
            "move_out_inspection_linked",
            lease_id,
            updated.status.value,
            updated.refund_amount_cents,
            inspection_id=inspection_id,
        )
        return updated

    # Damage items

    async def list_damage_items(self, inspection_id: str) -> List[DamageItem]:
        async with self.store.transaction():
            if await self.store.get_inspection(inspection_id) is None:
                raise InspectionNotFoundError(inspection_id)
            return await self.store.list_damage_items(inspection_id)

    async def _lock_owner(self, inspection_id: str, action: str) -> Optional[Disposition]:
        owner = await self.store.get_disposition_by_move_out_inspection(inspection_id, for_update=True)
        if owner is not None:
            self._check(ensure_editable, owner.status, action)
        return owner

    async def create_damage_item(
        self,
        inspection_id: str,
        description: str,
        repair_cost_cents: int,
        location: Optional[str] = None,
        is_normal_wear: bool = False,
        is_pre_existing: bool = False,
        photo_urls: Optional[List[str]] = None,
        notes: Optional[str] = None,
        move_in_item_id: Optional[str] = None,
    ) -> DamageItem:
        """Record damage on an inspection and refresh the owning disposition's totals"""
        _validate_damage_fields({"description": description, "repair_cost_cents": repair_cost_cents})

        async with self.store.transaction():
            if await self.store.get_inspection(inspection_id) is None:
                raise InspectionNotFoundError(inspection_id)
            owner = await self._lock_owner(inspection_id, "add damage items")

            item = await self.store.create_damage_item(
                DamageItem(
                    id=str(uuid.uuid4()),
                    inspection_id=inspection_id,
                    description=description.strip(),
                    repair_cost_cents=repair_cost_cents,
                    location=location,
                    is_normal_wear=is_normal_wear,
                    is_pre_existing=is_pre_existing,
                    photo_urls=list(photo_urls or []),
                    notes=notes,
                    move_in_item_id=move_in_item_id,
                )
            )
            if owner is not None:
                await self._recalculate(owner)

        damage_item_mutation_counter.labels(action="create").inc()
        return item

    async def update_damage_item(self, item_id: str, **changes: Any) -> DamageItem:
        unknown = set(changes) - UPDATABLE_DAMAGE_FIELDS
        if unknown:
            raise DispositionValidationError(f"Cannot update damage item fields: {', '.join(sorted(unknown))}")
        _validate_damage_fields(changes)
        if "description" in changes:
            changes["description"] = changes["description"].strip()

        async with self.store.transaction():
            existing = await self.store.get_damage_item(item_id)
            if existing is None:
                raise DamageItemNotFoundError(item_id)
            owner = await self._lock_owner(existing.inspection_id, "edit damage items")

            item = await self.store.update_damage_item(item_id, changes)
            if owner is not None:
                await self._recalculate(owner)

        damage_item_mutation_counter.labels(action="update").inc()
        return item

    async def delete_damage_item(self, item_id: str) -> None:
        async with self.store.transaction():
            existing = await self.store.get_damage_item(item_id)
            if existing is None:
                raise DamageItemNotFoundError(item_id)
            owner = await self._lock_owner(existing.inspection_id, "delete damage items")

            await self.store.delete_damage_item(item_id)
            if owner is not None:
                await self._recalculate(owner)

        damage_item_mutation_counter.labels(action="delete").inc()

    # Comparison

    async def compare_inspections(self, lease_id: str) -> InspectionComparison:
        async with self.store.transaction():
            if await self.store.get_lease_deposit(lease_id) is None:
                raise LeaseNotFoundError(lease_id)
            move_in = await self.store.get_inspection_snapshot(lease_id, InspectionType.MOVE_IN)
            move_out = await self.store.get_inspection_snapshot(lease_id, InspectionType.MOVE_OUT)
        return compare_inspections(move_in, move_out)

    # Lifecycle transitions

    async def submit_for_review(self, lease_id: str) -> Disposition:
        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_transition, disposition.status, DispositionStatus.PENDING_REVIEW, "submit for review")
            updated = await self.store.update_disposition(lease_id, {"status": DispositionStatus.PENDING_REVIEW})

        log_disposition_event("submitted_for_review", lease_id, updated.status.value, updated.refund_amount_cents)
        return updated

    async def send_disposition_letter(
        self,
        lease_id: str,
        method: SendMethod,
        tracking_number: Optional[str] = None,
    ) -> Disposition:
        """
        Record that the itemized letter went out. Clears overdue status for good,
        even when sent after the deadline.
        """
        method = _coerce(SendMethod, method, "send method")

        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_transition, disposition.status, DispositionStatus.SENT, "send the disposition letter")

            sent_on = self.clock()
            was_overdue = compliance.is_overdue(disposition.deadline_date, disposition.sent_date, sent_on)
            updated = await self.store.update_disposition(
                lease_id,
                {
                    "sent_date": sent_on,
                    "sent_method": method,
                    "tracking_number": tracking_number,
                    "status": DispositionStatus.SENT,
                },
            )

        record_letter_sent(method.value, was_overdue)
        log_disposition_event(
            "letter_sent",
            lease_id,
            updated.status.value,
            updated.refund_amount_cents,
            sent_method=method.value,
            sent_after_deadline=was_overdue,
        )
        return updated

    async def process_refund(
        self,
        lease_id: str,
        method: RefundMethod,
        amount_cents: int,
        check_number: Optional[str] = None,
    ) -> Disposition:
        """
        Record the refund payout. The supplied amount replaces the calculated
        refund (manual true-up) and the lease is marked terminated.
        """
        method = _coerce(RefundMethod, method, "refund method")
        if amount_cents is None or amount_cents < 0:
            raise DispositionValidationError(f"Refund amount must be zero or more, got {amount_cents}")

        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_transition, disposition.status, DispositionStatus.ACKNOWLEDGED, "process the refund")

            updated = await self.store.update_disposition(
                lease_id,
                {
                    "refund_processed_date": self.clock(),
                    "refund_method": method,
                    "refund_check_number": check_number,
                    "refund_amount_cents": amount_cents,
                    "status": DispositionStatus.ACKNOWLEDGED,
                },
            )
            await self.store.set_lease_status(lease_id, LeaseStatus.TERMINATED)

        record_refund(method.value, amount_cents)
        log_disposition_event(
            "refund_processed",
            lease_id,
            updated.status.value,
            updated.refund_amount_cents,
            refund_method=method.value,
            calculated_refund_cents=disposition.refund_amount_cents,
        )
        return updated

    async def record_dispute(self, lease_id: str, reason: Optional[str] = None) -> Disposition:
        """Tenant contested the itemization after the letter was sent"""
        async with self.store.transaction():
            disposition = await self._require_disposition(lease_id, for_update=True)
            self._check(ensure_transition, disposition.status, DispositionStatus.DISPUTED, "record a dispute")
            updated = await self.store.update_disposition(
                lease_id,
                {"status": DispositionStatus.DISPUTED, "dispute_reason": reason},
            )

        log_disposition_event("disputed", lease_id, updated.status.value, updated.refund_amount_cents)
        return updated

    # Deadline tracking (read-only)

    async def get_days_until_deadline(self, lease_id: str) -> int:
        disposition = await self.get_disposition(lease_id)
        return compliance.days_until_deadline(disposition.deadline_date, self.clock())

    async def is_overdue(self, lease_id: str) -> bool:
        disposition = await self.get_disposition(lease_id)
        return compliance.is_overdue(disposition.deadline_date, disposition.sent_date, self.clock())

    async def get_compliance_status(self, lease_id: str) -> ComplianceStatus:
        disposition = await self.get_disposition(lease_id)
        return compliance.assess_compliance(disposition, self.clock(), self.policy)

    # Portfolio

    async def get_deposit_stats(self, as_of: Optional[date] = None) -> DepositStats:
        """Deposits held, interest accrued to date and dispositions still owed"""
        as_of = as_of or self.clock()
        async with self.store.transaction():
            deposits = await self.store.list_held_deposits()
            pending = await self.store.count_leases_awaiting_disposition(as_of)
        return summarize_deposits(deposits, pending, as_of, self.policy)
