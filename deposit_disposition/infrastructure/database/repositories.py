"""Data access layer for the disposition engine"""

from contextlib import asynccontextmanager
from datetime import date
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from deposit_disposition.domain.exceptions import (
    DamageItemNotFoundError,
    DispositionAlreadyInitiatedError,
    DispositionNotFoundError,
    LeaseNotFoundError,
    StoreError,
)
from deposit_disposition.domain.models import (
    DamageItem,
    Disposition,
    DispositionStatus,
    Inspection,
    InspectionItem,
    InspectionType,
    ItemizedDeduction,
    LeaseDeposit,
    LeaseStatus,
    RefundMethod,
    SendMethod,
)
from deposit_disposition.infrastructure.database import models as orm


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _to_disposition(row: orm.DepositDisposition) -> Disposition:
    return Disposition(
        id=row.id,
        lease_id=row.lease_id,
        move_out_date=row.move_out_date,
        deadline_date=row.deadline_date,
        original_deposit_cents=row.original_deposit_cents,
        interest_accrued_cents=row.interest_accrued_cents,
        total_deductions_cents=row.total_deductions_cents,
        refund_amount_cents=row.refund_amount_cents,
        status=DispositionStatus(row.status),
        itemized_deductions=[ItemizedDeduction.from_dict(line) for line in row.itemized_deductions or []],
        move_in_inspection_id=row.move_in_inspection_id,
        move_out_inspection_id=row.move_out_inspection_id,
        bank_name=row.bank_name,
        account_last4=row.account_last4,
        notes=row.notes,
        sent_date=row.sent_date,
        sent_method=SendMethod(row.sent_method) if row.sent_method else None,
        tracking_number=row.tracking_number,
        refund_processed_date=row.refund_processed_date,
        refund_method=RefundMethod(row.refund_method) if row.refund_method else None,
        refund_check_number=row.refund_check_number,
        dispute_reason=row.dispute_reason,
    )


def _to_damage_item(row: orm.DamageItem) -> DamageItem:
    return DamageItem(
        id=row.id,
        inspection_id=row.inspection_id,
        description=row.description,
        repair_cost_cents=row.repair_cost_cents,
        location=row.location,
        is_normal_wear=row.is_normal_wear,
        is_pre_existing=row.is_pre_existing,
        photo_urls=list(row.photo_urls or []),
        notes=row.notes,
        move_in_item_id=row.move_in_item_id,
    )


def _to_inspection(row: orm.Inspection) -> Inspection:
    return Inspection(id=row.id, lease_id=row.lease_id, type=InspectionType(row.type))


def _to_lease_deposit(row: orm.Lease) -> LeaseDeposit:
    return LeaseDeposit(
        lease_id=row.id,
        amount_cents=row.security_deposit_cents,
        lease_start_date=row.start_date,
        paid_date=row.deposit_paid_date,
        interest_rate=row.deposit_interest_rate,
        bank_name=row.deposit_bank_name,
        account_last4=row.deposit_account_last4,
    )


class SqlAlchemyDispositionStore:
    """DispositionStore backed by an async SQLAlchemy session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqlAlchemyDispositionStore"]:
        """Commit on success, roll back on any error; database errors become StoreError"""
        try:
            yield self
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"Database error: {e}") from e
        except Exception:
            await self.db.rollback()
            raise

    # Leases

    async def _get_lease_row(self, lease_id: str) -> orm.Lease:
        row = await self.db.get(orm.Lease, lease_id)
        if row is None:
            raise LeaseNotFoundError(lease_id)
        return row

    async def get_lease_deposit(self, lease_id: str) -> Optional[LeaseDeposit]:
        row = await self.db.get(orm.Lease, lease_id)
        return _to_lease_deposit(row) if row else None

    async def list_held_deposits(self) -> List[LeaseDeposit]:
        """Deposits on leases still running (active or month-to-month)"""
        rows = (
            await self.db.execute(
                select(orm.Lease)
                .where(
                    orm.Lease.status.in_([LeaseStatus.ACTIVE.value, LeaseStatus.MONTH_TO_MONTH.value]),
                    orm.Lease.security_deposit_cents > 0,
                )
                .order_by(orm.Lease.created_at.asc())
            )
        ).scalars().all()
        return [_to_lease_deposit(row) for row in rows]

    async def count_leases_awaiting_disposition(self, as_of: date) -> int:
        """Ended or moved-out leases holding a deposit that have no disposition yet"""
        query = (
            select(func.count(orm.Lease.id))
            .outerjoin(orm.DepositDisposition, orm.DepositDisposition.lease_id == orm.Lease.id)
            .where(
                orm.Lease.security_deposit_cents > 0,
                orm.DepositDisposition.id.is_(None),
                or_(
                    orm.Lease.status.in_([LeaseStatus.TERMINATED.value, LeaseStatus.EXPIRED.value]),
                    orm.Lease.move_out_date < as_of,
                ),
            )
        )
        return await self.db.scalar(query) or 0

    async def set_lease_move_out_date(self, lease_id: str, move_out_date: date) -> None:
        row = await self._get_lease_row(lease_id)
        row.move_out_date = move_out_date
        await self.db.flush()

    async def set_lease_status(self, lease_id: str, status: LeaseStatus) -> None:
        row = await self._get_lease_row(lease_id)
        row.status = _column_value(status)
        await self.db.flush()

    # Dispositions

    async def _get_disposition_row(self, lease_id: str, for_update: bool = False) -> Optional[orm.DepositDisposition]:
        query = select(orm.DepositDisposition).where(orm.DepositDisposition.lease_id == lease_id)
        if for_update:
            query = query.with_for_update()
        return (await self.db.execute(query)).scalar_one_or_none()

    async def get_disposition_by_lease(self, lease_id: str, for_update: bool = False) -> Optional[Disposition]:
        row = await self._get_disposition_row(lease_id, for_update=for_update)
        return _to_disposition(row) if row else None

    async def get_disposition_by_move_out_inspection(
        self, inspection_id: str, for_update: bool = False
    ) -> Optional[Disposition]:
        query = select(orm.DepositDisposition).where(orm.DepositDisposition.move_out_inspection_id == inspection_id)
        if for_update:
            query = query.with_for_update()
        row = (await self.db.execute(query)).scalar_one_or_none()
        return _to_disposition(row) if row else None

    async def create_disposition(self, disposition: Disposition) -> Disposition:
        row = orm.DepositDisposition(
            id=disposition.id,
            lease_id=disposition.lease_id,
            move_out_date=disposition.move_out_date,
            deadline_date=disposition.deadline_date,
            original_deposit_cents=disposition.original_deposit_cents,
            interest_accrued_cents=disposition.interest_accrued_cents,
            total_deductions_cents=disposition.total_deductions_cents,
            refund_amount_cents=disposition.refund_amount_cents,
            itemized_deductions=[line.to_dict() for line in disposition.itemized_deductions],
            move_in_inspection_id=disposition.move_in_inspection_id,
            move_out_inspection_id=disposition.move_out_inspection_id,
            bank_name=disposition.bank_name,
            account_last4=disposition.account_last4,
            notes=disposition.notes,
            status=disposition.status.value,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Unique lease_id: a concurrent initiation won the race
            raise DispositionAlreadyInitiatedError(disposition.lease_id) from e
        return _to_disposition(row)

    async def update_disposition(self, lease_id: str, patch: Dict[str, Any]) -> Disposition:
        row = await self._get_disposition_row(lease_id)
        if row is None:
            raise DispositionNotFoundError(lease_id)

        for key, value in patch.items():
            if key == "itemized_deductions":
                value = [line.to_dict() for line in value]
            setattr(row, key, _column_value(value))

        await self.db.flush()
        return _to_disposition(row)

    async def list_dispositions(
        self,
        status: Optional[DispositionStatus],
        overdue_as_of: Optional[date],
        limit: int,
        offset: int,
    ) -> Tuple[List[Disposition], int]:
        """Dispositions ordered by deadline (soonest first) plus the unpaged total"""
        query = select(orm.DepositDisposition)
        if status is not None:
            query = query.where(orm.DepositDisposition.status == _column_value(status))
        if overdue_as_of is not None:
            query = query.where(
                orm.DepositDisposition.deadline_date < overdue_as_of,
                orm.DepositDisposition.sent_date.is_(None),
            )

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        rows = (
            await self.db.execute(
                query.order_by(orm.DepositDisposition.deadline_date.asc(), orm.DepositDisposition.created_at.asc())
                .limit(limit)
                .offset(offset)
            )
        ).scalars().all()
        return [_to_disposition(row) for row in rows], total or 0

    # Damage items

    async def _get_damage_item_row(self, item_id: str) -> orm.DamageItem:
        row = await self.db.get(orm.DamageItem, item_id)
        if row is None:
            raise DamageItemNotFoundError(item_id)
        return row

    async def list_damage_items(self, inspection_id: str) -> List[DamageItem]:
        """Damage items in creation order"""
        rows = (
            await self.db.execute(
                select(orm.DamageItem)
                .where(orm.DamageItem.inspection_id == inspection_id)
                .order_by(orm.DamageItem.created_at.asc())
            )
        ).scalars().all()
        return [_to_damage_item(row) for row in rows]

    async def get_damage_item(self, item_id: str) -> Optional[DamageItem]:
        row = await self.db.get(orm.DamageItem, item_id)
        return _to_damage_item(row) if row else None

    async def create_damage_item(self, item: DamageItem) -> DamageItem:
        row = orm.DamageItem(
            id=item.id,
            inspection_id=item.inspection_id,
            description=item.description,
            location=item.location,
            repair_cost_cents=item.repair_cost_cents,
            is_normal_wear=item.is_normal_wear,
            is_pre_existing=item.is_pre_existing,
            photo_urls=list(item.photo_urls),
            notes=item.notes,
            move_in_item_id=item.move_in_item_id,
        )
        self.db.add(row)
        await self.db.flush()
        return _to_damage_item(row)

    async def update_damage_item(self, item_id: str, changes: Dict[str, Any]) -> DamageItem:
        row = await self._get_damage_item_row(item_id)
        for key, value in changes.items():
            setattr(row, key, list(value) if key == "photo_urls" else value)
        await self.db.flush()
        return _to_damage_item(row)

    async def delete_damage_item(self, item_id: str) -> None:
        row = await self._get_damage_item_row(item_id)
        await self.db.delete(row)
        await self.db.flush()

    # Inspections

    async def get_inspection(self, inspection_id: str) -> Optional[Inspection]:
        row = await self.db.get(orm.Inspection, inspection_id)
        return _to_inspection(row) if row else None

    async def latest_inspection(self, lease_id: str, inspection_type: InspectionType) -> Optional[Inspection]:
        row = (
            await self.db.execute(
                select(orm.Inspection)
                .where(orm.Inspection.lease_id == lease_id, orm.Inspection.type == inspection_type.value)
                .order_by(orm.Inspection.created_at.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        return _to_inspection(row) if row else None

    async def get_inspection_snapshot(
        self, lease_id: str, inspection_type: InspectionType
    ) -> Optional[List[InspectionItem]]:
        """Items of the latest inspection of this type, or None when there is none"""
        inspection = await self.latest_inspection(lease_id, inspection_type)
        if inspection is None:
            return None

        rows = (
            await self.db.execute(
                select(orm.InspectionItem)
                .where(orm.InspectionItem.inspection_id == inspection.id)
                .order_by(orm.InspectionItem.created_at.asc())
            )
        ).scalars().all()
        return [
            InspectionItem(
                id=row.id,
                room=row.room,
                item=row.item,
                condition=row.condition,
                has_damage=row.has_damage,
                notes=row.notes,
            )
            for row in rows
        ]
