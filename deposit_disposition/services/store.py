"""Storage interface the disposition service depends on"""

from datetime import date
from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol, Tuple

from deposit_disposition.domain.models import (
    DamageItem,
    Disposition,
    DispositionStatus,
    Inspection,
    InspectionItem,
    InspectionType,
    LeaseDeposit,
    LeaseStatus,
)


class DispositionStore(Protocol):
    """
    Persistence boundary for leases, inspections, damage items and dispositions.

    Implementations must make `transaction()` atomic: everything awaited inside
    it commits together or not at all, and rows read with `for_update=True`
    stay locked until the transaction ends. Failures surface as StoreError.
    """

    def transaction(self) -> AsyncContextManager[Any]: ...

    # Leases
    async def get_lease_deposit(self, lease_id: str) -> Optional[LeaseDeposit]: ...

    async def set_lease_move_out_date(self, lease_id: str, move_out_date: date) -> None: ...

    async def set_lease_status(self, lease_id: str, status: LeaseStatus) -> None: ...

    async def list_held_deposits(self) -> List[LeaseDeposit]: ...

    async def count_leases_awaiting_disposition(self, as_of: date) -> int: ...

    # Dispositions
    async def get_disposition_by_lease(self, lease_id: str, for_update: bool = False) -> Optional[Disposition]: ...

    async def get_disposition_by_move_out_inspection(
        self, inspection_id: str, for_update: bool = False
    ) -> Optional[Disposition]: ...

    async def create_disposition(self, disposition: Disposition) -> Disposition: ...

    async def update_disposition(self, lease_id: str, patch: Dict[str, Any]) -> Disposition: ...

    async def list_dispositions(
        self,
        status: Optional[DispositionStatus],
        overdue_as_of: Optional[date],
        limit: int,
        offset: int,
    ) -> Tuple[List[Disposition], int]: ...

    # Damage items
    async def list_damage_items(self, inspection_id: str) -> List[DamageItem]: ...

    async def get_damage_item(self, item_id: str) -> Optional[DamageItem]: ...

    async def create_damage_item(self, item: DamageItem) -> DamageItem: ...

    async def update_damage_item(self, item_id: str, changes: Dict[str, Any]) -> DamageItem: ...

    async def delete_damage_item(self, item_id: str) -> None: ...

    # Inspections
    async def get_inspection(self, inspection_id: str) -> Optional[Inspection]: ...

    async def latest_inspection(self, lease_id: str, inspection_type: InspectionType) -> Optional[Inspection]: ...

    async def get_inspection_snapshot(
        self, lease_id: str, inspection_type: InspectionType
    ) -> Optional[List[InspectionItem]]: ...
