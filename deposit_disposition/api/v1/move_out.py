"""/v1/move-out - start the move-out process and check its progress"""

from fastapi import APIRouter, Depends

from deposit_disposition.api.dependencies import get_disposition_service
from deposit_disposition.api.v1.schemas import (
    DamageItemResponse,
    DispositionResponse,
    InitiateMoveOutRequest,
    MoveOutStatusResponse,
)
from deposit_disposition.domain.classification import is_deductible
from deposit_disposition.services.disposition_service import DispositionService

router = APIRouter()


@router.post("/move-out", response_model=DispositionResponse, status_code=201)
async def initiate_move_out(
    request_body: InitiateMoveOutRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    """
    Initiate move-out for a lease.

    Creates the DRAFT disposition with statutory deadline and accrued
    interest. A second call for the same lease returns 409.
    """
    disposition = await service.initiate_move_out(
        request_body.lease_id,
        request_body.move_out_date,
        notes=request_body.notes,
    )
    return DispositionResponse.from_domain(disposition)


@router.get("/move-out/{lease_id}", response_model=MoveOutStatusResponse)
async def get_move_out_status(
    lease_id: str,
    service: DispositionService = Depends(get_disposition_service),
):
    status = await service.get_move_out_status(lease_id)
    return MoveOutStatusResponse(
        lease_id=status.lease_id,
        status=status.status,
        disposition=DispositionResponse.from_domain(status.disposition) if status.disposition else None,
        damage_items=[DamageItemResponse.from_domain(item, is_deductible(item)) for item in status.damage_items],
    )
