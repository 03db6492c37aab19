"""/v1/dispositions - calculation, lifecycle transitions and deadline tracking"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from deposit_disposition.api.dependencies import get_disposition_service
from deposit_disposition.api.v1.schemas import (
    ComparisonResponse,
    DeadlineResponse,
    DispositionListResponse,
    DispositionResponse,
    DisputeRequest,
    LinkInspectionRequest,
    ProcessRefundRequest,
    SendLetterRequest,
)
from deposit_disposition.domain.models import DispositionStatus
from deposit_disposition.services.disposition_service import DispositionService

router = APIRouter()


@router.get("/dispositions", response_model=DispositionListResponse)
async def list_dispositions(
    status: Optional[DispositionStatus] = Query(None),
    overdue_only: bool = Query(False, description="Only unsent dispositions past their deadline"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: DispositionService = Depends(get_disposition_service),
):
    dispositions, total = await service.list_dispositions(
        status=status,
        overdue_only=overdue_only,
        limit=limit,
        offset=offset,
    )
    return DispositionListResponse(
        dispositions=[DispositionResponse.from_domain(d) for d in dispositions],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/dispositions/{lease_id}", response_model=DispositionResponse)
async def get_disposition(lease_id: str, service: DispositionService = Depends(get_disposition_service)):
    return DispositionResponse.from_domain(await service.get_disposition(lease_id))


@router.post("/dispositions/{lease_id}/recalculate", response_model=DispositionResponse)
async def recalculate_disposition(lease_id: str, service: DispositionService = Depends(get_disposition_service)):
    """Recompute deductions and refund from the current damage items"""
    return DispositionResponse.from_domain(await service.recalculate_disposition(lease_id))


@router.post("/dispositions/{lease_id}/move-out-inspection", response_model=DispositionResponse)
async def link_move_out_inspection(
    lease_id: str,
    request_body: LinkInspectionRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    disposition = await service.link_move_out_inspection(lease_id, request_body.inspection_id)
    return DispositionResponse.from_domain(disposition)


@router.post("/dispositions/{lease_id}/review", response_model=DispositionResponse)
async def submit_for_review(lease_id: str, service: DispositionService = Depends(get_disposition_service)):
    return DispositionResponse.from_domain(await service.submit_for_review(lease_id))


@router.post("/dispositions/{lease_id}/send", response_model=DispositionResponse)
async def send_disposition_letter(
    lease_id: str,
    request_body: SendLetterRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    """Record that the itemized disposition letter was sent (clears overdue status)"""
    disposition = await service.send_disposition_letter(
        lease_id,
        request_body.method,
        tracking_number=request_body.tracking_number,
    )
    return DispositionResponse.from_domain(disposition)


@router.post("/dispositions/{lease_id}/refund", response_model=DispositionResponse)
async def process_refund(
    lease_id: str,
    request_body: ProcessRefundRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    disposition = await service.process_refund(
        lease_id,
        request_body.method,
        request_body.amount_cents,
        check_number=request_body.check_number,
    )
    return DispositionResponse.from_domain(disposition)


@router.post("/dispositions/{lease_id}/dispute", response_model=DispositionResponse)
async def record_dispute(
    lease_id: str,
    request_body: DisputeRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    return DispositionResponse.from_domain(await service.record_dispute(lease_id, request_body.reason))


@router.get("/dispositions/{lease_id}/deadline", response_model=DeadlineResponse)
async def get_deadline(lease_id: str, service: DispositionService = Depends(get_disposition_service)):
    """Days remaining (negative when overdue) plus letter readiness warnings"""
    status = await service.get_compliance_status(lease_id)
    return DeadlineResponse.from_domain(lease_id, status)


@router.get("/dispositions/{lease_id}/comparison", response_model=ComparisonResponse)
async def compare_inspections(lease_id: str, service: DispositionService = Depends(get_disposition_service)):
    result = await service.compare_inspections(lease_id)
    return ComparisonResponse.from_domain(lease_id, result)
