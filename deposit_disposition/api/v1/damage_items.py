"""/v1 damage item endpoints; every change recalculates the owning disposition"""

from typing import List

from fastapi import APIRouter, Depends
from starlette.responses import Response

from deposit_disposition.api.dependencies import get_disposition_service, get_policy
from deposit_disposition.api.v1.schemas import (
    CreateDamageItemRequest,
    DamageGuidanceResponse,
    DamageItemResponse,
    UpdateDamageItemRequest,
)
from deposit_disposition.domain.classification import is_deductible
from deposit_disposition.domain.policy import JurisdictionPolicy
from deposit_disposition.services.disposition_service import DispositionService

router = APIRouter()


@router.get("/damage-items/guidance", response_model=DamageGuidanceResponse)
def get_damage_guidance(policy: JurisdictionPolicy = Depends(get_policy)):
    """Normal-wear vs deductible examples and the letter disclosures for the active jurisdiction"""
    return DamageGuidanceResponse.from_policy(policy)


@router.get("/inspections/{inspection_id}/damage-items", response_model=List[DamageItemResponse])
async def list_damage_items(inspection_id: str, service: DispositionService = Depends(get_disposition_service)):
    items = await service.list_damage_items(inspection_id)
    return [DamageItemResponse.from_domain(item, is_deductible(item)) for item in items]


@router.post("/inspections/{inspection_id}/damage-items", response_model=DamageItemResponse, status_code=201)
async def create_damage_item(
    inspection_id: str,
    request_body: CreateDamageItemRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    item = await service.create_damage_item(inspection_id, **request_body.model_dump())
    return DamageItemResponse.from_domain(item, is_deductible(item))


@router.patch("/damage-items/{item_id}", response_model=DamageItemResponse)
async def update_damage_item(
    item_id: str,
    request_body: UpdateDamageItemRequest,
    service: DispositionService = Depends(get_disposition_service),
):
    item = await service.update_damage_item(item_id, **request_body.model_dump(exclude_unset=True))
    return DamageItemResponse.from_domain(item, is_deductible(item))


@router.delete("/damage-items/{item_id}", status_code=204)
async def delete_damage_item(item_id: str, service: DispositionService = Depends(get_disposition_service)):
    await service.delete_damage_item(item_id)
    return Response(status_code=204)
