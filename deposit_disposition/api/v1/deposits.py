"""/v1/deposits - portfolio view of deposits held and dispositions owed"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from deposit_disposition.api.dependencies import get_disposition_service
from deposit_disposition.api.v1.schemas import DepositStatsResponse
from deposit_disposition.services.disposition_service import DispositionService

router = APIRouter()


@router.get("/deposits/stats", response_model=DepositStatsResponse)
async def get_deposit_stats(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    service: DispositionService = Depends(get_disposition_service),
):
    """
    Deposit compliance dashboard.

    Totals deposits on running leases with interest accrued to date, counts
    ended or moved-out leases still owed a disposition, and counts deposits
    whose yearly interest anniversary is coming up.
    """
    stats = await service.get_deposit_stats(as_of)
    return DepositStatsResponse.from_domain(stats)
