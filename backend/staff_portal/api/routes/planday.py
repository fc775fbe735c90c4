from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from staff_portal.api.dependencies import get_planday_client
from staff_portal.core.errors import AuthError, UpstreamError
from staff_portal.planday.client import PlandayClient
from staff_portal.schemas.common import ErrorResponse
from staff_portal.schemas.revenue import RevenueForDayRequest, RevenueForDayResponse
from staff_portal.schemas.shifts import ShiftsForDayRequest, ShiftsForDayResponse
from staff_portal.services.revenue import revenue_for_day
from staff_portal.services.shifts import shifts_for_day

router = APIRouter(tags=["planday"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post("/shifts-for-day", response_model=ShiftsForDayResponse, responses=ERROR_RESPONSES)
async def shifts_for_day_endpoint(
    payload: ShiftsForDayRequest,
    client: PlandayClient = Depends(get_planday_client),
) -> ShiftsForDayResponse:
    try:
        items = await shifts_for_day(client, payload)
    except (AuthError, UpstreamError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ShiftsForDayResponse(items=items)


@router.post("/revenue-for-day", response_model=RevenueForDayResponse, responses=ERROR_RESPONSES)
async def revenue_for_day_endpoint(
    payload: RevenueForDayRequest,
    client: PlandayClient = Depends(get_planday_client),
) -> RevenueForDayResponse:
    try:
        return await revenue_for_day(client, payload)
    except (AuthError, UpstreamError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
