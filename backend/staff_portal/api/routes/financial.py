from fastapi import APIRouter, Depends, HTTPException, Query

from staff_portal.api.dependencies import get_sheets_client
from staff_portal.core.errors import UpstreamError
from staff_portal.schemas.common import ErrorResponse
from staff_portal.schemas.financial import (
    FinancialSummaryRequest,
    FinancialSummaryResponse,
    LocationsResponse,
    RankingRequest,
    RankingResponse,
)
from staff_portal.services.access import allowed_locations, can_view_group, is_location_allowed
from staff_portal.services.financial import build_financial_summary, build_store_ranking, require_known_location
from staff_portal.services.sheets import SheetsClient

router = APIRouter(prefix="/financial", tags=["financial"])


@router.get("/locations", response_model=LocationsResponse)
def financial_locations(
    role: str | None = Query(default=None),
    home_location: str | None = Query(default=None),
) -> LocationsResponse:
    return LocationsResponse(locations=allowed_locations(role, home_location))


@router.post(
    "/summary",
    response_model=FinancialSummaryResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def financial_summary(
    payload: FinancialSummaryRequest,
    sheets: SheetsClient = Depends(get_sheets_client),
) -> FinancialSummaryResponse:
    require_known_location(payload.location)
    if not is_location_allowed(payload.location, payload.role, payload.home_location):
        raise HTTPException(status_code=403, detail="Forbidden")

    try:
        return await build_financial_summary(sheets, payload)
    except UpstreamError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post(
    "/ranking",
    response_model=RankingResponse,
    responses={403: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def financial_ranking(
    payload: RankingRequest,
    sheets: SheetsClient = Depends(get_sheets_client),
) -> RankingResponse:
    if not can_view_group(payload.role):
        raise HTTPException(status_code=403, detail="Forbidden")

    try:
        ranking = await build_store_ranking(sheets)
    except UpstreamError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return RankingResponse(ranking=ranking)
