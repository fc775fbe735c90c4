from fastapi import Request

from staff_portal.planday.client import PlandayClient
from staff_portal.services.sheets import SheetsClient


def get_planday_client(request: Request) -> PlandayClient:
    return request.app.state.planday_client


def get_sheets_client(request: Request) -> SheetsClient:
    return request.app.state.sheets_client
