from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from staff_portal.planday.client import PlandayClient
from staff_portal.planday.format_log import format_log
from staff_portal.planday.token_cache import TokenCache

TOKEN_URL = "https://id.planday.test/connect/token"
API_BASE = "https://openapi.planday.test"
SHIFTS_PATH = "/scheduling/v1.0/shifts"
EMPLOYEES_PATH = "/hr/v1/Employees"


def as_response(result: Any) -> httpx.Response:
    if isinstance(result, httpx.Response):
        return result
    return httpx.Response(200, json=result)


def bad_request(message: str = "invalid query") -> httpx.Response:
    return httpx.Response(400, text=message)


class FakePlanday:
    """In-memory Planday used as an ``httpx.MockTransport`` handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_payload: dict[str, Any] = {"access_token": "token-1", "expires_in": 3600}
        self.token_body: str | None = None
        self.shift_handler: Callable[[dict[str, str]], Any] = lambda params: []
        self.employees: dict[str, dict[str, Any]] = {}
        self.batch_handler: Callable[[list[str]], Any] | None = None
        self.revenue_handler: Callable[[str, dict[str, str]], Any] = lambda path, params: httpx.Response(404, text="no report")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url).startswith(TOKEN_URL):
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="invalid_grant")
            if self.token_body is not None:
                return httpx.Response(200, text=self.token_body)
            return httpx.Response(200, json=self.token_payload)

        path = request.url.path
        params = dict(request.url.params)
        if path == SHIFTS_PATH:
            return as_response(self.shift_handler(params))
        if path == EMPLOYEES_PATH:
            ids = params.get("ids", "").split(",")
            if self.batch_handler is not None:
                return as_response(self.batch_handler(ids))
            return httpx.Response(200, json=[self.employees[i] for i in ids if i in self.employees])
        if path.startswith(f"{EMPLOYEES_PATH}/"):
            employee_id = path.rsplit("/", 1)[-1]
            if employee_id in self.employees:
                return httpx.Response(200, json=self.employees[employee_id])
            return httpx.Response(404, text="employee not found")
        if path.endswith("/revenue"):
            return as_response(self.revenue_handler(path, params))
        return httpx.Response(404, text="unknown path")

    def calls_to(self, path: str) -> list[dict[str, str]]:
        return [dict(request.url.params) for request in self.requests if request.url.path == path]

    def single_lookups(self) -> list[str]:
        prefix = f"{EMPLOYEES_PATH}/"
        return [request.url.path[len(prefix):] for request in self.requests if request.url.path.startswith(prefix)]

    def token_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url).startswith(TOKEN_URL)]


def build_planday_client(handler: Callable[[httpx.Request], Any]) -> PlandayClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    tokens = TokenCache(http, client_id="client-1", refresh_token="refresh-1", token_url=TOKEN_URL)
    return PlandayClient(http, tokens, client_id="client-1", api_base=API_BASE)


@pytest.fixture
def fake_planday() -> FakePlanday:
    return FakePlanday()


@pytest.fixture
def planday_client(fake_planday: FakePlanday) -> PlandayClient:
    return build_planday_client(fake_planday)


@pytest.fixture(autouse=True)
def _fresh_format_log():
    format_log.clear()
    yield
    format_log.clear()
