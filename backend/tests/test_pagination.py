import asyncio

import httpx
import pytest

from conftest import SHIFTS_PATH, bad_request
from staff_portal.core.errors import UpstreamOtherError
from staff_portal.planday.pagination import MAX_PAGES, PAGE_SIZE, PAGING_STRATEGIES, fetch_shifts_all_pages

BASE = {"from": "2025-03-10T00:00:00", "to": "2025-03-11T00:00:00", "status": "Published"}
PAGING_KEYS = {"limit", "offset", "page", "pageSize", "top", "skip", "take"}


def _shifts(count: int, start: int = 0) -> list[dict]:
    return [{"id": start + index, "employeeId": 1000 + index} for index in range(count)]


def test_strategies_are_tried_in_fixed_order() -> None:
    assert [strategy.kind for strategy in PAGING_STRATEGIES] == [
        "limit/offset",
        "page/pageSize",
        "top/skip",
        "take/skip",
    ]
    assert PAGING_STRATEGIES[1].params_for({}, 0) == {"pageSize": "200", "page": "1"}


def test_limit_offset_pages_until_short_page(fake_planday, planday_client) -> None:
    def handler(params):
        offset = int(params["offset"])
        return _shifts(PAGE_SIZE if offset == 0 else 50, start=offset)

    fake_planday.shift_handler = handler

    shifts = asyncio.run(fetch_shifts_all_pages(planday_client, "12345", dict(BASE)))

    calls = fake_planday.calls_to(SHIFTS_PATH)
    assert [call["offset"] for call in calls] == ["0", "200"]
    assert all(call["limit"] == "200" and call["departmentId"] == "12345" for call in calls)
    assert calls[0]["from"] == BASE["from"] and calls[0]["status"] == "Published"
    assert len(shifts) == 250
    assert {shift["_deptId"] for shift in shifts} == {"12345"}


def test_bad_request_moves_to_next_convention_without_retrying(fake_planday, planday_client) -> None:
    def handler(params):
        if "limit" in params:
            return bad_request("Planday API 400")
        return {"items": _shifts(3)}

    fake_planday.shift_handler = handler

    shifts = asyncio.run(fetch_shifts_all_pages(planday_client, "12345", dict(BASE)))

    calls = fake_planday.calls_to(SHIFTS_PATH)
    assert len(calls) == 2
    assert "limit" in calls[0]
    assert calls[1]["page"] == "1" and calls[1]["pageSize"] == "200"
    assert sum(1 for call in calls if "limit" in call) == 1
    assert len(shifts) == 3


def test_unpaged_request_is_the_last_resort(fake_planday, planday_client) -> None:
    def handler(params):
        if PAGING_KEYS & params.keys():
            return bad_request()
        return {"data": _shifts(2)}

    fake_planday.shift_handler = handler

    shifts = asyncio.run(fetch_shifts_all_pages(planday_client, "777", dict(BASE)))

    calls = fake_planday.calls_to(SHIFTS_PATH)
    assert len(calls) == len(PAGING_STRATEGIES) + 1
    assert set(calls[-1]) == {"departmentId", "from", "to", "status"}
    assert [shift["id"] for shift in shifts] == [0, 1]


def test_other_upstream_errors_propagate_immediately(fake_planday, planday_client) -> None:
    fake_planday.shift_handler = lambda params: httpx.Response(500, text="boom")

    with pytest.raises(UpstreamOtherError) as excinfo:
        asyncio.run(fetch_shifts_all_pages(planday_client, "12345", dict(BASE)))

    assert "Planday API 500" in str(excinfo.value)
    assert len(fake_planday.calls_to(SHIFTS_PATH)) == 1


def test_paging_stops_at_page_cap(fake_planday, planday_client) -> None:
    fake_planday.shift_handler = lambda params: _shifts(PAGE_SIZE, start=int(params["offset"]))

    shifts = asyncio.run(fetch_shifts_all_pages(planday_client, "12345", dict(BASE)))

    assert len(fake_planday.calls_to(SHIFTS_PATH)) == MAX_PAGES
    assert len(shifts) == MAX_PAGES * PAGE_SIZE
