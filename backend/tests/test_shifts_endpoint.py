import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import EMPLOYEES_PATH, SHIFTS_PATH
from staff_portal.api.dependencies import get_planday_client
from staff_portal.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def _use_fake_planday(planday_client):
    app.dependency_overrides[get_planday_client] = lambda: planday_client
    yield
    app.dependency_overrides.clear()


def test_shifts_for_day_returns_normalized_items(fake_planday) -> None:
    fake_planday.shift_handler = lambda params: [
        {
            "id": f"{params['status']}-1",
            "employeeId": 12345 if params["status"] == "Published" else None,
            "startDateTime": "2025-03-10T17:00:00" if params["status"] == "Published" else "2025-03-10T09:00:00",
            "endDateTime": "2025-03-10T23:00:00",
        }
    ]
    fake_planday.employees = {"12345": {"id": 12345, "firstName": "Anna", "lastName": "B"}}

    response = client.post(
        "/shifts-for-day",
        json={"departmentIds": [12345], "date": "2025-03-10"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body == {
        "items": [
            {
                "id": "Open-1",
                "name": "Open shift",
                "startISO": "2025-03-10T09:00:00",
                "endISO": "2025-03-10T23:00:00",
                "departmentId": "12345",
            },
            {
                "id": "Published-1",
                "name": "Anna B",
                "startISO": "2025-03-10T17:00:00",
                "endISO": "2025-03-10T23:00:00",
                "departmentId": "12345",
            },
        ]
    }
    assert {call["status"] for call in fake_planday.calls_to(SHIFTS_PATH)} == {"Published", "Open"}

    formats = client.get("/formats").json()
    assert formats["accepted"] == {"paging": {"limit/offset": 1}, "date_window": {"seconds": 1}}
    assert formats["recent"][0] == {
        "kind": "date_window",
        "subject": "2025-03-10",
        "accepted": "seconds",
        "rejected": [],
        "recorded_at": formats["recent"][0]["recorded_at"],
    }


def test_explicit_status_string_is_used(fake_planday) -> None:
    response = client.post(
        "/shifts-for-day",
        json={"departmentIds": ["1"], "date": "2025-03-10", "status": "Draft"},
    )

    assert response.status_code == 200
    assert response.json() == {"items": []}
    assert [call["status"] for call in fake_planday.calls_to(SHIFTS_PATH)] == ["Draft"]


@pytest.mark.parametrize(
    "payload",
    [
        {"date": "2025-03-10"},
        {"departmentIds": [], "date": "2025-03-10"},
        {"departmentIds": ["1"]},
        {"departmentIds": ["1"], "date": "10/03/2025"},
        {"departmentIds": ["1"], "date": "2025-02-30"},
    ],
)
def test_invalid_requests_are_rejected_before_upstream_calls(fake_planday, payload) -> None:
    response = client.post("/shifts-for-day", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    assert fake_planday.requests == []


def test_invalid_json_is_a_bad_request(fake_planday) -> None:
    response = client.post(
        "/shifts-for-day",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON"}


def test_upstream_failure_is_a_bad_gateway(fake_planday) -> None:
    fake_planday.shift_handler = lambda params: httpx.Response(500, text="upstream exploded")

    response = client.post("/shifts-for-day", json={"departmentIds": ["1"], "date": "2025-03-10"})

    assert response.status_code == 502
    assert response.json() == {"error": "Planday API 500: upstream exploded"}


def test_token_failure_is_a_bad_gateway(fake_planday) -> None:
    fake_planday.token_status = 400

    response = client.post("/shifts-for-day", json={"departmentIds": ["1"], "date": "2025-03-10"})

    assert response.status_code == 502
    assert "token exchange failed" in response.json()["error"]
    assert fake_planday.calls_to(SHIFTS_PATH) == []


def test_non_json_token_response_is_a_bad_gateway(fake_planday) -> None:
    fake_planday.token_body = "<html>maintenance</html>"

    response = client.post("/shifts-for-day", json={"departmentIds": ["1"], "date": "2025-03-10"})

    assert response.status_code == 502
    assert response.json()["error"].startswith("Planday token exchange failed: 200")
    assert fake_planday.calls_to(SHIFTS_PATH) == []


def test_status_list_entries_are_passed_through_as_text(fake_planday) -> None:
    response = client.post(
        "/shifts-for-day",
        json={"departmentIds": ["1"], "date": "2025-03-10", "status": [1, "Open", None, " "]},
    )

    assert response.status_code == 200
    assert [call["status"] for call in fake_planday.calls_to(SHIFTS_PATH)] == ["1", "Open"]


def test_employee_id_zero_is_looked_up(fake_planday) -> None:
    fake_planday.shift_handler = lambda params: [{"id": "s-0", "employeeId": 0, "startDateTime": "2025-03-10T07:00:00"}]
    fake_planday.employees = {"0": {"id": 0, "firstName": "Nadia", "lastName": "Z"}}

    response = client.post("/shifts-for-day", json={"departmentIds": ["1"], "date": "2025-03-10", "status": "Published"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["Nadia Z"]
    assert fake_planday.calls_to(EMPLOYEES_PATH) == [{"ids": "0"}]
