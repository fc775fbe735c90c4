from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from staff_portal.core.errors import AuthError, UpstreamError
from staff_portal.planday.client import PlandayClient, extract_list

logger = logging.getLogger(__name__)

EMPLOYEES_PATH = "/hr/v1/Employees"
LOOKUP_CONCURRENCY = 6


def placeholder_name(employee_id: str) -> str:
    return f"Employee #{employee_id}"


def display_name(employee: Any) -> str:
    if not isinstance(employee, dict):
        return ""
    parts = [employee.get("firstName"), employee.get("lastName")]
    return " ".join(str(part) for part in parts if part).strip()


async def _batch_lookup(client: PlandayClient, employee_ids: list[str]) -> dict[str, str]:
    resolved: dict[str, str] = {}
    try:
        payload = await client.get_json(EMPLOYEES_PATH, {"ids": ",".join(employee_ids)})
    except (UpstreamError, AuthError) as exc:
        logger.info("Batch employee lookup failed, resolving %d ids one by one: %s", len(employee_ids), exc)
        return resolved

    employees = extract_list(payload, "items", "data")
    if employees is None:
        logger.warning(
            "Batch employee lookup returned an unexpected %s envelope; resolving ids one by one",
            type(payload).__name__,
        )
        return resolved

    for employee in employees:
        if not isinstance(employee, dict) or employee.get("id") is None:
            continue
        name = display_name(employee)
        if name:
            resolved[str(employee["id"])] = name
    return resolved


async def _single_lookup(client: PlandayClient, employee_id: str) -> str:
    try:
        employee = await client.get_json(f"{EMPLOYEES_PATH}/{employee_id}")
    except (UpstreamError, AuthError) as exc:
        logger.info("Employee %s lookup failed: %s", employee_id, exc)
        return placeholder_name(employee_id)
    return display_name(employee) or placeholder_name(employee_id)


async def resolve_employee_names(
    client: PlandayClient,
    employee_ids: Iterable[str],
    *,
    concurrency: int = LOOKUP_CONCURRENCY,
) -> dict[str, str]:
    """Map every employee id to a non-empty display name.

    One batched lookup is tried first. Ids it leaves unresolved are looked up
    individually by a fixed pool of workers sharing a cursor over the list, so
    at most ``concurrency`` requests are in flight.
    """
    ids = list(dict.fromkeys(str(employee_id) for employee_id in employee_ids))
    if not ids:
        return {}

    names = await _batch_lookup(client, ids)
    missing = [employee_id for employee_id in ids if not names.get(employee_id)]
    if not missing:
        return names

    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(missing):
            employee_id = missing[cursor]
            cursor += 1
            names[employee_id] = await _single_lookup(client, employee_id)

    await asyncio.gather(*(worker() for _ in range(max(1, concurrency))))
    logger.info("Resolved %d employee names (%d individually)", len(names), len(missing))
    return names
