from __future__ import annotations

import logging
from typing import Any

from staff_portal.core.errors import UpstreamBadRequest
from staff_portal.planday.client import PlandayClient
from staff_portal.planday.date_windows import DateWindow, half_day_windows, whole_day_windows
from staff_portal.planday.employees import resolve_employee_names
from staff_portal.planday.normalize import normalize_shifts, shift_employee_id
from staff_portal.planday.pagination import fetch_shifts_all_pages
from staff_portal.planday.format_log import format_log
from staff_portal.schemas.shifts import NormalizedShift, ShiftsForDayRequest

logger = logging.getLogger(__name__)

HALF_DAY = "half-day"


async def _fetch_windows(
    client: PlandayClient,
    windows: list[DateWindow],
    department_ids: list[str],
    statuses: list[str],
) -> list[dict[str, Any]]:
    shifts: list[dict[str, Any]] = []
    for window in windows:
        for department_id in department_ids:
            for status in statuses:
                base = {**window.as_params(), "status": status}
                shifts.extend(await fetch_shifts_all_pages(client, department_id, base))
    return shifts


def _employee_ids(shifts: list[dict[str, Any]]) -> list[str]:
    ids = (shift_employee_id(shift) for shift in shifts)
    return list(dict.fromkeys(employee_id for employee_id in ids if employee_id is not None))


async def _resolve_and_normalize(client: PlandayClient, shifts: list[dict[str, Any]]) -> list[NormalizedShift]:
    names = await resolve_employee_names(client, _employee_ids(shifts))
    return normalize_shifts(shifts, names)


async def shifts_for_day(client: PlandayClient, payload: ShiftsForDayRequest) -> list[NormalizedShift]:
    """Fetch, name and order every shift for one day across departments and statuses.

    Each whole-day range encoding is tried for the entire fetch before the next
    one; bad requests advance to the next encoding and, after all three, to two
    half-day windows. Other upstream errors propagate to the caller.
    """
    statuses = payload.statuses
    rejected: list[str] = []

    for window in whole_day_windows(payload.date):
        try:
            shifts = await _fetch_windows(client, [window], payload.department_ids, statuses)
        except UpstreamBadRequest as exc:
            logger.info("Whole-day %s range rejected for %s: %s", window.label, payload.date, exc)
            rejected.append(window.label)
            continue
        format_log.record("date_window", payload.date, window.label, rejected)
        break
    else:
        logger.info("Every whole-day range rejected for %s, fetching half-day windows", payload.date)
        shifts = await _fetch_windows(client, half_day_windows(payload.date), payload.department_ids, statuses)
        format_log.record("date_window", payload.date, HALF_DAY, rejected)

    return await _resolve_and_normalize(client, shifts)
