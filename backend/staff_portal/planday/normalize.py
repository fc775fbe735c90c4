from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from staff_portal.planday.employees import placeholder_name
from staff_portal.planday.pagination import DEPARTMENT_TAG
from staff_portal.schemas.shifts import NormalizedShift

logger = logging.getLogger(__name__)

OPEN_SHIFT_NAME = "Open shift"
PLACEHOLDER_NAME_RE = re.compile(r"^Employee\s*#\d+$", re.IGNORECASE)
START_KEYS = ("startDateTime", "startUtc", "start", "startTime")
END_KEYS = ("endDateTime", "endUtc", "end", "endTime")


def _first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def shift_employee_id(record: Mapping[str, Any]) -> str | None:
    employee_id = record.get("employeeId")
    if employee_id is None or not str(employee_id).strip():
        return None
    return str(employee_id).strip()


def is_placeholder_name(name: str) -> bool:
    return bool(PLACEHOLDER_NAME_RE.match(name.strip()))


def choose_display_name(employee_id: str | None, upstream_name: Any, resolved_names: Mapping[str, str]) -> str:
    resolved = resolved_names.get(employee_id, "") if employee_id else ""
    if resolved and resolved.strip():
        return resolved.strip()

    given = upstream_name.strip() if isinstance(upstream_name, str) else ""
    if given and not is_placeholder_name(given):
        return given

    if employee_id:
        return placeholder_name(employee_id)
    return OPEN_SHIFT_NAME


def normalize_shifts(shifts: Iterable[Mapping[str, Any]], resolved_names: Mapping[str, str]) -> list[NormalizedShift]:
    seen: set[str] = set()
    normalized: list[NormalizedShift] = []

    for record in shifts:
        shift_id = "" if record.get("id") is None else str(record["id"])
        if shift_id in seen:
            continue
        seen.add(shift_id)

        employee_id = shift_employee_id(record)
        normalized.append(
            NormalizedShift(
                id=shift_id,
                name=choose_display_name(employee_id, record.get("employeeName"), resolved_names),
                start_iso=_optional_text(_first_present(record, START_KEYS)),
                end_iso=_optional_text(_first_present(record, END_KEYS)),
                department_id=str(record.get(DEPARTMENT_TAG, "")),
            )
        )

    unnamed = sum(1 for shift in normalized if is_placeholder_name(shift.name) or shift.name == OPEN_SHIFT_NAME)
    if unnamed:
        logger.debug("%d of %d shifts have no resolved employee name", unnamed, len(normalized))

    return sorted(normalized, key=lambda shift: shift.start_iso or "")
