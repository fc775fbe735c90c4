from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from staff_portal.core.errors import UpstreamBadRequest
from staff_portal.planday.client import PlandayClient, extract_list
from staff_portal.planday.format_log import format_log

logger = logging.getLogger(__name__)

SHIFTS_PATH = "/scheduling/v1.0/shifts"
PAGE_SIZE = 200
MAX_PAGES = 200
DEPARTMENT_TAG = "_deptId"
UNPAGED = "unpaged"


@dataclass(frozen=True)
class PagingStrategy:
    kind: str
    page_params: Callable[[int, int], dict[str, str]]
    page_size: int = PAGE_SIZE

    def params_for(self, base: dict[str, str], page_index: int) -> dict[str, str]:
        return {**base, **self.page_params(page_index, self.page_size)}


# Tried in this order.
PAGING_STRATEGIES: tuple[PagingStrategy, ...] = (
    PagingStrategy("limit/offset", lambda i, size: {"limit": str(size), "offset": str(i * size)}),
    PagingStrategy("page/pageSize", lambda i, size: {"pageSize": str(size), "page": str(i + 1)}),
    PagingStrategy("top/skip", lambda i, size: {"top": str(size), "skip": str(i * size)}),
    PagingStrategy("take/skip", lambda i, size: {"take": str(size), "skip": str(i * size)}),
)


async def fetch_shifts_page(client: PlandayClient, department_id: str, params: dict[str, str]) -> list[dict[str, Any]]:
    query = {"departmentId": department_id, **params}
    payload = await client.get_json(SHIFTS_PATH, query)
    records = extract_list(payload, "items", "data") or []
    return [{**record, DEPARTMENT_TAG: department_id} for record in records if isinstance(record, dict)]


async def _fetch_with_strategy(
    client: PlandayClient,
    department_id: str,
    base: dict[str, str],
    strategy: PagingStrategy,
) -> list[dict[str, Any]]:
    collected: list[dict[str, Any]] = []
    for page_index in range(MAX_PAGES):
        page = await fetch_shifts_page(client, department_id, strategy.params_for(base, page_index))
        collected.extend(page)
        if len(page) < strategy.page_size:
            break
    return collected


async def fetch_shifts_all_pages(
    client: PlandayClient,
    department_id: str,
    base: dict[str, str],
    strategies: tuple[PagingStrategy, ...] = PAGING_STRATEGIES,
) -> list[dict[str, Any]]:
    """Collect every shift page for one department, trying each paging convention.

    A bad request moves on to the next convention; any other upstream error
    propagates. When every convention is rejected a single unpaged request is
    made and its result returned as-is.
    """
    rejected: list[str] = []
    for strategy in strategies:
        try:
            shifts = await _fetch_with_strategy(client, department_id, base, strategy)
        except UpstreamBadRequest as exc:
            logger.info("Department %s rejected %s paging: %s", department_id, strategy.kind, exc)
            rejected.append(strategy.kind)
            continue
        logger.debug("Department %s paged with %s (%d shifts)", department_id, strategy.kind, len(shifts))
        format_log.record("paging", department_id, strategy.kind, rejected)
        return shifts

    logger.info("Department %s rejected every paging convention, falling back to a single request", department_id)
    shifts = await fetch_shifts_page(client, department_id, base)
    format_log.record("paging", department_id, UNPAGED, rejected)
    return shifts
