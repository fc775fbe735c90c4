import asyncio
import json
import sys

import httpx
from pydantic import ValidationError as SchemaValidationError

from staff_portal.core.config import settings
from staff_portal.core.errors import PortalError
from staff_portal.core.logging import configure_logging
from staff_portal.planday.client import PlandayClient
from staff_portal.planday.token_cache import TokenCache
from staff_portal.schemas.revenue import RevenueForDayRequest
from staff_portal.schemas.shifts import ShiftsForDayRequest
from staff_portal.services.revenue import revenue_for_day
from staff_portal.services.shifts import shifts_for_day

USAGE = "Usage: python -m staff_portal.cli (shifts|revenue) YYYY-MM-DD DEPARTMENT_ID [DEPARTMENT_ID ...]"


async def _run(command: str, day: str, department_ids: list[str]) -> object:
    async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as http:
        tokens = TokenCache(
            http,
            client_id=settings.planday_client_id,
            refresh_token=settings.planday_refresh_token,
            token_url=settings.planday_token_url,
        )
        client = PlandayClient(http, tokens, client_id=settings.planday_client_id, api_base=settings.planday_api_base)

        if command == "shifts":
            items = await shifts_for_day(client, ShiftsForDayRequest(department_ids=department_ids, date=day))
            return {"items": [item.model_dump(by_alias=True) for item in items]}
        response = await revenue_for_day(client, RevenueForDayRequest(department_ids=department_ids, date=day))
        return response.model_dump(by_alias=True)


def main() -> None:
    args = sys.argv[1:]
    if len(args) < 3 or args[0] not in {"shifts", "revenue"}:
        print(USAGE)
        return

    configure_logging()
    try:
        result = asyncio.run(_run(args[0], args[1], args[2:]))
    except (PortalError, SchemaValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
