from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

import pandas as pd

from staff_portal.core.errors import UpstreamError
from staff_portal.planday.client import PlandayClient, extract_list
from staff_portal.planday.format_log import format_log
from staff_portal.schemas.revenue import RevenueForDayRequest, RevenueForDayResponse

logger = logging.getLogger(__name__)

DATE_KEYS = ("date", "day", "businessDate", "business_date", "BusinessDate")
ACTUAL_KEYS = ("actualRevenue", "actualSales", "actual", "revenue", "sales", "dailyRevenue")
FORECAST_KEYS = ("forecastRevenue", "revenueForecast", "forecast", "expectedRevenue", "budget")


@dataclass(frozen=True)
class RevenueEndpoint:
    label: str
    path: str
    from_param: str
    to_param: str
    rows_key: str

    def params(self, department_id: str, start: str, end: str) -> dict[str, str]:
        return {"departmentId": department_id, self.from_param: start, self.to_param: end}

    def pick_rows(self, payload: Any) -> list[Any] | None:
        if isinstance(payload, dict) and isinstance(payload.get(self.rows_key), list):
            return payload[self.rows_key]
        return extract_list(payload, "data")


# The revenue report path differs between Planday tenants; these are tried in order.
REVENUE_ENDPOINTS: tuple[RevenueEndpoint, ...] = (
    RevenueEndpoint("reports.v1.0", "/reports/v1.0/revenue", "from", "to", "items"),
    RevenueEndpoint("reports.v1", "/reports/v1/revenue", "from", "to", "items"),
    RevenueEndpoint("dashboard.v1", "/dashboard/v1/revenue", "fromDate", "toDate", "days"),
)


def start_of_week(day: str) -> str:
    parsed = date.fromisoformat(day)
    return (parsed - timedelta(days=parsed.weekday())).isoformat()


def add_days(day: str, delta: int) -> str:
    return (date.fromisoformat(day) + timedelta(days=delta)).isoformat()


async def fetch_daily_revenue(client: PlandayClient, department_id: str, start: str, end: str) -> list[Any]:
    rejected: list[str] = []
    for endpoint in REVENUE_ENDPOINTS:
        try:
            payload = await client.get_json(endpoint.path, endpoint.params(department_id, start, end))
        except UpstreamError as exc:
            logger.info("Revenue endpoint %s failed for department %s: %s", endpoint.label, department_id, exc)
            rejected.append(endpoint.label)
            continue

        rows = endpoint.pick_rows(payload)
        if rows is not None:
            logger.debug("Revenue endpoint %s returned %d rows for department %s", endpoint.label, len(rows), department_id)
            format_log.record("revenue_endpoint", department_id, endpoint.label, rejected)
            return rows
        logger.warning("Revenue endpoint %s returned no row list for department %s", endpoint.label, department_id)
        rejected.append(endpoint.label)

    format_log.record("revenue_endpoint", department_id, None, rejected)
    return []


def _coalesce(row: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _to_numeric(series: pd.Series) -> pd.Series:
    numeric = pd.to_numeric(series, errors="coerce")
    cleaned = pd.to_numeric(
        series.astype(str).str.replace(",", "", regex=False).str.replace(r"[^0-9.\-]", "", regex=True),
        errors="coerce",
    )
    return numeric.fillna(cleaned)


def normalise_revenue_rows(rows: list[Any]) -> pd.DataFrame:
    records = [
        {
            "date": _coalesce(row, DATE_KEYS),
            "actual": _coalesce(row, ACTUAL_KEYS),
            "forecast": _coalesce(row, FORECAST_KEYS),
        }
        for row in rows
        if isinstance(row, dict)
    ]
    frame = pd.DataFrame(records, columns=["date", "actual", "forecast"])
    frame["actual"] = _to_numeric(frame["actual"])
    frame["forecast"] = _to_numeric(frame["forecast"])
    return frame


def _money_sum(series: pd.Series) -> float:
    return float(series.fillna(0).sum())


async def revenue_for_day(client: PlandayClient, payload: RevenueForDayRequest) -> RevenueForDayResponse:
    week_start = start_of_week(payload.date)
    tomorrow = add_days(payload.date, 1)

    today_rows: list[Any] = []
    week_rows: list[Any] = []
    for department_id in payload.department_ids:
        today_rows.extend(await fetch_daily_revenue(client, department_id, payload.date, tomorrow))
        week_rows.extend(await fetch_daily_revenue(client, department_id, week_start, tomorrow))

    today = normalise_revenue_rows(today_rows)
    on_day = today["date"].map(lambda value: isinstance(value, str) and value.startswith(payload.date))
    today = today.loc[on_day.astype(bool)]
    week = normalise_revenue_rows(week_rows)

    return RevenueForDayResponse(
        today_actual=_money_sum(today["actual"]),
        today_forecast=_money_sum(today["forecast"]),
        week_actual=_money_sum(week["actual"]),
        week_forecast=_money_sum(week["forecast"]),
    )
