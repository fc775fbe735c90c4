from __future__ import annotations

import asyncio
import json
import logging
import math
import re
from datetime import date
from typing import Any, Iterable, Literal

import pandas as pd

from staff_portal.core.config import settings
from staff_portal.core.errors import ValidationError
from staff_portal.core.locations import ALL_LOCATIONS, BRAND_GROUPS, STORE_LOCATIONS
from staff_portal.schemas.financial import (
    ComplianceStatus,
    FinancialInsights,
    FinancialSummaryRequest,
    FinancialSummaryResponse,
    RankingRow,
)
from staff_portal.services.sheets import SheetsClient

logger = logging.getLogger(__name__)

WEEK_COLUMN = "Week"
MAX_WEEK = 52
TRAFFIC_LIGHT_BAND_PCT = 2.0

Bucket = Literal["Period", "Quarter"]
Light = Literal["green", "amber", "red"]


def parse_week_num(label: Any) -> int:
    digits = re.sub(r"[^\d]", "", str(label or ""))
    return int(digits) if digits else 0


def iso_week(today: date | None = None) -> int:
    week = (today or date.today()).isocalendar()[1]
    return min(week, MAX_WEEK)


def current_week_label(today: date | None = None) -> str:
    return f"W{iso_week(today)}"


def _fiscal_bucket(week: int) -> tuple[str, str]:
    # 4-4-5 periods inside 13-week quarters
    quarter_index = min((week - 1) // 13, 3)
    week_in_quarter = week - quarter_index * 13
    period_in_quarter = 0 if week_in_quarter <= 4 else 1 if week_in_quarter <= 8 else 2
    return f"P{quarter_index * 3 + period_in_quarter + 1}", f"Q{quarter_index + 1}"


FISCAL_CALENDAR: dict[str, tuple[str, str]] = {
    f"W{week}": _fiscal_bucket(week) for week in range(1, MAX_WEEK + 1)
}


def numeric_columns(frame: pd.DataFrame) -> list[str]:
    return [
        column
        for column in frame.columns
        if pd.api.types.is_numeric_dtype(frame[column]) and not pd.api.types.is_bool_dtype(frame[column])
    ]


def sort_by_week(frame: pd.DataFrame) -> pd.DataFrame:
    if frame.empty or WEEK_COLUMN not in frame.columns:
        return frame
    order = frame[WEEK_COLUMN].map(parse_week_num)
    return frame.assign(_week_num=order).sort_values("_week_num", kind="stable").drop(columns="_week_num").reset_index(drop=True)


def tag_fiscal_buckets(frame: pd.DataFrame) -> pd.DataFrame:
    if frame.empty:
        return frame
    labels = frame.get(WEEK_COLUMN, pd.Series("", index=frame.index)).fillna("").astype(str).str.strip()
    return frame.assign(
        Period=labels.map(lambda label: FISCAL_CALENDAR.get(label, ("P?", "Q?"))[0]),
        Quarter=labels.map(lambda label: FISCAL_CALENDAR.get(label, ("P?", "Q?"))[1]),
    )


def rollup_by_week(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Sum several sites' weekly rows into one row per week label."""
    frames = [frame for frame in frames if not frame.empty]
    if not frames:
        return pd.DataFrame()

    combined = pd.concat(frames, ignore_index=True)
    combined[WEEK_COLUMN] = combined.get(WEEK_COLUMN, pd.Series("", index=combined.index)).fillna("").astype(str).str.strip()
    totals = combined.groupby(WEEK_COLUMN, sort=False)[numeric_columns(combined)].sum().reset_index()
    return sort_by_week(totals)


def group_by_bucket(frame: pd.DataFrame, bucket: Bucket) -> pd.DataFrame:
    if frame.empty:
        return pd.DataFrame()
    value_columns = [column for column in numeric_columns(frame) if column != bucket]
    grouped = frame.groupby(bucket, sort=False)[value_columns].sum().reset_index()
    return grouped.rename(columns={bucket: WEEK_COLUMN})


def _number(row: pd.Series, column: str) -> float:
    try:
        value = float(row.get(column))
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(value) else value


def _pct_value(value: Any) -> float:
    match = re.match(r"^\s*([-+]?\d*\.?\d+)", str(value if value is not None else "").replace("%", ""))
    return float(match.group(1)) if match else 0.0


def _row_has_data(row: pd.Series) -> bool:
    return any(_number(row, column) != 0 for column in ("Sales_Actual", "Payroll_Actual", "Sales_Budget"))


def _share_of_sales(row: pd.Series, column: str, sales: float) -> float:
    return _number(row, column) / sales * 100 if sales else 0.0


def compute_insights(frame: pd.DataFrame, today: date | None = None) -> FinancialInsights | None:
    """Snapshot the last closed week of a site's (or brand's) weekly rows.

    Prefers last ISO week, then the latest earlier week with data, then the
    latest week with any data at all. Returns ``None`` when nothing has data.
    """
    if frame.empty or WEEK_COLUMN not in frame.columns:
        return None

    decorated = frame.assign(_week_num=frame[WEEK_COLUMN].map(parse_week_num))
    with_data = decorated[decorated.apply(_row_has_data, axis=1)].sort_values("_week_num", kind="stable")
    if with_data.empty:
        return None

    current = iso_week(today)
    snapshot_week = current - 1 if current - 1 > 0 else current

    exact = with_data[with_data["_week_num"] == snapshot_week]
    earlier = with_data[with_data["_week_num"] <= snapshot_week]
    if not exact.empty:
        latest = exact.iloc[0]
    elif not earlier.empty:
        latest = earlier.iloc[-1]
    else:
        latest = with_data.iloc[-1]

    week_num = int(latest["_week_num"])
    window = [week for week in (week_num, week_num - 1, week_num - 2, week_num - 3) if week > 0]
    trend_rows = decorated[decorated["_week_num"].isin(window)]
    trend_values = [_pct_value(value) for value in trend_rows.get("Payroll_v%", pd.Series(dtype=object)).tolist()]
    trend_values += [0.0] * (len(trend_rows) - len(trend_values))
    avg_payroll_var = sum(trend_values) / len(trend_values) if trend_values else 0.0

    sales_actual = _number(latest, "Sales_Actual")
    sales_budget = _number(latest, "Sales_Budget")
    sales_last_year = _number(latest, "Sales_LastYear")
    sales_var = sales_actual - sales_budget
    label = latest.get(WEEK_COLUMN)

    return FinancialInsights(
        week_label=str(label) if isinstance(label, str) and label.strip() else f"W{week_num}",
        sales_actual=sales_actual,
        sales_budget=sales_budget,
        sales_var=sales_var,
        sales_var_pct=sales_var / sales_budget * 100 if sales_budget else 0.0,
        payroll_pct=_share_of_sales(latest, "Payroll_Actual", sales_actual),
        food_pct=_share_of_sales(latest, "Food_Actual", sales_actual),
        drink_pct=_share_of_sales(latest, "Drink_Actual", sales_actual),
        sales_vs_last_year_pct=(sales_actual - sales_last_year) / sales_last_year * 100 if sales_last_year else 0.0,
        avg_payroll_var_4w=avg_payroll_var,
    )


def cost_light(value_pct: float, target_pct: float) -> Light:
    if math.isnan(value_pct):
        return "red"
    if value_pct <= target_pct:
        return "green"
    if value_pct <= target_pct + TRAFFIC_LIGHT_BAND_PCT:
        return "amber"
    return "red"


def trend_light(avg_payroll_var: float) -> Light:
    magnitude = abs(avg_payroll_var or 0.0)
    if magnitude < 1:
        return "green"
    if magnitude < 2:
        return "amber"
    return "red"


def compliance_status(insights: FinancialInsights) -> ComplianceStatus:
    return ComplianceStatus(
        payroll=cost_light(insights.payroll_pct, settings.payroll_target_pct),
        food=cost_light(insights.food_pct, settings.food_target_pct),
        drink=cost_light(insights.drink_pct, settings.drink_target_pct),
        payroll_trend=trend_light(insights.avg_payroll_var_4w),
        sales_vs_last_year_ok=insights.sales_vs_last_year_pct >= 0,
    )


def frame_records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    if frame.empty:
        return []
    return json.loads(frame.to_json(orient="records"))


def require_known_location(location: str) -> None:
    if location not in ALL_LOCATIONS:
        raise ValidationError(f"Unknown location '{location}'")


async def load_location_frame(sheets: SheetsClient, location: str) -> pd.DataFrame:
    require_known_location(location)

    sites = BRAND_GROUPS.get(location)
    if sites:
        frames = await asyncio.gather(*(sheets.fetch_tab(site) for site in sites))
        return rollup_by_week(frames)
    return sort_by_week(await sheets.fetch_tab(location))


async def build_financial_summary(
    sheets: SheetsClient,
    payload: FinancialSummaryRequest,
    today: date | None = None,
) -> FinancialSummaryResponse:
    weekly = tag_fiscal_buckets(await load_location_frame(sheets, payload.location))
    if payload.period == "Week":
        rows = weekly
    else:
        rows = group_by_bucket(weekly, payload.period)

    insights = compute_insights(weekly, today)
    return FinancialSummaryResponse(
        location=payload.location,
        period=payload.period,
        current_week=current_week_label(today),
        rows=frame_records(rows),
        insights=insights,
        compliance=compliance_status(insights) if insights else None,
    )


def store_snapshot(location: str, frame: pd.DataFrame, today: date | None = None) -> RankingRow | None:
    insights = compute_insights(sort_by_week(frame), today)
    if insights is None:
        return None
    return RankingRow(
        location=location,
        week=insights.week_label,
        payroll_pct=insights.payroll_pct,
        food_pct=insights.food_pct,
        drink_pct=insights.drink_pct,
        sales_var=insights.sales_var,
    )


async def build_store_ranking(sheets: SheetsClient, today: date | None = None) -> list[RankingRow]:
    frames = await asyncio.gather(*(sheets.fetch_tab(location) for location in STORE_LOCATIONS))
    snapshots = [store_snapshot(location, frame, today) for location, frame in zip(STORE_LOCATIONS, frames)]
    ranking = [snapshot for snapshot in snapshots if snapshot is not None]
    logger.info("Ranked %d of %d stores", len(ranking), len(STORE_LOCATIONS))
    return sorted(ranking, key=lambda row: row.payroll_pct, reverse=True)
