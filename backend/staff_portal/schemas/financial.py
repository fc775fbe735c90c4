from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FinancialInsights(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    week_label: str = Field(alias="wkLabel")
    sales_actual: float = Field(alias="salesActual")
    sales_budget: float = Field(alias="salesBudget")
    sales_var: float = Field(alias="salesVar")
    sales_var_pct: float = Field(alias="salesVarPct")
    payroll_pct: float = Field(alias="payrollPct")
    food_pct: float = Field(alias="foodPct")
    drink_pct: float = Field(alias="drinkPct")
    sales_vs_last_year_pct: float = Field(alias="salesVsLastYearPct")
    avg_payroll_var_4w: float = Field(alias="avgPayrollVar4w")


class ComplianceStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payroll: Literal["green", "amber", "red"]
    food: Literal["green", "amber", "red"]
    drink: Literal["green", "amber", "red"]
    payroll_trend: Literal["green", "amber", "red"] = Field(alias="payrollTrend")
    sales_vs_last_year_ok: bool = Field(alias="salesVsLastYearOk")


class FinancialSummaryRequest(BaseModel):
    location: str = Field(..., min_length=1, description="Site, brand or GroupOverview sheet name.")
    period: Literal["Week", "Period", "Quarter"] = Field(default="Week")
    role: str | None = Field(default=None, description="Caller role from the profile store; required to see any location.")
    home_location: str | None = Field(default=None, description="Caller home site from the profile store.")


class FinancialSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str
    period: str
    current_week: str = Field(alias="currentWeek")
    rows: list[dict[str, Any]]
    insights: FinancialInsights | None = None
    compliance: ComplianceStatus | None = None


class RankingRequest(BaseModel):
    role: str = Field(..., description="Caller role; ranking is limited to admin and ops roles.")


class RankingRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str
    week: str
    payroll_pct: float = Field(alias="payrollPct")
    food_pct: float = Field(alias="foodPct")
    drink_pct: float = Field(alias="drinkPct")
    sales_var: float = Field(alias="salesVar")


class RankingResponse(BaseModel):
    ranking: list[RankingRow]


class LocationsResponse(BaseModel):
    locations: list[str]
