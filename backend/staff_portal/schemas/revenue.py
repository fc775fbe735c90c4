from pydantic import BaseModel, ConfigDict, Field

from staff_portal.schemas.common import DepartmentDayRequest


class RevenueForDayRequest(DepartmentDayRequest):
    pass


class RevenueForDayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    today_actual: float = Field(alias="todayActual")
    today_forecast: float = Field(alias="todayForecast")
    week_actual: float = Field(alias="weekActual")
    week_forecast: float = Field(alias="weekForecast")
