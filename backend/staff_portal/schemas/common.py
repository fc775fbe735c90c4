import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorResponse(BaseModel):
    error: str


class DepartmentDayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    department_ids: list[str] = Field(
        ...,
        alias="departmentIds",
        min_length=1,
        description="Planday department ids to query.",
    )
    date: str = Field(..., description="Calendar day in YYYY-MM-DD format.", pattern=r"^\d{4}-\d{2}-\d{2}$")

    @field_validator("department_ids", mode="before")
    @classmethod
    def _stringify_ids(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item) for item in value if item is not None and str(item).strip()]
        return value

    @field_validator("date")
    @classmethod
    def _real_calendar_day(cls, value: str) -> str:
        datetime.date.fromisoformat(value)
        return value
