from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from staff_portal.schemas.common import DepartmentDayRequest

DEFAULT_STATUSES = ["Published", "Open"]


class ShiftsForDayRequest(DepartmentDayRequest):
    status: str | list[str] | None = Field(
        default=None,
        description="Shift status filter; defaults to Published and Open shifts.",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _stringify_statuses(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item) for item in value if item is not None and str(item).strip()]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def statuses(self) -> list[str]:
        if isinstance(self.status, list):
            return self.status or list(DEFAULT_STATUSES)
        if self.status:
            return [self.status]
        return list(DEFAULT_STATUSES)


class NormalizedShift(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    start_iso: str | None = Field(default=None, alias="startISO")
    end_iso: str | None = Field(default=None, alias="endISO")
    department_id: str = Field(alias="departmentId")


class ShiftsForDayResponse(BaseModel):
    items: list[NormalizedShift]
