from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


MissionStatus = Literal["Pendente", "Cumprida", "Não Cumprida", "Atrasada"]
DayOfWeek = Literal[
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
    "Domingo",
]

FULFILLED: MissionStatus = "Cumprida"
PENDING: MissionStatus = "Pendente"
NOT_FULFILLED: MissionStatus = "Não Cumprida"
LATE: MissionStatus = "Atrasada"

# Target unit id that addresses every unit
ALL_UNITS = "ALL"


def _unique_unit_ids(unit_ids: list[str] | None) -> list[str] | None:
    if unit_ids is None:
        return None
    return list(dict.fromkeys(unit_ids))


class SubmittedFile(BaseModel):
    """Metadata of the file a unit uploaded for a mission. The bytes live elsewhere."""

    name: str
    type: str
    size: int = Field(..., ge=0, description="Size in bytes")
    uploaded_by_id: str
    uploaded_by_name: str
    uploaded_at: datetime = Field(default_factory=datetime.now)


class UnitMissionProgress(BaseModel):
    unit_id: str
    status: MissionStatus = PENDING
    submitted_file: SubmittedFile | None = None
    submitted_at: datetime | None = Field(
        default=None, description="First time the unit fulfilled the mission"
    )
    last_updated_by_id: str | None = None
    last_updated_by_name: str | None = None
    updated_at: datetime | None = None


class Mission(BaseModel):
    id: str
    title: str
    description: str | None = None
    day_of_week: DayOfWeek
    target_unit_ids: list[str] = Field(default_factory=list)
    unit_progress: list[UnitMissionProgress] = Field(default_factory=list)
    requires_file_submission: bool = Field(
        default=True, description="Whether a unit needs a file to fulfill the mission"
    )
    created_by: str
    created_by_name: str
    creation_date: datetime
    last_updated_by_id: str | None = None
    last_updated_by_name: str | None = None
    updated_at: datetime | None = None

    @field_validator("target_unit_ids")
    @classmethod
    def dedupe_target_unit_ids(cls, value):
        return _unique_unit_ids(value)

    def progress_for(self, unit_id: str) -> UnitMissionProgress | None:
        return next((p for p in self.unit_progress if p.unit_id == unit_id), None)


class MissionCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    day_of_week: DayOfWeek
    target_unit_ids: list[str] = Field(default_factory=list)
    requires_file_submission: bool = True

    @field_validator("target_unit_ids")
    @classmethod
    def dedupe_target_unit_ids(cls, value):
        return _unique_unit_ids(value)


class MissionUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    day_of_week: DayOfWeek | None = None
    target_unit_ids: list[str] | None = None
    requires_file_submission: bool | None = None

    @field_validator("target_unit_ids")
    @classmethod
    def dedupe_target_unit_ids(cls, value):
        return _unique_unit_ids(value)


class UnitStatusUpdate(BaseModel):
    status: MissionStatus


class UnitFileSubmission(BaseModel):
    """File metadata sent once the upload itself has completed."""

    name: str = Field(..., min_length=1)
    type: str
    size: int = Field(..., ge=0)
