#bto/schemas/projects.py
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bto.models.enums import UnitType
from bto.schemas.primitives import OfficerSlots, ProjectName, UnitCount


class ProjectCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: ProjectName
    neighborhood: str = Field(..., min_length=1, max_length=128)
    openingDate: date
    closingDate: date
    units: Dict[UnitType, UnitCount] = Field(..., min_length=1)
    officerSlots: OfficerSlots
    isVisible: bool = False

    @model_validator(mode="after")
    def _window(self):
        if self.openingDate > self.closingDate:
            raise ValueError("openingDate must not be after closingDate")
        return self


class ProjectPatchRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    neighborhood: Optional[str] = Field(default=None, min_length=1, max_length=128)
    openingDate: Optional[date] = None
    closingDate: Optional[date] = None
    officerSlots: Optional[OfficerSlots] = None
    units: Optional[Dict[UnitType, UnitCount]] = None


class ProjectVisibilityRequest(BaseModel):
    isVisible: bool


class UnitCountResponse(BaseModel):
    provisioned: int
    available: int


class ProjectResponse(BaseModel):
    name: str
    neighborhood: str
    openingDate: str
    closingDate: str
    managerNric: str
    officerSlots: int
    availableOfficerSlots: int
    officers: List[str]
    isVisible: bool
    units: Dict[str, UnitCountResponse]
    createdAtIso: str
    updatedAtIso: str


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
