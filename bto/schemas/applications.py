#bto/schemas/applications.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from bto.models.enums import ApplicationStatus, UnitType
from bto.schemas.primitives import ProjectName


class ApplicationCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    projectName: ProjectName
    unitType: UnitType


class ApplicationResponse(BaseModel):
    applicationId: str
    applicantNric: str
    projectName: str
    unitType: UnitType
    status: ApplicationStatus
    withdrawalRequested: bool
    bookingId: Optional[str] = None
    createdAtIso: str
    updatedAtIso: str


class ApplicationListResponse(BaseModel):
    projectName: str
    applications: List[ApplicationResponse]
