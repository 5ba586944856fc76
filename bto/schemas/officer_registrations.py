#bto/schemas/officer_registrations.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from bto.models.enums import RegistrationStatus
from bto.schemas.primitives import ProjectName


class RegistrationCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    projectName: ProjectName


class RegistrationResponse(BaseModel):
    registrationId: str
    officerNric: str
    projectName: str
    status: RegistrationStatus
    createdAtIso: str
    decidedAtIso: Optional[str] = None


class RegistrationListResponse(BaseModel):
    registrations: List[RegistrationResponse]
