#bto/schemas/people.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bto.models.enums import MaritalStatus, PersonRole
from bto.schemas.primitives import Nric


class PersonCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    nric: Nric
    name: str = Field(..., min_length=1, max_length=128)
    age: int = Field(..., ge=0, le=150)
    maritalStatus: MaritalStatus
    role: PersonRole = PersonRole.APPLICANT


class PersonResponse(BaseModel):
    nric: str
    name: str
    age: int
    maritalStatus: MaritalStatus
    role: PersonRole
    currentApplicationId: Optional[str] = None
    handlingProjectName: Optional[str] = None
    eligibleUnitTypes: List[str] = []


class PersonListResponse(BaseModel):
    people: List[PersonResponse]
