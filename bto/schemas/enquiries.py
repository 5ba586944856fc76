#bto/schemas/enquiries.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bto.schemas.primitives import ProjectName


class EnquiryCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    projectName: ProjectName
    text: str = Field(..., min_length=1, max_length=4000)


class EnquiryEditRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = Field(..., min_length=1, max_length=4000)


class EnquiryAnswerRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    response: str = Field(..., min_length=1, max_length=4000)


class EnquiryResponse(BaseModel):
    enquiryId: str
    applicantNric: str
    projectName: str
    text: str
    response: Optional[str] = None
    responderNric: Optional[str] = None
    createdAtIso: str
    answeredAtIso: Optional[str] = None


class EnquiryListResponse(BaseModel):
    enquiries: List[EnquiryResponse]
