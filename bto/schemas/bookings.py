#bto/schemas/bookings.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict

from bto.models.enums import UnitType


class BookingCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    applicationId: str


class BookingResponse(BaseModel):
    bookingId: str
    applicationId: str
    applicantNric: str
    projectName: str
    unitType: UnitType
    officerNric: str
    createdAtIso: str


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]


class ReceiptResponse(BaseModel):
    bookingId: str
    receipt: str
