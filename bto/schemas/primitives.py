#bto/schemas/primitives.py
from __future__ import annotations

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, StringConstraints

NRIC_PATTERN = r"^[ST]\d{7}[A-Z]$"


def _normalise_nric(value: Any) -> Any:
    # the pattern below is checked against the normalised text
    if isinstance(value, str):
        return value.strip().upper()
    return value


Nric = Annotated[str, StringConstraints(pattern=NRIC_PATTERN), BeforeValidator(_normalise_nric)]
ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]
OfficerSlots = Annotated[int, Field(ge=0, le=10)]
UnitCount = Annotated[int, Field(ge=0)]
