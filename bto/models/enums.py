#bto/models/enums.py
from __future__ import annotations
from enum import Enum


class PersonRole(str, Enum):
    APPLICANT = "APPLICANT"
    OFFICER = "OFFICER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class MaritalStatus(str, Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"


class UnitType(str, Enum):
    TWO_ROOM = "TWO_ROOM"
    THREE_ROOM = "THREE_ROOM"

    @property
    def rooms(self) -> int:
        return _UNIT_ROOMS[self]

    @property
    def description(self) -> str:
        return f"{self.rooms}-Room"

    @classmethod
    def smallest(cls, offered=None) -> "UnitType":
        pool = list(offered) if offered is not None else list(cls)
        return min(pool, key=lambda u: u.rooms)


_UNIT_ROOMS = {
    UnitType.TWO_ROOM: 2,
    UnitType.THREE_ROOM: 3,
}


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    UNSUCCESSFUL = "UNSUCCESSFUL"
    BOOKED = "BOOKED"


# statuses that count as the applicant's single outstanding application
ACTIVE_APPLICATION_STATUSES = frozenset(
    {
        ApplicationStatus.PENDING,
        ApplicationStatus.SUCCESSFUL,
        ApplicationStatus.BOOKED,
    }
)


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
