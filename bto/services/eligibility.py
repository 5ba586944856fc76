# bto/services/eligibility.py
from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from bto.models.enums import MaritalStatus, UnitType

MARRIED_MIN_AGE = 21
SINGLE_MIN_AGE = 35


def eligible_unit_types(
    age: int,
    marital_status: MaritalStatus,
    offered: Optional[Iterable[UnitType]] = None,
) -> FrozenSet[UnitType]:
    """
    Rules:
    - MARRIED, age >= 21 -> every offered unit type
    - SINGLE,  age >= 35 -> only the smallest unit type
    - anyone else        -> nothing
    ``offered`` defaults to every unit type.
    """
    pool = frozenset(offered) if offered is not None else frozenset(UnitType)
    if not pool:
        return frozenset()

    status = MaritalStatus(marital_status)

    if status == MaritalStatus.MARRIED and age >= MARRIED_MIN_AGE:
        return pool

    if status == MaritalStatus.SINGLE and age >= SINGLE_MIN_AGE:
        smallest = UnitType.smallest()
        return frozenset({smallest}) & pool

    return frozenset()


def is_eligible(age: int, marital_status: MaritalStatus, unit_type: UnitType) -> bool:
    return UnitType(unit_type) in eligible_unit_types(age, marital_status)
