import pytest

from bto.models.enums import MaritalStatus, UnitType
from bto.services.eligibility import eligible_unit_types, is_eligible


def test_single_at_36_gets_only_smallest_unit_type():
    assert eligible_unit_types(36, MaritalStatus.SINGLE) == frozenset({UnitType.TWO_ROOM})
    assert is_eligible(36, MaritalStatus.SINGLE, UnitType.TWO_ROOM) is True
    assert is_eligible(36, MaritalStatus.SINGLE, UnitType.THREE_ROOM) is False


def test_married_at_21_gets_every_unit_type():
    assert eligible_unit_types(21, MaritalStatus.MARRIED) == frozenset(UnitType)


@pytest.mark.parametrize(
    "age,status",
    [
        (34, MaritalStatus.SINGLE),
        (20, MaritalStatus.MARRIED),
        (0, MaritalStatus.SINGLE),
    ],
)
def test_below_age_threshold_gets_nothing(age, status):
    assert eligible_unit_types(age, status) == frozenset()
    assert not any(is_eligible(age, status, u) for u in UnitType)


def test_age_thresholds_are_inclusive():
    assert eligible_unit_types(35, MaritalStatus.SINGLE) == frozenset({UnitType.TWO_ROOM})
    assert eligible_unit_types(21, MaritalStatus.MARRIED) != frozenset()


def test_offered_types_limit_the_result():
    only_three = [UnitType.THREE_ROOM]
    assert eligible_unit_types(40, MaritalStatus.MARRIED, only_three) == frozenset(only_three)
    # the smallest type overall is not offered, so a single applicant gets nothing
    assert eligible_unit_types(40, MaritalStatus.SINGLE, only_three) == frozenset()
    assert eligible_unit_types(40, MaritalStatus.MARRIED, []) == frozenset()


def test_accepts_raw_status_values():
    assert eligible_unit_types(50, "MARRIED") == frozenset(UnitType)
