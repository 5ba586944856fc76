import pytest
from pydantic import TypeAdapter, ValidationError

from bto.schemas.people import PersonCreateRequest
from bto.schemas.primitives import Nric


def test_nric_is_normalised_before_pattern_check():
    adapter = TypeAdapter(Nric)
    assert adapter.validate_python("s7777777x") == "S7777777X"
    assert adapter.validate_python("  t1234567b ") == "T1234567B"


@pytest.mark.parametrize("raw", ["X7777777X", "S777777X", "S77777777", ""])
def test_malformed_nric_rejected(raw):
    with pytest.raises(ValidationError):
        TypeAdapter(Nric).validate_python(raw)


def test_person_request_accepts_lowercase_nric():
    body = PersonCreateRequest(nric="s7777777x", name="New", age=40, maritalStatus="SINGLE")
    assert body.nric == "S7777777X"
