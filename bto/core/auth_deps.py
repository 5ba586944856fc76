#bto/core/auth_deps.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from bto.core.security import decode_token
from bto.db import repository as repo
from bto.db.session import get_db
from bto.models.enums import PersonRole
from bto.policies.rbac import Principal

bearer = HTTPBearer(auto_error=True)


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Resolve the bearer token to a person on record.

    The token names the person (``sub`` = NRIC) and the role it was issued
    for; the stored role wins, and a token whose role no longer matches the
    record is refused.
    """
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    nric = payload.get("sub")
    claimed_role = payload.get("role")
    if not nric or not claimed_role:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    person = repo.people.get(db, str(nric))
    if person is None:
        raise HTTPException(status_code=401, detail="Unknown person.")
    if claimed_role != person.role:
        raise HTTPException(status_code=401, detail="Token role does not match the record.")

    principal = Principal(
        nric=person.nric,
        role=PersonRole(person.role),
        display_name=payload.get("name") or person.name,
    )

    # read by the access-log middleware
    request.state.principal = principal
    return principal
