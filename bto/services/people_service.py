# bto/services/people_service.py
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.core.errors import ValidationError
from bto.db import repository as repo
from bto.db.session import transaction
from bto.models.enums import MaritalStatus, PersonRole
from bto.models.person import Person

logger = logging.getLogger(__name__)

NRIC_RE = re.compile(r"^[ST]\d{7}[A-Z]$")


class PeopleService:
    def create(
        self,
        db: Session,
        *,
        nric: str,
        name: str,
        age: int,
        marital_status: MaritalStatus,
        role: PersonRole = PersonRole.APPLICANT,
    ) -> Person:
        nric = (nric or "").strip().upper()
        if not NRIC_RE.match(nric):
            raise ValidationError(f"Malformed NRIC: {nric!r}", code="INVALID_NRIC")
        if age < 0:
            raise ValidationError("Age cannot be negative.", code="INVALID_AGE", age=age)
        if not (name or "").strip():
            raise ValidationError("Name is required.")

        with transaction(db):
            repo.people.put(
                db,
                Person(
                    nric=nric,
                    name=name.strip(),
                    age=age,
                    marital_status=MaritalStatus(marital_status).value,
                    role=PersonRole(role).value,
                    created_at=datetime.now(timezone.utc),
                ),
            )

        logger.info("person created", extra={"nric": nric, "role": PersonRole(role).value})
        return repo.people.require(db, nric)

    def get(self, db: Session, *, nric: str) -> Person:
        return repo.people.require(db, nric)

    def list(self, db: Session, *, role: Optional[PersonRole] = None) -> List[Person]:
        stmt = select(Person)
        if role is not None:
            stmt = stmt.where(Person.role == PersonRole(role).value)
        return list(db.execute(stmt.order_by(Person.nric.asc())).scalars().all())
