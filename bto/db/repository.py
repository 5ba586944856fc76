# bto/db/repository.py
"""
Persistence gateway: per-entity get/put/update/delete by primary key, plus the
conditional UPDATE used for every guarded counter or status change.

Nothing here commits; the calling service owns the transaction.
"""
from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import inspect, select, update
from sqlalchemy.orm import Session

from bto.core.errors import ConflictError, NotFoundError
from bto.models.application import Application
from bto.models.booking import Booking
from bto.models.enquiry import Enquiry
from bto.models.officer_registration import OfficerRegistration
from bto.models.person import Person
from bto.models.project import Project

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository(Generic[T]):
    def __init__(self, model: Type[T], label: str) -> None:
        self.model = model
        self.label = label

    def _key_of(self, entity: T) -> Any:
        identity = inspect(self.model).primary_key_from_instance(entity)
        return identity[0] if len(identity) == 1 else tuple(identity)

    def get(self, db: Session, key: Any) -> Optional[T]:
        return db.get(self.model, key)

    def get_for_update(self, db: Session, key: Any) -> Optional[T]:
        """
        Row-locking read (FOR UPDATE where the backend supports it).
        """
        pk = inspect(self.model).primary_key[0]
        return db.execute(
            select(self.model)
            .where(pk == key)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def require(self, db: Session, key: Any) -> T:
        row = self.get(db, key)
        if row is None:
            raise NotFoundError(f"{self.label} not found: {key}", key=str(key))
        return row

    def put(self, db: Session, entity: T) -> T:
        key = self._key_of(entity)
        if key is not None and self.get(db, key) is not None:
            raise ConflictError(f"{self.label} already exists: {key}", key=str(key))
        db.add(entity)
        db.flush()
        return entity

    def update(self, db: Session, entity: T) -> T:
        key = self._key_of(entity)
        if key is None or self.get(db, key) is None:
            raise NotFoundError(f"{self.label} not found: {key}", key=str(key))
        merged = db.merge(entity)
        db.flush()
        return merged

    def delete(self, db: Session, key: Any) -> None:
        row = self.get(db, key)
        if row is None:
            raise NotFoundError(f"{self.label} not found: {key}", key=str(key))
        db.delete(row)
        db.flush()

    def list_where(self, db: Session, *criteria, order_by=None) -> Sequence[T]:
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        return db.execute(stmt).scalars().all()


def compare_and_set(
    db: Session,
    model: Type[Any],
    where: Sequence[Any],
    values: Mapping[str, Any],
) -> bool:
    """
    Single conditional UPDATE; True iff exactly one row matched.

    Issued against the table (Core), so the row count is the database's own
    answer and concurrent callers cannot both win.
    """
    db.flush()
    table = model.__table__
    result = db.execute(update(table).where(*where).values(**values))
    changed = result.rowcount == 1
    if changed:
        # loaded instances of this model no longer match the row
        for obj in list(db.identity_map.values()):
            if isinstance(obj, model):
                db.expire(obj)
    else:
        logger.debug("compare_and_set missed", extra={"table": table.name})
    return changed


people = Repository(Person, "Person")
projects = Repository(Project, "Project")
applications = Repository(Application, "Application")
bookings = Repository(Booking, "Booking")
registrations = Repository(OfficerRegistration, "Officer registration")
enquiries = Repository(Enquiry, "Enquiry")
