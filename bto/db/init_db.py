from __future__ import annotations

from sqlalchemy.engine import Engine

from bto.db.base import Base

# FORCE model registration
from bto.models import person, project, unit_inventory, application, booking  # noqa: F401
from bto.models import officer_registration, enquiry, audit_log  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
