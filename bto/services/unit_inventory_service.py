# bto/services/unit_inventory_service.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.core.errors import ConflictError, NotFoundError, ValidationError
from bto.core.locks import inventory_key, row_locks
from bto.db.repository import compare_and_set
from bto.models.enums import UnitType
from bto.models.unit_inventory import UnitInventory

logger = logging.getLogger(__name__)


class UnitInventoryService:
    """
    Per (project, unit type) counters.

    ``available`` changes only through ``decrement`` / ``increment`` (and
    ``provision``, which never touches held units). None of these commit: the
    caller's transaction decides.
    """

    def _row(self, db: Session, project_name: str, unit_type: UnitType) -> Optional[UnitInventory]:
        return db.execute(
            select(UnitInventory).where(
                UnitInventory.project_name == project_name,
                UnitInventory.unit_type == UnitType(unit_type).value,
            )
        ).scalar_one_or_none()

    # ---------------------------
    # READS
    # ---------------------------

    def available(self, db: Session, *, project_name: str, unit_type: UnitType) -> int:
        """
        Remaining units; 0 when the project does not offer the type.
        """
        value = db.execute(
            select(UnitInventory.available).where(
                UnitInventory.project_name == project_name,
                UnitInventory.unit_type == UnitType(unit_type).value,
            )
        ).scalar_one_or_none()
        return int(value or 0)

    def counts(self, db: Session, *, project_name: str) -> Dict[str, Dict[str, int]]:
        rows = db.execute(
            select(UnitInventory.unit_type, UnitInventory.provisioned, UnitInventory.available)
            .where(UnitInventory.project_name == project_name)
            .order_by(UnitInventory.unit_type)
        ).all()
        return {
            unit_type: {"provisioned": provisioned, "available": available}
            for unit_type, provisioned, available in rows
        }

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def decrement(self, db: Session, *, project_name: str, unit_type: UnitType) -> bool:
        """
        Compare-and-decrement: succeeds only while available > 0.
        """
        unit = UnitType(unit_type)
        with row_locks.hold(inventory_key(project_name, unit.value)):
            ok = compare_and_set(
                db,
                UnitInventory,
                where=[
                    UnitInventory.project_name == project_name,
                    UnitInventory.unit_type == unit.value,
                    UnitInventory.available > 0,
                ],
                values={"available": UnitInventory.available - 1},
            )
        if ok:
            logger.info("unit decremented", extra={"project": project_name, "unit_type": unit.value})
        else:
            logger.warning("no unit left", extra={"project": project_name, "unit_type": unit.value})
        return ok

    def increment(self, db: Session, *, project_name: str, unit_type: UnitType) -> bool:
        """
        Returns one unit; never exceeds the provisioned total.
        """
        unit = UnitType(unit_type)
        with row_locks.hold(inventory_key(project_name, unit.value)):
            ok = compare_and_set(
                db,
                UnitInventory,
                where=[
                    UnitInventory.project_name == project_name,
                    UnitInventory.unit_type == unit.value,
                    UnitInventory.available < UnitInventory.provisioned,
                ],
                values={"available": UnitInventory.available + 1},
            )
        if ok:
            logger.info("unit released", extra={"project": project_name, "unit_type": unit.value})
        else:
            logger.warning(
                "release ignored, inventory already at provisioned total",
                extra={"project": project_name, "unit_type": unit.value},
            )
        return ok

    def provision(
        self,
        db: Session,
        *,
        project_name: str,
        unit_type: UnitType,
        total: int,
    ) -> UnitInventory:
        """
        Set the provisioned total for a unit type, keeping held units held:
        available = total - held. Creates the row on first use.
        """
        if total < 0:
            raise ValidationError("Unit total cannot be negative.", total=total)

        unit = UnitType(unit_type)
        with row_locks.hold(inventory_key(project_name, unit.value)):
            inv = self._row(db, project_name, unit)

            if not inv:
                inv = UnitInventory(
                    project_name=project_name,
                    unit_type=unit.value,
                    provisioned=total,
                    available=total,
                )
                db.add(inv)
                db.flush()
                return inv

            held = inv.held
            if total < held:
                raise ConflictError(
                    f"Cannot provision {total} {unit.description} units; {held} already booked.",
                    project=project_name,
                    unit_type=unit.value,
                    held=held,
                )

            ok = compare_and_set(
                db,
                UnitInventory,
                where=[
                    UnitInventory.id == inv.id,
                    UnitInventory.provisioned - UnitInventory.available == held,
                ],
                values={"provisioned": total, "available": total - held},
            )
            if not ok:
                raise ConflictError("Inventory changed concurrently; retry.", project=project_name)

        refreshed = self._row(db, project_name, unit)
        if refreshed is None:
            raise NotFoundError("Inventory row vanished.", project=project_name)
        return refreshed
