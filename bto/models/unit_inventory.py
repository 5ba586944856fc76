# bto/models/unit_inventory.py
from __future__ import annotations

from sqlalchemy import (
    String, Integer, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bto.db.base import Base


class UnitInventory(Base):
    __tablename__ = "unit_inventories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    project_name: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("projects.name", ondelete="CASCADE"),
        nullable=False,
    )
    unit_type: Mapped[str] = mapped_column(String(16), nullable=False)

    # provisioned total vs. currently unbooked
    provisioned: Mapped[int] = mapped_column(Integer, nullable=False)
    available: Mapped[int] = mapped_column(Integer, nullable=False)

    project = relationship("Project", back_populates="inventories")

    __table_args__ = (
        UniqueConstraint("project_name", "unit_type", name="uq_unit_inventory_project_type"),
        CheckConstraint("provisioned >= 0", name="ck_unit_inventory_provisioned_nonneg"),
        CheckConstraint("available >= 0", name="ck_unit_inventory_available_nonneg"),
        CheckConstraint("available <= provisioned", name="ck_unit_inventory_available_cap"),
    )

    @property
    def held(self) -> int:
        return self.provisioned - self.available
