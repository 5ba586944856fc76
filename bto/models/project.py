# bto/models/project.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List

from sqlalchemy import String, Integer, Boolean, Date, DateTime, Index, CheckConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, foreign

from bto.db.base import Base
from bto.models.person import Person


def _now():
    return datetime.now(timezone.utc)


class Project(Base):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    neighborhood: Mapped[str] = mapped_column(String(128), nullable=False)

    opening_date: Mapped[date] = mapped_column(Date, nullable=False)
    closing_date: Mapped[date] = mapped_column(Date, nullable=False)

    manager_nric: Mapped[str] = mapped_column(String(9), nullable=False, index=True)

    officer_slots: Mapped[int] = mapped_column(Integer, nullable=False)
    available_officer_slots: Mapped[int] = mapped_column(Integer, nullable=False)

    is_visible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=false(), default=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    inventories = relationship(
        "UnitInventory",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="UnitInventory.unit_type",
    )

    # read-only view over people.handling_project_name
    officers = relationship(
        Person,
        primaryjoin=lambda: Project.name == foreign(Person.handling_project_name),
        viewonly=True,
        order_by=lambda: Person.nric,
    )

    __table_args__ = (
        CheckConstraint("opening_date <= closing_date", name="ck_projects_window"),
        CheckConstraint("officer_slots >= 0", name="ck_projects_slots_nonneg"),
        CheckConstraint(
            "available_officer_slots >= 0 AND available_officer_slots <= officer_slots",
            name="ck_projects_available_slots_range",
        ),
        Index("ix_projects_visible_neighborhood", "is_visible", "neighborhood"),
    )

    @property
    def officer_nrics(self) -> List[str]:
        return [p.nric for p in self.officers]

    @property
    def unit_counts(self) -> Dict[str, int]:
        return {inv.unit_type: inv.available for inv in self.inventories}

    def is_in_application_period(self, today: date) -> bool:
        return self.opening_date <= today <= self.closing_date
