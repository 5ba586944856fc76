"""housing core tables

Revision ID: 0001_housing_core
Revises:
Create Date: 2026-10-18 10:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_housing_core'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "people",
        sa.Column("nric", sa.String(length=9), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("marital_status", sa.String(length=16), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("current_application_id", sa.String(length=36), nullable=True),
        sa.Column("handling_project_name", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("age >= 0", name="ck_people_age_nonneg"),
    )
    op.create_index("ix_people_handling_project", "people", ["handling_project_name"])
    op.create_index("ix_people_role", "people", ["role"])

    op.create_table(
        "projects",
        sa.Column("name", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("neighborhood", sa.String(length=128), nullable=False),
        sa.Column("opening_date", sa.Date(), nullable=False),
        sa.Column("closing_date", sa.Date(), nullable=False),
        sa.Column("manager_nric", sa.String(length=9), nullable=False),
        sa.Column("officer_slots", sa.Integer(), nullable=False),
        sa.Column("available_officer_slots", sa.Integer(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("opening_date <= closing_date", name="ck_projects_window"),
        sa.CheckConstraint("officer_slots >= 0", name="ck_projects_slots_nonneg"),
        sa.CheckConstraint(
            "available_officer_slots >= 0 AND available_officer_slots <= officer_slots",
            name="ck_projects_available_slots_range",
        ),
    )
    op.create_index("ix_projects_manager_nric", "projects", ["manager_nric"])
    op.create_index("ix_projects_visible_neighborhood", "projects", ["is_visible", "neighborhood"])

    op.create_table(
        "unit_inventories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "project_name",
            sa.String(length=128),
            sa.ForeignKey("projects.name", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("unit_type", sa.String(length=16), nullable=False),
        sa.Column("provisioned", sa.Integer(), nullable=False),
        sa.Column("available", sa.Integer(), nullable=False),
        sa.UniqueConstraint("project_name", "unit_type", name="uq_unit_inventory_project_type"),
        sa.CheckConstraint("provisioned >= 0", name="ck_unit_inventory_provisioned_nonneg"),
        sa.CheckConstraint("available >= 0", name="ck_unit_inventory_available_nonneg"),
        sa.CheckConstraint("available <= provisioned", name="ck_unit_inventory_available_cap"),
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("applicant_nric", sa.String(length=9), nullable=False),
        sa.Column(
            "project_name",
            sa.String(length=128),
            sa.ForeignKey("projects.name"),
            nullable=False,
        ),
        sa.Column("unit_type", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("withdrawal_requested", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("booking_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_applications_applicant_status", "applications", ["applicant_nric", "status"]
    )
    op.create_index("ix_applications_project_status", "applications", ["project_name", "status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "application_id",
            sa.String(length=36),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("applicant_nric", sa.String(length=9), nullable=False),
        sa.Column("project_name", sa.String(length=128), nullable=False),
        sa.Column("unit_type", sa.String(length=16), nullable=False),
        sa.Column("officer_nric", sa.String(length=9), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("application_id", name="uq_bookings_application"),
    )
    op.create_index("ix_bookings_project_type", "bookings", ["project_name", "unit_type"])

    op.create_table(
        "officer_registrations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("officer_nric", sa.String(length=9), nullable=False),
        sa.Column(
            "project_name",
            sa.String(length=128),
            sa.ForeignKey("projects.name", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_officer_registrations_project_status",
        "officer_registrations",
        ["project_name", "status"],
    )
    op.create_index("ix_officer_registrations_officer", "officer_registrations", ["officer_nric"])

    op.create_table(
        "enquiries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("applicant_nric", sa.String(length=9), nullable=False),
        sa.Column(
            "project_name",
            sa.String(length=128),
            sa.ForeignKey("projects.name", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=True),
        sa.Column("responder_nric", sa.String(length=9), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_enquiries_project", "enquiries", ["project_name"])
    op.create_index("ix_enquiries_applicant", "enquiries", ["applicant_nric"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("actor_nric", sa.String(length=9), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("project_name", sa.String(length=128), nullable=True),
        sa.Column("ref_id", sa.String(length=64), nullable=True),
        sa.Column("details_json", sa.JSON(), nullable=False),
    )
    op.create_index("ix_audit_logs_request_id", "audit_logs", ["request_id"])
    op.create_index("ix_audit_project", "audit_logs", ["project_name"])
    op.create_index("ix_audit_action", "audit_logs", ["action"])


def downgrade():
    op.drop_index("ix_audit_action", table_name="audit_logs")
    op.drop_index("ix_audit_project", table_name="audit_logs")
    op.drop_index("ix_audit_logs_request_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_enquiries_applicant", table_name="enquiries")
    op.drop_index("ix_enquiries_project", table_name="enquiries")
    op.drop_table("enquiries")

    op.drop_index("ix_officer_registrations_officer", table_name="officer_registrations")
    op.drop_index("ix_officer_registrations_project_status", table_name="officer_registrations")
    op.drop_table("officer_registrations")

    op.drop_index("ix_bookings_project_type", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_applications_project_status", table_name="applications")
    op.drop_index("ix_applications_applicant_status", table_name="applications")
    op.drop_table("applications")

    op.drop_table("unit_inventories")

    op.drop_index("ix_projects_visible_neighborhood", table_name="projects")
    op.drop_index("ix_projects_manager_nric", table_name="projects")
    op.drop_table("projects")

    op.drop_index("ix_people_role", table_name="people")
    op.drop_index("ix_people_handling_project", table_name="people")
    op.drop_table("people")
