"""Add hospitals, forwarding columns and customer signup coordinates.

Deployments still on the previous revision are served by the reduced
ambulance listing query.

Revision ID: 20261002_add_forwarding
Revises: 20260915_create_dispatch
Create Date: 2026-10-02
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.sql import func
from sqlalchemy.dialects import postgresql


revision = "20261002_add_forwarding"
down_revision = "20260915_create_dispatch"
branch_labels = None
depends_on = None

_RESPONSE_VALUES = ("pending", "accepted", "rejected")


def _response_type(bind):
    if bind.dialect.name == "postgresql":
        return postgresql.ENUM(*_RESPONSE_VALUES, name="hospitalresponse", create_type=False)
    return sa.Enum(*_RESPONSE_VALUES, name="hospitalresponse")


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())

    if "hospitals" not in tables:
        op.create_table(
            "hospitals",
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), primary_key=True),
            sa.Column("hospital_name", sa.String(length=128), nullable=False),
            sa.Column("address", sa.Text, nullable=True),
            sa.Column("state", sa.String(length=64), nullable=False),
            sa.Column("district", sa.String(length=64), nullable=True),
            sa.Column("number_of_ambulances", sa.Integer, nullable=False, server_default="0"),
            sa.Column(
                "status",
                sa.Enum("active", "inactive", name="hospitalstatus"),
                nullable=False,
                server_default="active",
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
        )

    if "customers" in tables:
        cols = {col["name"] for col in inspector.get_columns("customers")}
        if "signup_lat" not in cols:
            op.add_column("customers", sa.Column("signup_lat", sa.Float, nullable=True))
        if "signup_lng" not in cols:
            op.add_column("customers", sa.Column("signup_lng", sa.Float, nullable=True))

    if "ambulance_requests" in tables:
        cols = {col["name"] for col in inspector.get_columns("ambulance_requests")}
        if bind.dialect.name == "postgresql":
            postgresql.ENUM(*_RESPONSE_VALUES, name="hospitalresponse").create(bind, checkfirst=True)
        if "is_read" not in cols:
            op.add_column(
                "ambulance_requests",
                sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
            )
        if "forwarded_to_hospital_id" not in cols:
            op.add_column(
                "ambulance_requests",
                sa.Column("forwarded_to_hospital_id", sa.Integer, nullable=True),
            )
            op.create_index(
                "ix_ambulance_requests_forwarded_to_hospital_id",
                "ambulance_requests",
                ["forwarded_to_hospital_id"],
            )
        if "forwarded_by_admin_id" not in cols:
            op.add_column(
                "ambulance_requests",
                sa.Column("forwarded_by_admin_id", sa.Integer, nullable=True),
            )
        if "hospital_response" not in cols:
            op.add_column(
                "ambulance_requests",
                sa.Column("hospital_response", _response_type(bind), nullable=True),
            )
        if "hospital_response_notes" not in cols:
            op.add_column(
                "ambulance_requests", sa.Column("hospital_response_notes", sa.Text, nullable=True)
            )
        if "hospital_response_date" not in cols:
            op.add_column(
                "ambulance_requests",
                sa.Column("hospital_response_date", sa.DateTime(timezone=True), nullable=True),
            )
        if "customer_state" not in cols:
            op.add_column(
                "ambulance_requests", sa.Column("customer_state", sa.String(length=64), nullable=True)
            )
        if "customer_district" not in cols:
            op.add_column(
                "ambulance_requests", sa.Column("customer_district", sa.String(length=64), nullable=True)
            )


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())

    if "ambulance_requests" in tables:
        cols = {col["name"] for col in inspector.get_columns("ambulance_requests")}
        if "forwarded_to_hospital_id" in cols:
            op.drop_index("ix_ambulance_requests_forwarded_to_hospital_id", table_name="ambulance_requests")
        for name in (
            "customer_district",
            "customer_state",
            "hospital_response_date",
            "hospital_response_notes",
            "hospital_response",
            "forwarded_by_admin_id",
            "forwarded_to_hospital_id",
            "is_read",
        ):
            if name in cols:
                op.drop_column("ambulance_requests", name)
    if "customers" in tables:
        cols = {col["name"] for col in inspector.get_columns("customers")}
        for name in ("signup_lng", "signup_lat"):
            if name in cols:
                op.drop_column("customers", name)
    if "hospitals" in tables:
        op.drop_table("hospitals")
