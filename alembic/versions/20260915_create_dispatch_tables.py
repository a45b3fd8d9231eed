"""Create users, customer/hospital profiles, ambulance requests and notifications.

Revision ID: 20260915_create_dispatch
Revises: None
Create Date: 2026-09-15
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.sql import func


revision = "20260915_create_dispatch"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    tables = set(inspect(bind).get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("full_name", sa.String(length=128), nullable=False),
            sa.Column("phone", sa.String(length=32), nullable=True),
            sa.Column(
                "role",
                sa.Enum("customer", "staff", "admin", "hospital", name="userrole"),
                nullable=False,
            ),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
        )

    if "customers" not in tables:
        op.create_table(
            "customers",
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), primary_key=True),
            sa.Column("address", sa.Text, nullable=True),
            sa.Column("state", sa.String(length=64), nullable=True),
            sa.Column("district", sa.String(length=64), nullable=True),
            *_timestamps(),
        )

    if "ambulance_requests" not in tables:
        op.create_table(
            "ambulance_requests",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("customer_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
            sa.Column("pickup_address", sa.Text, nullable=False),
            sa.Column("destination_address", sa.Text, nullable=False),
            sa.Column("emergency_type", sa.String(length=64), nullable=False),
            sa.Column("customer_condition", sa.Text, nullable=True),
            sa.Column("contact_number", sa.String(length=32), nullable=False),
            sa.Column(
                "status",
                sa.Enum(
                    "pending",
                    "assigned",
                    "on_the_way",
                    "completed",
                    "cancelled",
                    "forwarded_to_hospital",
                    "hospital_accepted",
                    "hospital_rejected",
                    name="ambulancestatus",
                ),
                nullable=False,
                server_default="pending",
            ),
            sa.Column(
                "priority",
                sa.Enum("critical", "high", "normal", "low", name="ambulancepriority"),
                nullable=False,
                server_default="normal",
            ),
            sa.Column("assigned_staff_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
            sa.Column("notes", sa.Text, nullable=True),
            *_timestamps(),
        )
        op.create_index(
            "ix_ambulance_requests_customer_user_id", "ambulance_requests", ["customer_user_id"]
        )

    if "notifications" not in tables:
        op.create_table(
            "notifications",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
            sa.Column("type", sa.String(length=32), nullable=False),
            sa.Column("title", sa.String(length=128), nullable=False),
            sa.Column("message", sa.Text, nullable=True),
            sa.Column("related_id", sa.Integer, nullable=True),
            sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
        )
        op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    if "audit_events" not in tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("actor", sa.String(length=64), nullable=False),
            sa.Column(
                "action",
                sa.Enum(
                    "CREATE",
                    "ASSIGN",
                    "UPDATE",
                    "STATUS_CHANGE",
                    "FORWARD",
                    "MARK_READ",
                    "HOSPITAL_RESPONSE",
                    "LOGIN",
                    name="auditaction",
                ),
                nullable=False,
            ),
            sa.Column("entity_type", sa.String(length=64), nullable=False),
            sa.Column("entity_id", sa.String(length=64), nullable=False),
            sa.Column("request_id", sa.String(length=64), nullable=False),
            sa.Column("ip_address", sa.String(length=64), nullable=False),
            sa.Column("details", sa.JSON, nullable=True),
            sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        )


def downgrade() -> None:
    bind = op.get_bind()
    tables = set(inspect(bind).get_table_names())
    for table in ("audit_events", "notifications", "ambulance_requests", "customers", "users"):
        if table in tables:
            op.drop_table(table)
