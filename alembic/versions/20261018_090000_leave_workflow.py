"""leave workflow

Revision ID: 20261018_090000
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_090000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role_enum = sa.Enum("USER", "MESS_OWNER", "ADMIN", name="user_role")
leave_type_enum = sa.Enum(
    "holiday", "maintenance", "personal", "emergency", "seasonal", "other", name="mess_leave_type"
)
leave_status_enum = sa.Enum("scheduled", "active", "completed", "cancelled", name="mess_leave_status")
adjustment_status_enum = sa.Enum("pending", "applied", "reversed", name="billing_adjustment_status")
admin_action_enum = sa.Enum("notify", "investigate", "restrict", name="admin_action_type")


def upgrade() -> None:
    op.create_table(
        "messes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("owner_user_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("mess_id", sa.Integer(), sa.ForeignKey("messes.id"), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("role", user_role_enum, nullable=False, server_default="USER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("notify_email", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("notify_push", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("notify_sms", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_mess_id", "users", ["mess_id"])

    op.create_foreign_key(
        "messes_owner_user_id_fkey",
        "messes",
        "users",
        ["owner_user_id"],
        ["id"],
    )

    op.create_table(
        "mess_leaves",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("mess_id", sa.Integer(), sa.ForeignKey("messes.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("leave_type", leave_type_enum, nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("meal_types", sa.JSON(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurring_pattern", sa.JSON(), nullable=True),
        sa.Column("status", leave_status_enum, nullable=False, server_default="scheduled"),
        sa.Column("notifications_sent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reminder_requested", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reminder_sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("affected_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_savings", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("end_date >= start_date", name="ck_mess_leave_date_order"),
    )
    op.create_index("ix_mess_leaves_mess_start", "mess_leaves", ["mess_id", "start_date"])
    op.create_index("ix_mess_leaves_mess_status", "mess_leaves", ["mess_id", "status"])
    op.create_index("ix_mess_leaves_created_by", "mess_leaves", ["created_by"])

    op.create_table(
        "billing_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "leave_id",
            sa.Integer(),
            sa.ForeignKey("mess_leaves.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("original_amount", sa.Float(), nullable=False),
        sa.Column("adjusted_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("credit_amount", sa.Float(), nullable=False),
        sa.Column("adjustment_date", sa.DateTime(), nullable=False),
        sa.Column("adjustment_reason", sa.String(length=255), nullable=True),
        sa.Column("status", adjustment_status_enum, nullable=False, server_default="pending"),
        sa.Column("applied_at", sa.DateTime(), nullable=True),
        sa.Column("reversed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_billing_adjustments_user_id", "billing_adjustments", ["user_id"])
    op.create_index("ix_billing_adjustments_leave_id", "billing_adjustments", ["leave_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("channels", sa.JSON(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "admin_actions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("mess_id", sa.Integer(), sa.ForeignKey("messes.id"), nullable=False),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("target_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("action", admin_action_enum, nullable=False),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_admin_actions_target_user_id", "admin_actions", ["target_user_id"])


def downgrade() -> None:
    op.drop_index("ix_admin_actions_target_user_id", table_name="admin_actions")
    op.drop_table("admin_actions")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_billing_adjustments_leave_id", table_name="billing_adjustments")
    op.drop_index("ix_billing_adjustments_user_id", table_name="billing_adjustments")
    op.drop_table("billing_adjustments")
    op.drop_index("ix_mess_leaves_created_by", table_name="mess_leaves")
    op.drop_index("ix_mess_leaves_mess_status", table_name="mess_leaves")
    op.drop_index("ix_mess_leaves_mess_start", table_name="mess_leaves")
    op.drop_table("mess_leaves")
    op.drop_constraint("messes_owner_user_id_fkey", "messes", type_="foreignkey")
    op.drop_index("ix_users_mess_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_table("messes")

    admin_action_enum.drop(op.get_bind(), checkfirst=True)
    adjustment_status_enum.drop(op.get_bind(), checkfirst=True)
    leave_status_enum.drop(op.get_bind(), checkfirst=True)
    leave_type_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
