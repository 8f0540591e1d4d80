"""Initial auth tables: roles, accounts, account roles, activation records. Seeds USER and ADMIN.

Revision ID: 20250301000000
Revises:
Create Date: 2025-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20250301000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role_data = op.create_table(
        "role_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_role_data"),
        sa.UniqueConstraint("name", name="uq_role_data_name"),
    )
    op.create_table(
        "user_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_user_data"),
    )
    op.create_index(
        "ix_user_data_username_lower",
        "user_data",
        [sa.text("lower(username)")],
        unique=True,
    )
    op.create_index(
        "ix_user_data_email_lower",
        "user_data",
        [sa.text("lower(email)")],
        unique=True,
    )
    op.create_table(
        "user_role",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user_data.id"], ondelete="CASCADE", name="fk_user_role_user_id_user_data"
        ),
        sa.ForeignKeyConstraint(
            ["role_id"], ["role_data.id"], ondelete="CASCADE", name="fk_user_role_role_id_role_data"
        ),
        sa.PrimaryKeyConstraint("user_id", "role_id", name="pk_user_role"),
    )
    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("activated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("uuid", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user_data.id"], ondelete="CASCADE", name="fk_activity_user_id_user_data"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_activity"),
        sa.UniqueConstraint("user_id", name="uq_activity_user_id"),
    )
    op.create_index(op.f("ix_activity_uuid"), "activity", ["uuid"], unique=True)

    op.bulk_insert(role_data, [{"name": "USER"}, {"name": "ADMIN"}])


def downgrade() -> None:
    op.drop_index(op.f("ix_activity_uuid"), table_name="activity")
    op.drop_table("activity")
    op.drop_table("user_role")
    op.drop_index("ix_user_data_email_lower", table_name="user_data")
    op.drop_index("ix_user_data_username_lower", table_name="user_data")
    op.drop_table("user_data")
    op.drop_table("role_data")
