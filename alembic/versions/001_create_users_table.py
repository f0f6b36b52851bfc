"""create users table

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("student", "teacher", "admin", name="user_role")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id",            sa.Uuid(),                  primary_key=True),
        sa.Column("email",         sa.String(255),             nullable=True),
        sa.Column("password_hash", sa.String(255),             nullable=True),
        sa.Column("role",          user_role,                  nullable=False),
        sa.Column("active",        sa.Boolean(),               nullable=False, server_default=sa.text("true")),
        sa.Column("first_name",    sa.String(100),             nullable=False),
        sa.Column("last_name",     sa.String(100),             nullable=False),
        sa.Column("created_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role.drop(op.get_bind(), checkfirst=True)
