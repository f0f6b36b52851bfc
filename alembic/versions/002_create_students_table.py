"""create students table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

visual_password_type = sa.Enum("animal", "object", "color_shape", name="visual_password_type")


def upgrade():
    op.create_table(
        "students",
        sa.Column("id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("grade_level", sa.Integer(), nullable=True),
        sa.Column("visual_password_type", visual_password_type, nullable=True),
        sa.Column("visual_password_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("students")
    visual_password_type.drop(op.get_bind(), checkfirst=True)
