"""create visual_password_challenges table

Server-side attempt counter for student picture-password logins.

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "004"
down_revision = "003"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "visual_password_challenges",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("student_id", sa.Uuid(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("wrong_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_visual_password_challenges_student_id",
        "visual_password_challenges",
        ["student_id"],
    )


def downgrade():
    op.drop_index("ix_visual_password_challenges_student_id", table_name="visual_password_challenges")
    op.drop_table("visual_password_challenges")
