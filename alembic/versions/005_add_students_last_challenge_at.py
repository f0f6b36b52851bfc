"""add students.last_challenge_at

Touched on every login challenge request so challenge creation for one
student is serialized.

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "005"
down_revision = "004"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column(
        "students",
        sa.Column("last_challenge_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade():
    op.drop_column("students", "last_challenge_at")
