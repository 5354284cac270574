"""create verification_requests table

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "verification_requests",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("channel", sa.String(length=16), nullable=False),
        sa.Column("sender", sa.String(length=320), nullable=False, server_default=""),
        sa.Column("recipient", sa.String(length=320), nullable=False),
        sa.Column("secret", sa.String(length=512), nullable=False),
        sa.Column("secret_expiry", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dispatch_log", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_verification_requests_id", "verification_requests", ["id"], unique=True)
    op.create_index("ix_verification_requests_channel", "verification_requests", ["channel"])
    op.create_index("ix_verification_requests_recipient", "verification_requests", ["recipient"])
    op.create_index("ix_verification_requests_status", "verification_requests", ["status"])
    op.create_index("ix_verification_requests_created_at", "verification_requests", ["created_at"])
    op.create_index("ix_verification_requests_updated_at", "verification_requests", ["updated_at"])


def downgrade():
    op.drop_index("ix_verification_requests_updated_at", table_name="verification_requests")
    op.drop_index("ix_verification_requests_created_at", table_name="verification_requests")
    op.drop_index("ix_verification_requests_status", table_name="verification_requests")
    op.drop_index("ix_verification_requests_recipient", table_name="verification_requests")
    op.drop_index("ix_verification_requests_channel", table_name="verification_requests")
    op.drop_index("ix_verification_requests_id", table_name="verification_requests")
    op.drop_table("verification_requests")
