"""create session_cache table

Revision ID: 0001_create_session_cache
Revises:
Create Date: 2026-10-19 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001_create_session_cache"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "session_cache",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("email_hash", sa.String(length=64), nullable=False),
        sa.Column("session_token", sa.Text(), nullable=False),
        sa.Column("session_token_hash", sa.String(length=64), nullable=False),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("phone_hash", sa.String(length=64), nullable=True),
        sa.Column("reg_number", sa.Text(), nullable=True),
        sa.Column("reg_number_hash", sa.String(length=64), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("school", sa.String(length=255), nullable=True),
        sa.Column("faculty", sa.String(length=255), nullable=True),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("level", sa.String(length=32), nullable=True),
        sa.Column("upid", sa.String(length=64), nullable=True),
        sa.Column("profile_photo", sa.Text(), nullable=True),
        sa.Column("gender", sa.String(length=16), nullable=True),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_signed_in", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sign_in_time", sa.DateTime(), nullable=False),
        sa.Column("last_activity", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("device_info", sa.String(length=512), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("uuid"),
        sa.UniqueConstraint("session_token_hash"),
    )
    op.create_index(
        "ix_session_cache_phone_hash", "session_cache", ["phone_hash"]
    )
    op.create_index(
        "ix_session_cache_reg_number_hash", "session_cache", ["reg_number_hash"]
    )
    op.create_index(
        "ix_session_cache_user_signed_in",
        "session_cache",
        ["user_id", "is_signed_in"],
    )
    op.create_index(
        "ix_session_cache_email_signed_in",
        "session_cache",
        ["email_hash", "is_signed_in"],
    )
    op.create_index(
        "ix_session_cache_expires_active",
        "session_cache",
        ["expires_at", "is_active"],
    )


def downgrade() -> None:
    op.drop_index("ix_session_cache_expires_active", table_name="session_cache")
    op.drop_index("ix_session_cache_email_signed_in", table_name="session_cache")
    op.drop_index("ix_session_cache_user_signed_in", table_name="session_cache")
    op.drop_index("ix_session_cache_reg_number_hash", table_name="session_cache")
    op.drop_index("ix_session_cache_phone_hash", table_name="session_cache")
    op.drop_table("session_cache")
