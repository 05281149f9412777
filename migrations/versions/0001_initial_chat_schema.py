"""initial chat schema

Revision ID: 0001_initial_chat_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial_chat_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the chat tables."""
    op.create_table(
        "fictionchat_user",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("real_user_id", sa.String(length=255), nullable=False),
        sa.Column("fullname", sa.String(length=255), nullable=False),
        sa.Column("profile_picture", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("real_user_id"),
    )
    op.create_table(
        "fictionchat_conversation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pair_key", sa.String(length=511), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("pair_key"),
    )
    op.create_table(
        "fictionchat_conversation_participant",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["conversation_id"], ["fictionchat_conversation.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["fictionchat_user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("conversation_id", "user_id", name="uq_participant_conversation_user"),
    )
    op.create_index(
        "ix_participant_user_id",
        "fictionchat_conversation_participant",
        ["user_id"],
    )
    op.create_table(
        "fictionchat_message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sender_id", sa.String(length=255), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["conversation_id"], ["fictionchat_conversation.id"]),
        sa.ForeignKeyConstraint(["sender_id"], ["fictionchat_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_message_conversation_created",
        "fictionchat_message",
        ["conversation_id", "created_at"],
    )
    op.create_table(
        "fictionchat_chat_activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("last_read", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["conversation_id"], ["fictionchat_conversation.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["fictionchat_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chat_activity_user_conversation",
        "fictionchat_chat_activity",
        ["user_id", "conversation_id"],
    )


def downgrade() -> None:
    """Drop the chat tables."""
    op.drop_index("ix_chat_activity_user_conversation", table_name="fictionchat_chat_activity")
    op.drop_table("fictionchat_chat_activity")
    op.drop_index("ix_message_conversation_created", table_name="fictionchat_message")
    op.drop_table("fictionchat_message")
    op.drop_index("ix_participant_user_id", table_name="fictionchat_conversation_participant")
    op.drop_table("fictionchat_conversation_participant")
    op.drop_table("fictionchat_conversation")
    op.drop_table("fictionchat_user")
