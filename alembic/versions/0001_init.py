"""init

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
        "llm_conversations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.String(length=255), nullable=False),
        sa.Column("system_prompt", sa.Text(), nullable=True),
        sa.Column("messages", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_llm_conversations_conversation_id",
        "llm_conversations",
        ["conversation_id"],
        unique=True,
    )
    op.create_index("ix_llm_conversations_updated_at", "llm_conversations", ["updated_at"])


def downgrade():
    op.drop_index("ix_llm_conversations_updated_at", table_name="llm_conversations")
    op.drop_index("ix_llm_conversations_conversation_id", table_name="llm_conversations")
    op.drop_table("llm_conversations")
