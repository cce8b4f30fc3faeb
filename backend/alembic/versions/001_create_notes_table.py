"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `notes` table with its filter/order indexes and the
       search index over (title, content): trigram GIN on PostgreSQL (after
       enabling pg_trgm), a plain composite index elsewhere.

Rollback: downgrade() drops the table entirely (destructive, all notes lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        # JSON array text; NULL when the note has no tags
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("important", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("title <> '' AND content <> ''", name="ck_notes_text_not_empty"),
    )

    op.create_index("idx_notes_deleted", "notes", ["deleted"])
    op.create_index("idx_notes_important", "notes", ["important"])
    op.create_index("idx_notes_updated_at", "notes", [sa.text("updated_at DESC")])

    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
    op.create_index(
        "idx_notes_search",
        "notes",
        ["title", "content"],
        postgresql_using="gin",
        postgresql_ops={"title": "gin_trgm_ops", "content": "gin_trgm_ops"},
    )


def downgrade() -> None:
    op.drop_index("idx_notes_search", table_name="notes")
    op.drop_index("idx_notes_updated_at", table_name="notes")
    op.drop_index("idx_notes_important", table_name="notes")
    op.drop_index("idx_notes_deleted", table_name="notes")
    op.drop_table("notes")
