"""Create collections table."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create collections table; items, texts and tts_settings hold JSON text."""
    op.create_table(
        "collections",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("museum_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(length=50), nullable=False, server_default="gallery"),
        sa.Column("items", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("source_language", sa.String(length=10), nullable=True),
        sa.Column("texts", sa.Text(), nullable=True),
        sa.Column("tts_settings", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_collections_museum_id"), "collections", ["museum_id"], unique=False)
    op.create_index(op.f("ix_collections_type"), "collections", ["type"], unique=False)


def downgrade() -> None:
    """Drop collections table."""
    op.drop_index(op.f("ix_collections_type"), table_name="collections")
    op.drop_index(op.f("ix_collections_museum_id"), table_name="collections")
    op.drop_table("collections")
