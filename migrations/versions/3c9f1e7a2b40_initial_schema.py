"""initial_schema

Create the comments schema:
- Pages and users (owned by the host CMS; created here for standalone use)
- Comments (one row per comment, scoped by page and field, threaded by parent_id)
- Comment votes (one vote per voter per comment)

Revision ID: 3c9f1e7a2b40
Revises:
Create Date: 2026-10-18 09:12:44.318207

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c9f1e7a2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # PAGES table
    # ========================================================================
    op.create_table(
        "pages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("http_url", sa.String(2048), nullable=False),
        sa.Column(
            "values",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("path", name="uq_pages_path"),
    )

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("email", sa.String(250), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_users_name"),
    )

    # ========================================================================
    # COMMENTS table
    # ========================================================================
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("pages_id", sa.Integer(), nullable=False),
        sa.Column("field", sa.String(128), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.Column("sort", sa.Integer(), nullable=False, server_default="0"),
        # -2 spam, 0 pending, 1 approved, 2 featured, 999 delete pending
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        # Bitset: 2 reply, 4 all, 8 confirmed, 16 queued
        sa.Column("flags", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("email", sa.String(250), nullable=False, server_default=""),
        sa.Column("cite", sa.String(128), nullable=False, server_default=""),
        sa.Column("website", sa.String(250), nullable=False, server_default=""),
        sa.Column("ip", sa.String(45), nullable=False, server_default=""),
        sa.Column("user_agent", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_users_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(128), nullable=True),
        sa.Column("subcode", sa.String(40), nullable=True),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stars", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column(
            "meta",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.ForeignKeyConstraint(["pages_id"], ["pages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("parent_id <> id", name="ck_comments_not_own_parent"),
        sa.CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_comments_votes"),
    )
    op.create_index(
        "idx_comments_scope_sort", "comments", ["pages_id", "field", "sort"]
    )
    op.create_index("idx_comments_code", "comments", ["code"])
    op.create_index("idx_comments_subcode", "comments", ["pages_id", "subcode"])
    op.create_index("idx_comments_email", "comments", ["email"])
    op.create_index("idx_comments_status_created", "comments", ["status", "created"])

    # ========================================================================
    # COMMENT_VOTES table
    # ========================================================================
    op.create_table(
        "comment_votes",
        sa.Column("comment_id", sa.Integer(), nullable=False),
        sa.Column("voter", sa.String(64), nullable=False),
        sa.Column("up", sa.Boolean(), nullable=False),
        sa.Column(
            "created",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("comment_id", "voter", name="pk_comment_votes"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    # Drop tables (in reverse order of dependencies)
    op.drop_table("comment_votes")
    op.drop_index("idx_comments_status_created", table_name="comments")
    op.drop_index("idx_comments_email", table_name="comments")
    op.drop_index("idx_comments_subcode", table_name="comments")
    op.drop_index("idx_comments_code", table_name="comments")
    op.drop_index("idx_comments_scope_sort", table_name="comments")
    op.drop_table("comments")
    op.drop_table("users")
    op.drop_table("pages")
