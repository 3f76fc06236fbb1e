"""SQLAlchemy table definitions.

Comments are stored one row per comment, scoped by (pages_id, field).
Pages and users belong to the host CMS; only the columns read here are
declared. They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    SmallInteger,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# PAGES TABLE (host CMS, read-only here)
# ============================================================================
pages_table = Table(
    "pages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("path", String(1024), nullable=False, unique=True),
    Column("title", String(255), nullable=False, server_default=""),
    Column("http_url", String(2048), nullable=False),
    Column("values", JSONB, nullable=False, server_default="{}"),
)

# ============================================================================
# USERS TABLE (host CMS, read-only here)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(128), nullable=False, unique=True),
    Column("email", String(250), nullable=False, server_default=""),
)

# ============================================================================
# COMMENTS TABLE
# ============================================================================
comments_table = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "pages_id",
        Integer,
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("field", String(128), nullable=False),
    Column("parent_id", Integer, nullable=False, server_default="0"),
    Column("text", Text, nullable=False, server_default=""),
    Column("sort", Integer, nullable=False, server_default="0"),
    # -2 spam, 0 pending, 1 approved, 2 featured, 999 delete pending
    Column("status", SmallInteger, nullable=False, server_default="0"),
    Column("flags", Integer, nullable=False, server_default="0"),
    Column(
        "created", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("email", String(250), nullable=False, server_default=""),
    Column("cite", String(128), nullable=False, server_default=""),
    Column("website", String(250), nullable=False, server_default=""),
    Column("ip", String(45), nullable=False, server_default=""),
    Column("user_agent", String(255), nullable=False, server_default=""),
    Column("created_users_id", Integer, nullable=False),
    Column("code", String(128), nullable=True),
    Column("subcode", String(40), nullable=True),
    Column("upvotes", Integer, nullable=False, server_default="0"),
    Column("downvotes", Integer, nullable=False, server_default="0"),
    Column("stars", SmallInteger, nullable=False, server_default="0"),
    Column("meta", JSONB, nullable=False, server_default="{}"),
)

Index(
    "idx_comments_scope_sort",
    comments_table.c.pages_id,
    comments_table.c.field,
    comments_table.c.sort,
)
Index("idx_comments_code", comments_table.c.code)
Index("idx_comments_subcode", comments_table.c.pages_id, comments_table.c.subcode)
Index("idx_comments_email", comments_table.c.email)
Index("idx_comments_status_created", comments_table.c.status, comments_table.c.created)

# ============================================================================
# COMMENT VOTES TABLE
# ============================================================================
comment_votes_table = Table(
    "comment_votes",
    metadata,
    Column(
        "comment_id",
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("voter", String(64), nullable=False),  # "user:<id>" or IP address
    Column("up", Boolean, nullable=False),
    Column(
        "created", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    PrimaryKeyConstraint("comment_id", "voter", name="pk_comment_votes"),
)
