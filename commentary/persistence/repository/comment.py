"""PostgreSQL implementation of Comment repository."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional

import logfire
from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from commentary.domain.error import PersistenceError
from commentary.domain.model import Comment, CommentCollection
from commentary.domain.repository import CommentRepository
from commentary.domain.value import (
    CommentFlag,
    CommentId,
    CommentScope,
    CommentStatus,
    PageId,
    SubscriberCode,
)
from commentary.persistence.mappers import comment_to_dict, row_to_comment
from commentary.persistence.tables import comments_table

_c = comments_table.c


def _in_scope(scope: CommentScope):
    return and_(_c.pages_id == scope.page_id, _c.field == scope.field_name)


class PostgresCommentRepository(CommentRepository):
    """PostgreSQL implementation of CommentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def load(
        self,
        scope: CommentScope,
        approved_only: bool = False,
        limit: int = 0,
        offset: int = 0,
    ) -> CommentCollection:
        """Load the comments of one page field in sort order."""
        condition = _in_scope(scope)
        if approved_only:
            condition = and_(
                condition,
                _c.status >= CommentStatus.APPROVED,
                _c.status < CommentStatus.DELETE_PENDING,
            )

        stmt = select(comments_table).where(condition).order_by(_c.sort, _c.id)
        if limit:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        result = await self.session.execute(stmt)
        comments = [row_to_comment(row._asdict()) for row in result.fetchall()]

        if limit or offset:
            count = select(func.count()).select_from(comments_table).where(condition)
            total = (await self.session.execute(count)).scalar() or 0
        else:
            total = len(comments)

        return CommentCollection(
            scope=scope, comments=comments, total=total, limit=limit, offset=offset
        )

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        stmt = select(comments_table).where(_c.id == comment_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_comment(row._asdict()) if row else None

    async def find_by_code(self, scope: CommentScope, code: str) -> Optional[Comment]:
        """Find the comment in a scope holding a live approval code."""
        stmt = select(comments_table).where(_in_scope(scope), _c.code == code)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_comment(row._asdict()) if row else None

    async def save(self, comment: Comment) -> Comment:
        """Save a comment (create or update)."""
        values = comment_to_dict(comment)
        try:
            if comment.is_new():
                next_sort = select(func.coalesce(func.max(_c.sort), 0) + 1).where(
                    _in_scope(comment.scope)
                )
                values["sort"] = (await self.session.execute(next_sort)).scalar_one()
                stmt = comments_table.insert().values(**values).returning(_c.id)
                new_id = (await self.session.execute(stmt)).scalar_one()
                saved = comment.model_copy(
                    update={
                        "id": CommentId(new_id),
                        "sort": values["sort"],
                        "loaded": True,
                    }
                )
            else:
                stmt = update(comments_table).where(_c.id == comment.id).values(**values)
                await self.session.execute(stmt)
                saved = comment.model_copy(update={"loaded": True})
            await self.session.flush()
        except SQLAlchemyError as e:
            logfire.error("Comment save failed", comment_id=comment.id, error=str(e))
            raise PersistenceError(f"Failed to save comment {comment.id}") from e
        return saved

    async def delete(self, comment_id: CommentId) -> bool:
        """Delete a comment (hard delete)."""
        stmt = delete(comments_table).where(_c.id == comment_id).returning(_c.id)
        result = await self.session.execute(stmt)
        deleted = result.fetchone() is not None
        await self.session.flush()
        return deleted

    async def consume_code(
        self,
        comment_id: CommentId,
        code: str,
        status: CommentStatus,
        expected_status: CommentStatus,
    ) -> Optional[Comment]:
        """Compare-and-swap: apply status and clear the code in one UPDATE."""
        stmt = (
            update(comments_table)
            .where(
                _c.id == comment_id,
                _c.code == code,
                _c.status == int(expected_status),
            )
            .values(status=int(status), code=None)
            .returning(comments_table)
        )
        try:
            result = await self.session.execute(stmt)
            row = result.fetchone()
            await self.session.flush()
        except SQLAlchemyError as e:
            logfire.error("Approval code update failed", comment_id=comment_id, error=str(e))
            raise PersistenceError(f"Failed to update comment {comment_id}") from e
        return row_to_comment(row._asdict()) if row else None

    async def set_flags(self, comment_id: CommentId, flags: CommentFlag) -> bool:
        """Update only the flags column."""
        stmt = (
            update(comments_table)
            .where(_c.id == comment_id)
            .values(flags=int(flags))
            .returning(_c.id)
        )
        result = await self.session.execute(stmt)
        updated = result.fetchone() is not None
        await self.session.flush()
        return updated

    async def find_email_by_subcode(
        self, page_id: Optional[PageId], subcode: str
    ) -> Optional[str]:
        """Resolve the email address bound to a subscriber code."""
        stmt = select(_c.email).where(_c.subcode == subcode, _c.email != "")
        if page_id is not None:
            stmt = stmt.where(_c.pages_id == page_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar()

    async def find_subcode_for_email(
        self, email: str, page_id: Optional[PageId]
    ) -> Optional[SubscriberCode]:
        """Find the subscriber code already used by an email address."""
        stmt = select(_c.subcode).where(_c.email == email, _c.subcode.is_not(None))
        if page_id is not None:
            stmt = stmt.where(_c.pages_id == page_id)
        result = await self.session.execute(stmt.order_by(_c.id).limit(1))
        subcode = result.scalar()
        return SubscriberCode(subcode) if subcode else None

    async def find_by_email(
        self, email: str, page_id: Optional[PageId]
    ) -> List[Comment]:
        """Find all comments written from an email address."""
        stmt = select(comments_table).where(_c.email == email)
        if page_id is not None:
            stmt = stmt.where(_c.pages_id == page_id)
        result = await self.session.execute(stmt.order_by(_c.id))
        return [row_to_comment(row._asdict()) for row in result.fetchall()]

    async def increment_votes(
        self, comment_id: CommentId, up: bool
    ) -> Optional[Comment]:
        """Atomically add one vote using a SQL-level increment."""
        if up:
            values = {"upvotes": _c.upvotes + 1}
        else:
            values = {"downvotes": _c.downvotes + 1}
        stmt = (
            update(comments_table)
            .where(_c.id == comment_id)
            .values(**values)
            .returning(comments_table)
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        await self.session.flush()
        return row_to_comment(row._asdict()) if row else None

    async def find_spam_older_than(
        self, scope: CommentScope, cutoff: datetime
    ) -> List[Comment]:
        """Find spam comments created before ``cutoff``."""
        stmt = select(comments_table).where(
            _in_scope(scope),
            _c.status == CommentStatus.SPAM,
            _c.created < cutoff,
        )
        result = await self.session.execute(stmt.order_by(_c.id))
        return [row_to_comment(row._asdict()) for row in result.fetchall()]

    @asynccontextmanager
    async def locked(self, scope: CommentScope) -> AsyncIterator[None]:
        """Transaction-scoped advisory lock on the scope.

        Released when the request session commits or rolls back.
        """
        await self.session.execute(
            select(func.pg_advisory_xact_lock(func.hashtext(str(scope))))
        )
        yield
