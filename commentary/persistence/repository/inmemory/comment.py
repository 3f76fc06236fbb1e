"""In-memory comment repository for testing."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.repository.comment import CommentRepository
from commentary.domain.value import (
    CommentFlag,
    CommentId,
    CommentScope,
    CommentStatus,
    PageId,
    SubscriberCode,
)


class InMemoryCommentRepository(CommentRepository):
    """In-memory implementation of CommentRepository for testing."""

    def __init__(self) -> None:
        self._comments: dict[CommentId, Comment] = {}
        self._next_id = 1
        self._locks: dict[CommentScope, asyncio.Lock] = {}

    def _in_scope(self, scope: CommentScope) -> list[Comment]:
        comments = [c for c in self._comments.values() if c.scope == scope]
        comments.sort(key=lambda c: (c.sort, c.id))
        return comments

    async def load(
        self,
        scope: CommentScope,
        approved_only: bool = False,
        limit: int = 0,
        offset: int = 0,
    ) -> CommentCollection:
        """Load the comments of one page field in sort order."""
        comments = self._in_scope(scope)
        if approved_only:
            comments = [c for c in comments if c.is_approved()]
        total = len(comments)
        if offset:
            comments = comments[offset:]
        if limit:
            comments = comments[:limit]
        return CommentCollection(
            scope=scope, comments=comments, total=total, limit=limit, offset=offset
        )

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        return self._comments.get(comment_id)

    async def find_by_code(self, scope: CommentScope, code: str) -> Optional[Comment]:
        for comment in self._in_scope(scope):
            if comment.code is not None and comment.code.root == code:
                return comment
        return None

    async def save(self, comment: Comment) -> Comment:
        """Save a comment (create or update)."""
        if comment.is_new():
            existing = self._in_scope(comment.scope)
            sort = max((c.sort for c in existing), default=0) + 1
            comment = comment.model_copy(
                update={"id": CommentId(self._next_id), "sort": sort}
            )
            self._next_id += 1
        saved = comment.model_copy(update={"loaded": True})
        # Stored copies lose prev_status like a database row would
        self._comments[saved.id] = saved.model_copy(update={"prev_status": None})
        return saved

    async def delete(self, comment_id: CommentId) -> bool:
        return self._comments.pop(comment_id, None) is not None

    async def consume_code(
        self,
        comment_id: CommentId,
        code: str,
        status: CommentStatus,
        expected_status: CommentStatus,
    ) -> Optional[Comment]:
        """Apply status and clear the code if ``code`` is still live."""
        comment = self._comments.get(comment_id)
        if comment is None or comment.code is None or comment.code.root != code:
            return None
        if comment.status != expected_status:
            return None
        updated = comment.model_copy(update={"status": status, "code": None})
        self._comments[comment_id] = updated
        return updated

    async def set_flags(self, comment_id: CommentId, flags: CommentFlag) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        self._comments[comment_id] = comment.with_flags(flags)
        return True

    async def find_email_by_subcode(
        self, page_id: Optional[PageId], subcode: str
    ) -> Optional[str]:
        for comment in self._comments.values():
            if page_id is not None and comment.scope.page_id != page_id:
                continue
            if comment.email and comment.subcode and comment.subcode.root == subcode:
                return comment.email
        return None

    async def find_subcode_for_email(
        self, email: str, page_id: Optional[PageId]
    ) -> Optional[SubscriberCode]:
        for comment in await self.find_by_email(email, page_id):
            if comment.subcode is not None:
                return comment.subcode
        return None

    async def find_by_email(
        self, email: str, page_id: Optional[PageId]
    ) -> list[Comment]:
        comments = [
            c
            for c in self._comments.values()
            if c.email == email and (page_id is None or c.scope.page_id == page_id)
        ]
        comments.sort(key=lambda c: c.id)
        return comments

    async def increment_votes(
        self, comment_id: CommentId, up: bool
    ) -> Optional[Comment]:
        comment = self._comments.get(comment_id)
        if comment is None:
            return None
        if up:
            updated = comment.model_copy(update={"upvotes": comment.upvotes + 1})
        else:
            updated = comment.model_copy(update={"downvotes": comment.downvotes + 1})
        self._comments[comment_id] = updated
        return updated

    async def find_spam_older_than(
        self, scope: CommentScope, cutoff: datetime
    ) -> list[Comment]:
        return [
            c
            for c in self._in_scope(scope)
            if c.status == CommentStatus.SPAM and c.created_at < cutoff
        ]

    @asynccontextmanager
    async def locked(self, scope: CommentScope) -> AsyncIterator[None]:
        lock = self._locks.setdefault(scope, asyncio.Lock())
        async with lock:
            yield
