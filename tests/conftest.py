"""Test configuration and fixtures."""

from typing import Any

from commentary.domain.model import Comment, CommentCollection
from commentary.domain.service import NotificationOutbox
from commentary.domain.value import (
    ApprovalCode,
    CommentId,
    CommentScope,
    CommentStatus,
    PageId,
    SubscriberCode,
)

TEST_SCOPE = CommentScope(page_id=PageId(1001), field_name="comments")


def make_comment(
    comment_id: int = 0,
    parent_id: int = 0,
    status: CommentStatus = CommentStatus.APPROVED,
    scope: CommentScope = TEST_SCOPE,
    code: str | None = None,
    subcode: str | None = None,
    **kwargs: Any,
) -> Comment:
    """Helper to build a comment as it would be loaded from storage.

    Comments with an id are marked loaded, like rows read back from the
    database.
    """
    values: dict[str, Any] = {
        "text": f"Comment {comment_id}",
        "cite": f"Author {comment_id}",
        "email": f"author{comment_id}@example.com",
    }
    values.update(kwargs)
    return Comment(
        id=CommentId(comment_id),
        scope=scope,
        parent_id=CommentId(parent_id),
        status=status,
        sort=comment_id,
        code=ApprovalCode(code) if code else None,
        subcode=SubscriberCode(subcode) if subcode else None,
        loaded=comment_id != 0,
        **values,
    )


def make_collection(*comments: Comment, scope: CommentScope = TEST_SCOPE) -> CommentCollection:
    """Helper to build a collection from comments."""
    return CommentCollection(scope=scope, comments=list(comments), total=len(comments))


async def deliver(outbox: NotificationOutbox) -> None:
    """Release queued mail the way a commit does, then wait for delivery."""
    outbox.release()
    await outbox.dispatcher.drain()
