"""Domain value objects for comments."""

from commentary.domain.value.identifiers import (
    GUEST_USER_ID,
    NEW_COMMENT_ID,
    ROOT_PARENT_ID,
    CommentId,
    PageId,
    UserId,
)
from commentary.domain.value.types import (
    ApprovalCode,
    CommentAction,
    CommentFlag,
    CommentScope,
    CommentStatus,
    ModerationMode,
    SubscriberCode,
)

__all__ = [
    # Identifiers
    "PageId",
    "CommentId",
    "UserId",
    "NEW_COMMENT_ID",
    "ROOT_PARENT_ID",
    "GUEST_USER_ID",
    # Types
    "ApprovalCode",
    "CommentAction",
    "CommentFlag",
    "CommentScope",
    "CommentStatus",
    "ModerationMode",
    "SubscriberCode",
]
