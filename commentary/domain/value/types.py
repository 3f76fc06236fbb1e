"""Domain value objects for comments.

Value objects are immutable and defined by their values, not identity.
Numeric values of the status and flag enums are part of the persisted
schema and must not change.
"""

import re
from enum import Enum, IntEnum, IntFlag

from pydantic import field_validator

from commentary.domain.value.common import RootValueObject, ValueObject
from commentary.domain.value.identifiers import PageId

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class CommentStatus(IntEnum):
    """Moderation status of a comment.

    Anything at or above APPROVED is visible on the site.
    """

    SPAM = -2
    PENDING = 0
    APPROVED = 1
    FEATURED = 2
    DELETE_PENDING = 999


class CommentFlag(IntFlag):
    """Notification preference bits stored on each comment."""

    NONE = 0
    NOTIFY_REPLY = 2  # notify author of replies to this comment
    NOTIFY_ALL = 4  # notify author of every comment on the page
    NOTIFY_CONFIRMED = 8  # author confirmed the double opt-in
    NOTIFY_QUEUED = 16  # subscriber notifications wait for approval


class ModerationMode(IntEnum):
    """Field-level moderation policy for new comments."""

    NONE = 0
    PENDING_ONLY = 1
    ALL = 2


class CommentAction(str, Enum):
    """Actions accepted through the ``comment_success`` link parameter."""

    APPROVE = "approve"
    SPAM = "spam"
    PENDING = "pending"
    CONFIRM = "confirm"
    UNSUB = "unsub"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def target_status(self) -> CommentStatus | None:
        """Status applied by a moderation action, None for other actions."""
        return {
            CommentAction.APPROVE: CommentStatus.APPROVED,
            CommentAction.SPAM: CommentStatus.SPAM,
            CommentAction.PENDING: CommentStatus.PENDING,
        }.get(self)


class CommentScope(ValueObject):
    """The (page, field) pair a comment or collection belongs to."""

    page_id: PageId
    field_name: str

    def __str__(self) -> str:
        return f"{self.page_id}:{self.field_name}"


class ApprovalCode(RootValueObject[str]):
    """Single-use moderator action code embedded in admin emails."""

    @field_validator("root")
    @classmethod
    def validate_code_format(cls, v: str) -> str:
        """Validate code is URL-safe and at most 128 characters."""
        if len(v) < 1 or len(v) > 128:
            raise ValueError("Approval code must be 1-128 characters")
        if not _TOKEN_PATTERN.match(v):
            raise ValueError("Approval code must be URL-safe")
        return v


class SubscriberCode(RootValueObject[str]):
    """Subscriber code shared by all comments from one email address.

    Used for notification opt-in (confirm) and opt-out (unsub) links.
    """

    @field_validator("root")
    @classmethod
    def validate_subcode_format(cls, v: str) -> str:
        """Validate subcode is URL-safe and at most 40 characters."""
        if len(v) < 1 or len(v) > 40:
            raise ValueError("Subscriber code must be 1-40 characters")
        if not _TOKEN_PATTERN.match(v):
            raise ValueError("Subscriber code must be URL-safe")
        return v
