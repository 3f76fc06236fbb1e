"""Domain model entities for comments."""

from commentary.domain.model.action import ActionRequest, ActionResult
from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.model.notification import Notification
from commentary.domain.model.page import Page, User
from commentary.domain.model.vote import CommentVote

__all__ = [
    "ActionRequest",
    "ActionResult",
    "Comment",
    "CommentCollection",
    "CommentField",
    "CommentVote",
    "Notification",
    "Page",
    "User",
]
