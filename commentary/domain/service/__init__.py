"""Domain services."""

from .action_service import INVALID_CODE_MESSAGE, ActionService
from .base import Service
from .code_service import CodeService
from .comment_service import CommentService
from .mail_transport import MailTransport
from .moderation_service import TRANSITIONS, ModerationService
from .notification_dispatcher import NotificationDispatcher, NotificationOutbox
from .notification_service import (
    NotificationService,
    RecipientRef,
    parse_recipient_token,
)
from .spam_filter import NoopSpamFilter, SpamFilter
from .thread_service import ThreadService
from .vote_service import VoteService

__all__ = [
    "ActionService",
    "CodeService",
    "CommentService",
    "INVALID_CODE_MESSAGE",
    "MailTransport",
    "ModerationService",
    "NoopSpamFilter",
    "NotificationDispatcher",
    "NotificationOutbox",
    "NotificationService",
    "RecipientRef",
    "Service",
    "SpamFilter",
    "TRANSITIONS",
    "ThreadService",
    "VoteService",
    "parse_recipient_token",
]
