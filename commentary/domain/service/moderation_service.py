"""Moderation domain service.

Owns the comment status state machine and the spam classifier feedback
loop.
"""

import logfire

from commentary.domain.error import InvalidStatusTransitionError
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.value import CommentStatus, ModerationMode

from .base import Service
from .spam_filter import SpamFilter

# DELETE_PENDING only leads to physical removal, which is not a status
TRANSITIONS: dict[CommentStatus, frozenset[CommentStatus]] = {
    CommentStatus.PENDING: frozenset(
        {
            CommentStatus.APPROVED,
            CommentStatus.FEATURED,
            CommentStatus.SPAM,
            CommentStatus.DELETE_PENDING,
        }
    ),
    CommentStatus.APPROVED: frozenset(
        {
            CommentStatus.SPAM,
            CommentStatus.FEATURED,
            CommentStatus.PENDING,
            CommentStatus.DELETE_PENDING,
        }
    ),
    CommentStatus.FEATURED: frozenset(
        {CommentStatus.APPROVED, CommentStatus.DELETE_PENDING}
    ),
    CommentStatus.SPAM: frozenset(
        {
            CommentStatus.APPROVED,
            CommentStatus.PENDING,
            CommentStatus.DELETE_PENDING,
        }
    ),
    CommentStatus.DELETE_PENDING: frozenset(),
}


class ModerationService(Service):
    """Domain service for comment status changes."""

    def __init__(self, spam_filter: SpamFilter) -> None:
        """Initialize moderation service.

        Args:
            spam_filter: Spam classifier consulted on submission and
                notified of moderator corrections
        """
        self.spam_filter = spam_filter

    @staticmethod
    def can_transition(current: CommentStatus, requested: CommentStatus) -> bool:
        """Check whether a status change is allowed (same status always is)."""
        return current == requested or requested in TRANSITIONS[current]

    def transition(self, comment: Comment, status: CommentStatus) -> Comment:
        """Return a copy of ``comment`` with a new status.

        Args:
            comment: The comment to change
            status: The requested status

        Returns:
            The updated comment (``comment`` itself if the status is unchanged)

        Raises:
            InvalidStatusTransitionError: If the state machine forbids the change
        """
        if comment.status == status:
            return comment
        if not self.can_transition(comment.status, status):
            logfire.warn(
                "Rejected status transition",
                comment_id=comment.id,
                current=comment.status.name,
                requested=status.name,
            )
            raise InvalidStatusTransitionError(
                comment.id, comment.status.name, status.name
            )
        return comment.with_status(status)

    async def initial_status(
        self, comment: Comment, field: CommentField
    ) -> CommentStatus:
        """Decide the status of a newly submitted comment.

        Spam if the classifier says so, otherwise pending when the field
        moderates new comments, otherwise approved. A classifier failure
        counts as "not spam".
        """
        with logfire.span(
            "moderation_service.initial_status",
            field=field.name,
            moderation=field.moderation.name,
        ):
            try:
                is_spam = await self.spam_filter.check_spam(comment)
            except Exception as e:
                logfire.error(
                    "Spam check failed, treating comment as not spam",
                    error=str(e),
                    field=field.name,
                )
                is_spam = False

            if is_spam:
                status = CommentStatus.SPAM
            elif field.moderation in (ModerationMode.PENDING_ONLY, ModerationMode.ALL):
                status = CommentStatus.PENDING
            else:
                status = CommentStatus.APPROVED

            logfire.info("Initial status assigned", status=status.name, spam=is_spam)
            return status

    async def apply_feedback(self, comment: Comment) -> None:
        """Report a moderator correction of an earlier classification.

        Called after a transition has been persisted. Nothing is reported
        unless ``prev_status`` shows a move between spam and visible.
        """
        previous = comment.prev_status
        if previous is None:
            return

        with logfire.span(
            "moderation_service.apply_feedback",
            comment_id=comment.id,
            previous=previous.name,
            current=comment.status.name,
        ):
            try:
                if previous == CommentStatus.SPAM and comment.is_approved():
                    await self.spam_filter.report_false_positive(comment)
                    logfire.info("Reported false positive", comment_id=comment.id)
                elif previous >= CommentStatus.APPROVED and (
                    comment.status == CommentStatus.SPAM
                ):
                    await self.spam_filter.report_false_negative(comment)
                    logfire.info("Reported false negative", comment_id=comment.id)
            except Exception as e:
                logfire.error(
                    "Spam feedback failed", comment_id=comment.id, error=str(e)
                )
