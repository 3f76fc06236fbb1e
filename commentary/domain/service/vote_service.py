"""Vote domain service."""

from typing import Optional

import logfire

from commentary.domain.error import ValidationError
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.model.vote import CommentVote
from commentary.domain.repository import CommentRepository, VoteRepository

from .base import Service


class VoteService(Service):
    """Domain service for comment up/down votes."""

    def __init__(
        self, vote_repository: VoteRepository, comment_repository: CommentRepository
    ) -> None:
        """Initialize vote service.

        Args:
            vote_repository: Vote repository (one vote per voter per comment)
            comment_repository: Comment repository (vote counters)
        """
        self.vote_repository = vote_repository
        self.comment_repository = comment_repository

    async def vote(
        self, comment: Comment, field: CommentField, voter: str, up: bool
    ) -> Optional[Comment]:
        """Count one vote on a comment.

        Args:
            comment: The comment voted on
            field: Field configuration (``use_votes``)
            voter: User id or IP address of the voter
            up: True for an upvote, False for a downvote

        Returns:
            The comment with updated counters, or None if the voter had
            already voted on it

        Raises:
            ValidationError: If votes are disabled, the voter is unknown, or
                the comment is not visible
        """
        with logfire.span(
            "vote_service.vote", comment_id=comment.id, up=up, field=field.name
        ):
            if not field.use_votes:
                raise ValidationError(f"Votes are disabled for field {field.name}")
            if not voter:
                raise ValidationError("Cannot identify voter")
            if not comment.is_approved():
                logfire.warn("Vote on hidden comment", comment_id=comment.id)
                raise ValidationError(f"Comment {comment.id} is not open for votes")

            recorded = await self.vote_repository.add(
                CommentVote(comment_id=comment.id, voter=voter, up=up)
            )
            if not recorded:
                logfire.warn("Duplicate vote attempt", comment_id=comment.id)
                return None

            updated = await self.comment_repository.increment_votes(comment.id, up)
            logfire.info(
                "Vote counted",
                comment_id=comment.id,
                up=up,
                upvotes=updated.upvotes if updated else None,
                downvotes=updated.downvotes if updated else None,
            )
            return updated
