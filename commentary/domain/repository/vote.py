"""Comment vote repository interface."""

from abc import ABC, abstractmethod

from commentary.domain.model.vote import CommentVote


class VoteRepository(ABC):
    """Repository for CommentVote entity."""

    @abstractmethod
    async def add(self, vote: CommentVote) -> bool:
        """Record a vote unless the voter already voted on the comment.

        Args:
            vote: The vote to record

        Returns:
            True if recorded, False if the voter had already voted
        """
        pass
