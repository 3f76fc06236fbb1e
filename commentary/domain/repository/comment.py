"""Comment repository interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import List, Optional

from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.value import (
    CommentFlag,
    CommentId,
    CommentScope,
    CommentStatus,
    PageId,
    SubscriberCode,
)


class CommentRepository(ABC):
    """Repository for Comment entity.

    Every read and write is scoped by (page, field). Implementations are
    responsible for serializing writes to one scope (see ``locked``) and for
    making approval code consumption atomic.
    """

    @abstractmethod
    async def load(
        self,
        scope: CommentScope,
        approved_only: bool = False,
        limit: int = 0,
        offset: int = 0,
    ) -> CommentCollection:
        """Load the comments of one page field in sort order.

        Args:
            scope: Page and field to load
            approved_only: Only include visible (approved or featured) comments
            limit: Maximum number of comments (0 for all)
            offset: Number of comments to skip

        Returns:
            Collection with ``total`` set to the unpaginated count
        """
        pass

    @abstractmethod
    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID.

        Args:
            comment_id: The comment's unique identifier

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_code(self, scope: CommentScope, code: str) -> Optional[Comment]:
        """Find the comment in a scope that currently holds an approval code.

        Args:
            scope: Page and field the code was issued for
            code: The approval code

        Returns:
            The comment if the code is live, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, comment: Comment) -> Comment:
        """Save a comment (create or update).

        New comments are assigned an id and the next sort position.

        Args:
            comment: The comment to save

        Returns:
            The saved comment, marked as loaded
        """
        pass

    @abstractmethod
    async def delete(self, comment_id: CommentId) -> bool:
        """Physically delete a comment.

        Args:
            comment_id: The comment ID to delete

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    async def consume_code(
        self,
        comment_id: CommentId,
        code: str,
        status: CommentStatus,
        expected_status: CommentStatus,
    ) -> Optional[Comment]:
        """Apply a status and clear the approval code in one step.

        The update only happens while the stored code still equals ``code``
        and the stored status still equals ``expected_status``. Two requests
        presenting the same code cannot both succeed, and a status changed
        by a moderator in the meantime is never overwritten.

        Args:
            comment_id: The comment the code was found on
            code: The presented approval code
            status: The status to apply
            expected_status: The status the transition was checked against

        Returns:
            The updated comment, or None if the code was no longer live
        """
        pass

    @abstractmethod
    async def set_flags(self, comment_id: CommentId, flags: CommentFlag) -> bool:
        """Update only the flags column.

        Returns:
            True if a row was updated
        """
        pass

    @abstractmethod
    async def find_email_by_subcode(
        self, page_id: Optional[PageId], subcode: str
    ) -> Optional[str]:
        """Resolve the email address bound to a subscriber code.

        Args:
            page_id: Page to search, or None to search every page
            subcode: The subscriber code

        Returns:
            The email address, or None if the code is unknown
        """
        pass

    @abstractmethod
    async def find_subcode_for_email(
        self, email: str, page_id: Optional[PageId]
    ) -> Optional[SubscriberCode]:
        """Find an existing subscriber code for an email address.

        Args:
            email: Commenter email address
            page_id: Page to search, or None to search every page

        Returns:
            The subscriber code already in use, or None
        """
        pass

    @abstractmethod
    async def find_by_email(
        self, email: str, page_id: Optional[PageId]
    ) -> List[Comment]:
        """Find all comments written from an email address.

        Args:
            email: Commenter email address
            page_id: Page to search, or None to search every page

        Returns:
            Matching comments, oldest first
        """
        pass

    @abstractmethod
    async def increment_votes(
        self, comment_id: CommentId, up: bool
    ) -> Optional[Comment]:
        """Atomically add one up or down vote.

        Returns:
            The updated comment, or None if it does not exist
        """
        pass

    @abstractmethod
    async def find_spam_older_than(
        self, scope: CommentScope, cutoff: datetime
    ) -> List[Comment]:
        """Find spam comments created before ``cutoff``."""
        pass

    @abstractmethod
    def locked(self, scope: CommentScope) -> AbstractAsyncContextManager[None]:
        """Serialize writers of one scope.

        Usage::

            async with repository.locked(scope):
                collection = await repository.load(scope)
                ...
                await repository.save(comment)
        """
        pass
