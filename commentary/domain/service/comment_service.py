"""Comment domain service."""

from datetime import datetime, timedelta
from typing import Optional

import logfire

from commentary.domain.error import DeletionBlockedError, NotFoundError
from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.model.page import Page
from commentary.domain.repository import (
    CommentFieldRepository,
    CommentRepository,
    PageRepository,
)
from commentary.domain.value import CommentId, CommentScope, CommentStatus

from .base import Service
from .code_service import CodeService
from .moderation_service import ModerationService
from .notification_service import NotificationService
from .thread_service import ThreadService


class CommentService(Service):
    """Domain service for comment operations.

    Every write reloads the collection under the repository's scope lock and
    re-runs the threading checks against it, so two concurrent requests
    cannot both pass validation against a stale snapshot.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        field_repository: CommentFieldRepository,
        page_repository: PageRepository,
        thread_service: ThreadService,
        moderation_service: ModerationService,
        code_service: CodeService,
        notification_service: NotificationService,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Comment repository
            field_repository: Comment field configuration
            page_repository: Page lookup
            thread_service: Parent validation and deletion guard
            moderation_service: Status state machine
            code_service: Approval and subscriber codes
            notification_service: Post-save notifications
        """
        self.comment_repository = comment_repository
        self.field_repository = field_repository
        self.page_repository = page_repository
        self.thread_service = thread_service
        self.moderation_service = moderation_service
        self.code_service = code_service
        self.notification_service = notification_service

    async def get_field(self, name: str) -> CommentField:
        field = await self.field_repository.get(name)
        if field is None:
            raise NotFoundError("Comment field", name)
        return field

    async def get_page(self, scope: CommentScope) -> Page:
        page = await self.page_repository.find_by_id(scope.page_id)
        if page is None:
            raise NotFoundError("Page", str(scope.page_id))
        return page

    def _get_in_scope(
        self, collection: CommentCollection, comment_id: CommentId
    ) -> Comment:
        comment = collection.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment", str(comment_id))
        return comment

    async def submit(
        self,
        comment: Comment,
        requested_parent_id: CommentId,
        quiet: bool = False,
    ) -> Comment:
        """Submit a new comment.

        Validates threading, assigns the initial status, mints the approval
        and subscriber codes, saves, then dispatches notifications.

        Args:
            comment: The new comment (sanitized author input)
            requested_parent_id: Parent the author replied to, 0 for root
            quiet: Save without sending any notification

        Returns:
            The saved comment

        Raises:
            NotFoundError: If the page or field does not exist
            ValidationError: If the requested parent is rejected
        """
        scope = comment.scope
        field = await self.get_field(scope.field_name)
        page = await self.get_page(scope)

        with logfire.span(
            "comment_service.submit",
            scope=str(scope),
            requested_parent_id=requested_parent_id,
            quiet=quiet,
        ):
            update: dict = {}
            if not field.use_website:
                update["website"] = ""
            if not field.use_stars:
                update["stars"] = 0

            # Fail fast on a bad parent before calling out to the spam filter
            snapshot = await self.comment_repository.load(scope)
            self.thread_service.assign_parent(
                snapshot, comment, requested_parent_id, field
            )

            update["status"] = await self.moderation_service.initial_status(
                comment, field
            )
            update["code"] = self.code_service.mint_approval_code()
            if field.allowed_flags(comment.flags):
                update["subcode"] = await self.code_service.subscriber_code_for(
                    comment.email, scope.page_id
                )
            comment = comment.model_copy(update=update)

            async with self.comment_repository.locked(scope):
                collection = await self.comment_repository.load(scope)
                parent_id = self.thread_service.assign_parent(
                    collection, comment, requested_parent_id, field
                )
                comment = comment.model_copy(update={"parent_id": parent_id})
                comment = await self.notification_service.prepare_flags(
                    collection, comment, field
                )
                saved = await self.comment_repository.save(comment)
                collection.add(saved)

            logfire.info(
                "Comment submitted",
                comment_id=saved.id,
                parent_id=saved.parent_id,
                status=saved.status.name,
                flags=int(saved.flags),
            )

            if not quiet:
                await self.notification_service.notify_submitted(
                    collection, saved, field, page
                )
            return saved

    async def change_status(
        self, scope: CommentScope, comment_id: CommentId, status: CommentStatus
    ) -> Comment:
        """Moderator status change.

        Raises:
            NotFoundError: If the comment is not in the scope
            InvalidStatusTransitionError: If the change is not allowed
        """
        field = await self.get_field(scope.field_name)
        page = await self.get_page(scope)

        with logfire.span(
            "comment_service.change_status",
            comment_id=comment_id,
            status=status.name,
        ):
            async with self.comment_repository.locked(scope):
                collection = await self.comment_repository.load(scope)
                comment = self._get_in_scope(collection, comment_id)
                updated = self.moderation_service.transition(comment, status)
                if updated is comment:
                    return comment
                saved = await self.comment_repository.save(updated)
                collection.replace(saved)

            logfire.info(
                "Comment status changed",
                comment_id=comment_id,
                previous=comment.status.name,
                status=status.name,
            )
            await self.moderation_service.apply_feedback(updated)
            if saved.is_approved():
                await self.notification_service.notify_approved(
                    collection, saved, field, page
                )
            return saved

    async def delete(self, scope: CommentScope, comment_id: CommentId) -> None:
        """Physically delete a comment.

        Raises:
            NotFoundError: If the comment is not in the scope
            DeletionBlockedError: If it still has live replies
        """
        with logfire.span("comment_service.delete", comment_id=comment_id):
            async with self.comment_repository.locked(scope):
                collection = await self.comment_repository.load(scope)
                comment = self._get_in_scope(collection, comment_id)
                if not self.thread_service.can_delete(collection, comment):
                    logfire.warn("Deletion blocked by replies", comment_id=comment_id)
                    raise DeletionBlockedError(comment_id)
                await self.comment_repository.delete(comment_id)
            logfire.info("Comment deleted", comment_id=comment_id)

    async def move_comment(
        self,
        scope: CommentScope,
        comment_id: CommentId,
        new_parent_id: CommentId,
    ) -> Comment:
        """Re-parent an existing comment within its collection.

        Raises:
            NotFoundError: If the comment is not in the scope
            ValidationError: If the new parent is rejected (own parent,
                inside the comment's subtree, threading disabled)
        """
        field = await self.get_field(scope.field_name)

        with logfire.span(
            "comment_service.move_comment",
            comment_id=comment_id,
            new_parent_id=new_parent_id,
        ):
            async with self.comment_repository.locked(scope):
                collection = await self.comment_repository.load(scope)
                comment = self._get_in_scope(collection, comment_id)
                parent_id = self.thread_service.assign_parent(
                    collection, comment, new_parent_id, field
                )
                if parent_id == comment.parent_id:
                    return comment
                saved = await self.comment_repository.save(
                    comment.model_copy(update={"parent_id": parent_id})
                )
            logfire.info(
                "Comment moved",
                comment_id=comment_id,
                parent_id=parent_id,
            )
            return saved

    async def purge_spam(
        self, scope: CommentScope, now: Optional[datetime] = None
    ) -> int:
        """Delete spam older than the field's retention period.

        Spam that still has live replies is kept. Deeper comments go first,
        so a spam thread is removed bottom-up in one pass.

        Returns:
            Number of deleted comments
        """
        field = await self.get_field(scope.field_name)
        cutoff = (now or datetime.now()) - timedelta(days=field.delete_spam_after_days)

        with logfire.span(
            "comment_service.purge_spam", scope=str(scope), cutoff=cutoff.isoformat()
        ):
            deleted = 0
            async with self.comment_repository.locked(scope):
                expired = await self.comment_repository.find_spam_older_than(
                    scope, cutoff
                )
                if not expired:
                    return 0
                collection = await self.comment_repository.load(scope)
                expired.sort(key=collection.depth, reverse=True)
                for comment in expired:
                    current = collection.get(comment.id) or comment
                    if not self.thread_service.can_delete(collection, current):
                        logfire.info("Spam kept for live replies", comment_id=comment.id)
                        continue
                    if await self.comment_repository.delete(comment.id):
                        collection.remove(comment.id)
                        deleted += 1
            logfire.info("Spam purged", scope=str(scope), deleted=deleted)
            return deleted

    async def list_approved(
        self, scope: CommentScope, limit: int = 0, offset: int = 0
    ) -> CommentCollection:
        """Visible comments of a field, with pagination metadata."""
        await self.get_field(scope.field_name)
        with logfire.span(
            "comment_service.list_approved",
            scope=str(scope),
            limit=limit,
            offset=offset,
        ):
            collection = await self.comment_repository.load(
                scope, approved_only=True, limit=limit, offset=offset
            )
            logfire.info(
                "Comments retrieved",
                scope=str(scope),
                count=len(collection),
                total=collection.total,
            )
            return collection
