"""Moderator use cases: status changes, deletion, re-parenting and spam purge."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from commentary.application.usecase.commit import commit_and_notify
from commentary.domain.repository import UnitOfWork
from commentary.domain.service import CommentService, NotificationOutbox
from commentary.domain.value import CommentId, CommentScope, CommentStatus, PageId

_STATUSES = {
    "spam": CommentStatus.SPAM,
    "pending": CommentStatus.PENDING,
    "approved": CommentStatus.APPROVED,
    "featured": CommentStatus.FEATURED,
    "delete_pending": CommentStatus.DELETE_PENDING,
}


class ModeratedComment(BaseModel):
    """Comment state after a moderator change."""

    comment_id: int
    parent_id: int
    status: str
    approved: bool


class ChangeStatusRequest(BaseModel):
    """Change status request."""

    page_id: int
    field_name: str
    comment_id: int
    status: Literal["spam", "pending", "approved", "featured", "delete_pending"]


class ChangeStatusUseCase:
    """Use case for a moderator changing a comment's status."""

    def __init__(
        self,
        comment_service: CommentService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> None:
        self.comment_service = comment_service
        self.unit_of_work = unit_of_work
        self.outbox = outbox

    async def execute(self, request: ChangeStatusRequest) -> ModeratedComment:
        """Execute change status flow.

        Raises:
            NotFoundError: If the comment is not in the page field
            InvalidStatusTransitionError: If the change is not allowed
        """
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        comment = await self.comment_service.change_status(
            scope, CommentId(request.comment_id), _STATUSES[request.status]
        )
        await commit_and_notify(self.unit_of_work, self.outbox)
        return ModeratedComment(
            comment_id=comment.id,
            parent_id=comment.parent_id,
            status=comment.status.name.lower(),
            approved=comment.is_approved(),
        )


class DeleteCommentRequest(BaseModel):
    """Delete comment request."""

    page_id: int
    field_name: str
    comment_id: int


class DeleteCommentUseCase:
    """Use case for physically deleting a comment."""

    def __init__(self, comment_service: CommentService) -> None:
        self.comment_service = comment_service

    async def execute(self, request: DeleteCommentRequest) -> None:
        """Execute delete flow.

        Raises:
            NotFoundError: If the comment is not in the page field
            DeletionBlockedError: If the comment still has live replies
        """
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        await self.comment_service.delete(scope, CommentId(request.comment_id))


class MoveCommentRequest(BaseModel):
    """Move comment request."""

    page_id: int
    field_name: str
    comment_id: int
    parent_id: int  # 0 moves the comment to the root


class MoveCommentUseCase:
    """Use case for re-parenting a comment within its page field."""

    def __init__(self, comment_service: CommentService) -> None:
        self.comment_service = comment_service

    async def execute(self, request: MoveCommentRequest) -> ModeratedComment:
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        comment = await self.comment_service.move_comment(
            scope, CommentId(request.comment_id), CommentId(request.parent_id)
        )
        return ModeratedComment(
            comment_id=comment.id,
            parent_id=comment.parent_id,
            status=comment.status.name.lower(),
            approved=comment.is_approved(),
        )


class PurgeSpamRequest(BaseModel):
    """Purge spam request."""

    page_id: int
    field_name: str
    now: datetime | None = None


class PurgeSpamResponse(BaseModel):
    """Purge spam response."""

    page_id: int
    field_name: str
    deleted: int


class PurgeSpamUseCase:
    """Use case for deleting expired spam from a page field."""

    def __init__(self, comment_service: CommentService) -> None:
        self.comment_service = comment_service

    async def execute(self, request: PurgeSpamRequest) -> PurgeSpamResponse:
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        deleted = await self.comment_service.purge_spam(scope, now=request.now)
        return PurgeSpamResponse(
            page_id=request.page_id, field_name=request.field_name, deleted=deleted
        )
