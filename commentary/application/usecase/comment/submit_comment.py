"""Submit comment use case."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from commentary.application.usecase.commit import commit_and_notify
from commentary.domain.model import Comment
from commentary.domain.repository import UnitOfWork
from commentary.domain.service import CommentService, NotificationOutbox
from commentary.domain.value import (
    GUEST_USER_ID,
    CommentFlag,
    CommentId,
    CommentScope,
    PageId,
    UserId,
)

_NOTIFY_FLAGS = {
    "none": CommentFlag.NONE,
    "reply": CommentFlag.NOTIFY_REPLY,
    "all": CommentFlag.NOTIFY_ALL,
}


class SubmitCommentRequest(BaseModel):
    """Submit comment request."""

    page_id: int
    field_name: str
    text: str = Field(min_length=1)
    cite: str = ""
    email: str = ""
    website: str = ""
    stars: int = 0
    parent_id: int = 0  # 0 submits a root comment
    notify: Literal["none", "reply", "all"] = "none"
    ip: str = ""
    user_agent: str = ""
    user_id: int | None = None
    quiet: bool = False  # persist without sending notifications


class SubmitCommentResponse(BaseModel):
    """Submit comment response."""

    comment_id: int
    page_id: int
    field_name: str
    parent_id: int
    status: str
    approved: bool
    notify: bool
    created_at: datetime


class SubmitCommentUseCase:
    """Use case for submitting a new comment or reply."""

    def __init__(
        self,
        comment_service: CommentService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> None:
        """Initialize submit comment use case.

        Args:
            comment_service: Comment domain service
            unit_of_work: Request transaction boundary
            outbox: Mail queued by the submission
        """
        self.comment_service = comment_service
        self.unit_of_work = unit_of_work
        self.outbox = outbox

    async def execute(self, request: SubmitCommentRequest) -> SubmitCommentResponse:
        """Execute submit comment flow.

        Raw author input is sanitized when the Comment is built; the comment
        service then threads, classifies and saves. Notifications go out once
        the comment is committed.

        Raises:
            NotFoundError: If the page or field does not exist
            ValidationError: If the requested parent is rejected
            PersistenceError: If the commit fails
        """
        comment = Comment(
            scope=CommentScope(
                page_id=PageId(request.page_id), field_name=request.field_name
            ),
            text=request.text,
            cite=request.cite,
            email=request.email,
            website=request.website,
            stars=request.stars,
            flags=_NOTIFY_FLAGS[request.notify],
            ip=request.ip,
            user_agent=request.user_agent,
            created_users_id=UserId(request.user_id or GUEST_USER_ID),
        )

        saved = await self.comment_service.submit(
            comment, CommentId(request.parent_id), quiet=request.quiet
        )
        await commit_and_notify(self.unit_of_work, self.outbox)

        return SubmitCommentResponse(
            comment_id=saved.id,
            page_id=saved.scope.page_id,
            field_name=saved.scope.field_name,
            parent_id=saved.parent_id,
            status=saved.status.name.lower(),
            approved=saved.is_approved(),
            notify=saved.wants_notifications(),
            created_at=saved.created_at,
        )
