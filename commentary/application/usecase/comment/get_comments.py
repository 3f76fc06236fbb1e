"""Get comments use case."""

from datetime import datetime

from pydantic import BaseModel, Field

from commentary.domain.service import CommentService
from commentary.domain.value import CommentScope, PageId


class CommentItem(BaseModel):
    """Comment item in response."""

    comment_id: int
    parent_id: int
    depth: int
    text: str
    cite: str
    website: str
    status: str
    upvotes: int
    downvotes: int
    stars: int
    created_at: datetime


class GetCommentsRequest(BaseModel):
    """Get comments request."""

    page_id: int
    field_name: str
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)


class GetCommentsResponse(BaseModel):
    """Get comments response."""

    page_id: int
    field_name: str
    comments: list[CommentItem]
    total: int
    limit: int
    offset: int
    stars_average: float | None
    stars_count: int


class GetCommentsUseCase:
    """Use case for listing the visible comments of a page field."""

    def __init__(self, comment_service: CommentService) -> None:
        """Initialize get comments use case.

        Args:
            comment_service: Comment domain service
        """
        self.comment_service = comment_service

    async def execute(self, request: GetCommentsRequest) -> GetCommentsResponse:
        """Execute get comments flow.

        Only approved and featured comments are listed, in sort order.
        Depth is computed within the loaded page of results.

        Raises:
            NotFoundError: If the field does not exist
        """
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        collection = await self.comment_service.list_approved(
            scope, limit=request.limit, offset=request.offset
        )
        average, count = collection.stars()

        items = [
            CommentItem(
                comment_id=comment.id,
                parent_id=comment.parent_id,
                depth=collection.depth(comment),
                text=comment.text,
                cite=comment.cite,
                website=comment.website,
                status=comment.status.name.lower(),
                upvotes=comment.upvotes,
                downvotes=comment.downvotes,
                stars=comment.stars,
                created_at=comment.created_at,
            )
            for comment in collection
        ]

        return GetCommentsResponse(
            page_id=request.page_id,
            field_name=request.field_name,
            comments=items,
            total=collection.get_total(),
            limit=collection.get_limit(),
            offset=collection.offset,
            stars_average=average,
            stars_count=count,
        )
