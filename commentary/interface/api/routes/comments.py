"""Comment routes.

Comments are addressed by the page and comment field they belong to. The
action endpoint receives the query string of a mailed link unchanged.
"""

from typing import Literal

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from commentary.application.usecase.comment import (
    CheckActionRequest,
    CheckActionResponse,
    CheckActionUseCase,
    GetCommentsRequest,
    GetCommentsResponse,
    GetCommentsUseCase,
    SubmitCommentRequest,
    SubmitCommentResponse,
    SubmitCommentUseCase,
)
from commentary.domain.error import NotFoundError, ValidationError

router = APIRouter(
    prefix="/pages/{page_id}/fields/{field_name}",
    tags=["comments"],
    route_class=DishkaRoute,
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


class SubmitCommentAPIRequest(BaseModel):
    """API request for submitting a comment."""

    text: str = Field(min_length=1, max_length=81920)
    cite: str = Field(default="", max_length=128)
    email: str = ""
    website: str = ""
    stars: int = Field(default=0, ge=0, le=5)
    parent_id: int = Field(default=0, ge=0)
    notify: Literal["none", "reply", "all"] = "none"


@router.post(
    "/comments",
    response_model=SubmitCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_comment(
    page_id: int,
    field_name: str,
    body: SubmitCommentAPIRequest,
    request: Request,
    submit_comment_use_case: FromDishka[SubmitCommentUseCase],
) -> SubmitCommentResponse:
    """Submit a comment or a reply to another comment.

    Raises:
        HTTPException: 404 for an unknown page or field, 400 for a rejected
            parent, 500 for anything else
    """
    try:
        return await submit_comment_use_case.execute(
            SubmitCommentRequest(
                page_id=page_id,
                field_name=field_name,
                text=body.text,
                cite=body.cite,
                email=body.email,
                website=body.website,
                stars=body.stars,
                parent_id=body.parent_id,
                notify=body.notify,
                ip=_client_ip(request),
                user_agent=request.headers.get("user-agent", ""),
            )
        )
    except NotFoundError as e:
        logfire.warn("Comment submission failed - not found", error=str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logfire.error("Unexpected error submitting comment", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit comment",
        )


@router.get("/comments", response_model=GetCommentsResponse)
async def get_comments(
    page_id: int,
    field_name: str,
    get_comments_use_case: FromDishka[GetCommentsUseCase],
    limit: int = Query(default=0, ge=0, le=500),
    offset: int = Query(default=0, ge=0),
) -> GetCommentsResponse:
    """List the approved comments of a page field in sort order."""
    try:
        return await get_comments_use_case.execute(
            GetCommentsRequest(
                page_id=page_id, field_name=field_name, limit=limit, offset=offset
            )
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/comments/action", response_model=CheckActionResponse)
async def check_action(
    page_id: int,
    field_name: str,
    request: Request,
    check_action_use_case: FromDishka[CheckActionUseCase],
    comment_success: str = "",
    link_page_id: str = Query(default="", alias="page_id"),
    link_field: str = Query(default="", alias="field"),
    code: str = "",
    subcode: str = "",
    comment_id: str = "",
) -> CheckActionResponse:
    """Apply a mailed action link.

    Always answers 200, even for malformed parameters; the outcome is in
    ``valid``, ``success`` and ``message``.
    """
    return await check_action_use_case.execute(
        CheckActionRequest(
            page_id=page_id,
            field_name=field_name,
            action=comment_success,
            link_page_id=link_page_id,
            link_field=link_field,
            code=code,
            subcode=subcode,
            comment_id=comment_id,
            ip=_client_ip(request),
        )
    )
