"""Comment use cases."""

from .check_action import CheckActionRequest, CheckActionResponse, CheckActionUseCase
from .get_comments import (
    CommentItem,
    GetCommentsRequest,
    GetCommentsResponse,
    GetCommentsUseCase,
)
from .moderate_comment import (
    ChangeStatusRequest,
    ChangeStatusUseCase,
    DeleteCommentRequest,
    DeleteCommentUseCase,
    ModeratedComment,
    MoveCommentRequest,
    MoveCommentUseCase,
    PurgeSpamRequest,
    PurgeSpamResponse,
    PurgeSpamUseCase,
)
from .submit_comment import (
    SubmitCommentRequest,
    SubmitCommentResponse,
    SubmitCommentUseCase,
)

__all__ = [
    "ChangeStatusRequest",
    "ChangeStatusUseCase",
    "CheckActionRequest",
    "CheckActionResponse",
    "CheckActionUseCase",
    "CommentItem",
    "DeleteCommentRequest",
    "DeleteCommentUseCase",
    "GetCommentsRequest",
    "GetCommentsResponse",
    "GetCommentsUseCase",
    "ModeratedComment",
    "MoveCommentRequest",
    "MoveCommentUseCase",
    "PurgeSpamRequest",
    "PurgeSpamResponse",
    "PurgeSpamUseCase",
    "SubmitCommentRequest",
    "SubmitCommentResponse",
    "SubmitCommentUseCase",
]
