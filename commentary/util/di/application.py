"""Application layer DI providers."""

from dishka import Scope, provide

from commentary.application.usecase.comment import (
    ChangeStatusUseCase,
    CheckActionUseCase,
    DeleteCommentUseCase,
    GetCommentsUseCase,
    MoveCommentUseCase,
    PurgeSpamUseCase,
    SubmitCommentUseCase,
)
from commentary.domain.repository import UnitOfWork
from commentary.domain.service import ActionService, CommentService, NotificationOutbox
from commentary.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production use case provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    @provide
    def get_submit_comment_use_case(
        self,
        comment_service: CommentService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> SubmitCommentUseCase:
        return SubmitCommentUseCase(
            comment_service=comment_service,
            unit_of_work=unit_of_work,
            outbox=outbox,
        )

    @provide
    def get_get_comments_use_case(
        self, comment_service: CommentService
    ) -> GetCommentsUseCase:
        return GetCommentsUseCase(comment_service=comment_service)

    @provide
    def get_check_action_use_case(
        self,
        action_service: ActionService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> CheckActionUseCase:
        return CheckActionUseCase(
            action_service=action_service,
            unit_of_work=unit_of_work,
            outbox=outbox,
        )

    @provide
    def get_change_status_use_case(
        self,
        comment_service: CommentService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> ChangeStatusUseCase:
        return ChangeStatusUseCase(
            comment_service=comment_service,
            unit_of_work=unit_of_work,
            outbox=outbox,
        )

    @provide
    def get_delete_comment_use_case(
        self, comment_service: CommentService
    ) -> DeleteCommentUseCase:
        return DeleteCommentUseCase(comment_service=comment_service)

    @provide
    def get_move_comment_use_case(
        self, comment_service: CommentService
    ) -> MoveCommentUseCase:
        return MoveCommentUseCase(comment_service=comment_service)

    @provide
    def get_purge_spam_use_case(
        self, comment_service: CommentService
    ) -> PurgeSpamUseCase:
        return PurgeSpamUseCase(comment_service=comment_service)
