"""Domain layer DI providers."""

from dishka import Scope, provide

from commentary.config import NotificationSettings, SiteSettings
from commentary.domain.repository import (
    CommentFieldRepository,
    CommentRepository,
    PageRepository,
    UserRepository,
    VoteRepository,
)
from commentary.domain.service import (
    ActionService,
    CodeService,
    CommentService,
    MailTransport,
    ModerationService,
    NotificationDispatcher,
    NotificationOutbox,
    NotificationService,
    SpamFilter,
    ThreadService,
    VoteService,
)
from commentary.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session
    lifecycle. The notification dispatcher is APP-scoped: its delivery tasks
    outlive the request that scheduled them.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_notification_dispatcher(
        self,
        mail_transport: MailTransport,
        notification_settings: NotificationSettings,
    ) -> NotificationDispatcher:
        """Provide the background notification dispatcher."""
        return NotificationDispatcher(
            mail_transport=mail_transport,
            retry_attempts=notification_settings.retry_attempts,
            retry_wait_seconds=notification_settings.retry_wait_seconds,
        )

    @provide
    def get_notification_outbox(
        self, dispatcher: NotificationDispatcher
    ) -> NotificationOutbox:
        """Provide the per-request outbox, released after commit."""
        return NotificationOutbox(dispatcher)

    @provide(scope=Scope.APP)
    def get_thread_service(self) -> ThreadService:
        """Provide thread integrity service (stateless)."""
        return ThreadService()

    @provide(scope=Scope.APP)
    def get_moderation_service(self, spam_filter: SpamFilter) -> ModerationService:
        """Provide moderation state machine service."""
        return ModerationService(spam_filter=spam_filter)

    @provide
    def get_code_service(
        self,
        comment_repository: CommentRepository,
        notification_settings: NotificationSettings,
    ) -> CodeService:
        """Provide approval and subscriber code service."""
        return CodeService(
            comment_repository=comment_repository,
            subscriber_scope=notification_settings.subscriber_scope,
        )

    @provide
    def get_notification_service(
        self,
        comment_repository: CommentRepository,
        page_repository: PageRepository,
        user_repository: UserRepository,
        code_service: CodeService,
        outbox: NotificationOutbox,
        notification_settings: NotificationSettings,
        site_settings: SiteSettings,
    ) -> NotificationService:
        """Provide notification targeting service."""
        return NotificationService(
            comment_repository=comment_repository,
            page_repository=page_repository,
            user_repository=user_repository,
            code_service=code_service,
            outbox=outbox,
            notification_settings=notification_settings,
            site_settings=site_settings,
        )

    @provide
    def get_vote_service(
        self,
        vote_repository: VoteRepository,
        comment_repository: CommentRepository,
    ) -> VoteService:
        """Provide vote domain service."""
        return VoteService(
            vote_repository=vote_repository, comment_repository=comment_repository
        )

    @provide
    def get_action_service(
        self,
        comment_repository: CommentRepository,
        field_repository: CommentFieldRepository,
        page_repository: PageRepository,
        moderation_service: ModerationService,
        notification_service: NotificationService,
        vote_service: VoteService,
    ) -> ActionService:
        """Provide action link service."""
        return ActionService(
            comment_repository=comment_repository,
            field_repository=field_repository,
            page_repository=page_repository,
            moderation_service=moderation_service,
            notification_service=notification_service,
            vote_service=vote_service,
        )

    @provide
    def get_comment_service(
        self,
        comment_repository: CommentRepository,
        field_repository: CommentFieldRepository,
        page_repository: PageRepository,
        thread_service: ThreadService,
        moderation_service: ModerationService,
        code_service: CodeService,
        notification_service: NotificationService,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_repository=comment_repository,
            field_repository=field_repository,
            page_repository=page_repository,
            thread_service=thread_service,
            moderation_service=moderation_service,
            code_service=code_service,
            notification_service=notification_service,
        )
