"""Action link domain service.

Handles the links mailed to moderators and subscribers. Nobody is logged
in: holding the code is the only authorization, so a code is honored once
and failures never tell a used code apart from an unknown one.
"""

import logfire

from commentary.domain.error import (
    InvalidStatusTransitionError,
    PersistenceError,
    ValidationError,
)
from commentary.domain.model.action import ActionRequest, ActionResult
from commentary.domain.repository import (
    CommentFieldRepository,
    CommentRepository,
    PageRepository,
)
from commentary.domain.value import (
    GUEST_USER_ID,
    CommentAction,
    CommentId,
    CommentScope,
    PageId,
)

from .base import Service
from .moderation_service import ModerationService
from .notification_service import NotificationService
from .vote_service import VoteService

INVALID_CODE_MESSAGE = "Invalid approval code or code has already been used"
MAX_CODE_LENGTH = 128
MAX_SUBCODE_LENGTH = 40


class ActionService(Service):
    """Domain service for mailed action links."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        field_repository: CommentFieldRepository,
        page_repository: PageRepository,
        moderation_service: ModerationService,
        notification_service: NotificationService,
        vote_service: VoteService,
    ) -> None:
        """Initialize action service.

        Args:
            comment_repository: Comment repository
            field_repository: Comment field configuration
            page_repository: Page lookup (URLs in follow-up mail)
            moderation_service: Status transitions and spam feedback
            notification_service: Subscriptions and queued notifications
            vote_service: Vote counting
        """
        self.comment_repository = comment_repository
        self.field_repository = field_repository
        self.page_repository = page_repository
        self.moderation_service = moderation_service
        self.notification_service = notification_service
        self.vote_service = vote_service

    async def check_action(
        self, request: ActionRequest, scope: CommentScope
    ) -> ActionResult:
        """Apply the action of an incoming link, if it is valid.

        Args:
            request: Link parameters as received
            scope: Page and field the link was followed on

        Returns:
            The outcome. Never raises for bad input.
        """
        raw_action = request.action.strip().lower()
        if not raw_action:
            return ActionResult()

        try:
            action = CommentAction(raw_action)
        except ValueError:
            logfire.warn("Unknown comment action", action=raw_action[:32])
            return ActionResult(message=f"Unknown action: {raw_action[:32]}")

        with logfire.span(
            "action_service.check_action", action=action.value, scope=str(scope)
        ):
            if action in (CommentAction.UNSUB, CommentAction.CONFIRM):
                return await self._subscription_action(action, request, scope)
            if action in (CommentAction.UPVOTE, CommentAction.DOWNVOTE):
                return await self._vote_action(action, request, scope)
            return await self._moderation_action(action, request, scope)

    async def _subscription_action(
        self, action: CommentAction, request: ActionRequest, scope: CommentScope
    ) -> ActionResult:
        enable = action == CommentAction.CONFIRM
        subcode = request.subcode.strip()[:MAX_SUBCODE_LENGTH]
        if not subcode:
            return ActionResult(action=action, message="No subscriber code provided")

        changed = await self.notification_service.modify_notifications(
            scope.page_id, subcode, enable
        )
        if changed and enable:
            message = "You have confirmed receipt of notifications from this page."
        elif changed:
            message = "You have unsubscribed from comment notifications on this page."
        elif enable:
            message = "Error confirming notifications"
        else:
            message = "Error disabling notifications"
        return ActionResult(
            valid=True,
            success=changed,
            action=action,
            message=message,
            page_id=scope.page_id,
        )

    async def _vote_action(
        self, action: CommentAction, request: ActionRequest, scope: CommentScope
    ) -> ActionResult:
        result = ActionResult(
            action=action, page_id=scope.page_id, field_name=scope.field_name
        )
        if not request.comment_id:
            return result.model_copy(update={"message": "No comment specified"})

        comment_id = CommentId(request.comment_id)
        result = result.model_copy(update={"valid": True, "comment_id": comment_id})

        field = await self.field_repository.get(scope.field_name)
        comment = await self.comment_repository.find_by_id(comment_id)
        if field is None or comment is None or comment.scope != scope:
            return result.model_copy(update={"message": "Unknown comment"})

        if request.user_id and request.user_id != GUEST_USER_ID:
            voter = f"user:{request.user_id}"
        else:
            voter = request.ip

        try:
            updated = await self.vote_service.vote(
                comment, field, voter, up=action == CommentAction.UPVOTE
            )
        except ValidationError as e:
            return result.model_copy(update={"message": str(e)})

        if updated is None:
            return result.model_copy(
                update={"message": "You have already voted for this comment"}
            )
        return result.model_copy(
            update={
                "success": True,
                "message": f"Recorded {action.value} for comment {comment_id}",
            }
        )

    async def _moderation_action(
        self, action: CommentAction, request: ActionRequest, scope: CommentScope
    ) -> ActionResult:
        result = ActionResult(action=action)

        if request.page_id is None or PageId(request.page_id) != scope.page_id:
            return result.model_copy(
                update={"message": f"Invalid page specified: {request.page_id}"}
            )
        result = result.model_copy(update={"page_id": scope.page_id})

        field_name = request.field_name.strip()
        if not field_name or field_name != scope.field_name:
            return result.model_copy(
                update={"message": f"Incorrect field name: {field_name[:64]}"}
            )
        result = result.model_copy(update={"field_name": field_name})

        field = await self.field_repository.get(field_name)
        if field is None:
            return result.model_copy(update={"message": f"Unknown field: {field_name}"})

        code = request.code.strip()[:MAX_CODE_LENGTH]
        if not code:
            return result.model_copy(update={"message": "No approval code provided"})

        # All required parameters are present from here on
        result = result.model_copy(update={"valid": True})

        status = action.target_status
        if status is None:
            return result.model_copy(update={"message": f"Unknown action: {action.value}"})

        # Read, check and consume under the same lock moderators write under
        async with self.comment_repository.locked(scope):
            comment = await self.comment_repository.find_by_code(scope, code)
            if comment is None:
                logfire.warn(
                    "Approval code rejected", scope=str(scope), action=action.value
                )
                return result.model_copy(update={"message": INVALID_CODE_MESSAGE})
            result = result.model_copy(update={"comment_id": comment.id})

            try:
                transitioned = self.moderation_service.transition(comment, status)
            except InvalidStatusTransitionError as e:
                return result.model_copy(update={"message": str(e)})

            try:
                consumed = await self.comment_repository.consume_code(
                    comment.id, code, status, expected_status=comment.status
                )
            except PersistenceError as e:
                message = f"Failed to update comment {comment.id} to '{action.value}'"
                logfire.error(message, error=str(e))
                return result.model_copy(update={"message": message})

        if consumed is None:
            # The code or the status changed after it was read
            logfire.warn("Approval code lost race", comment_id=comment.id)
            return result.model_copy(update={"message": INVALID_CODE_MESSAGE})

        await self.moderation_service.apply_feedback(transitioned)

        if consumed.is_approved():
            page = await self.page_repository.find_by_id(scope.page_id)
            if page is not None:
                collection = await self.comment_repository.load(scope)
                await self.notification_service.notify_approved(
                    collection, consumed, field, page
                )

        message = f"Updated comment {comment.id} to “{action.value}”"
        logfire.info(message, comment_id=comment.id, status=status.name)
        return result.model_copy(update={"success": True, "message": message})
