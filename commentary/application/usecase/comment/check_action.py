"""Check action use case."""

from pydantic import BaseModel

from commentary.application.usecase.commit import commit_and_notify
from commentary.domain.model import ActionRequest
from commentary.domain.repository import UnitOfWork
from commentary.domain.service import ActionService, NotificationOutbox
from commentary.domain.value import CommentScope, PageId, UserId


def _to_int(value: str) -> int | None:
    value = value.strip()
    return int(value) if value.isdigit() else None


class CheckActionRequest(BaseModel):
    """Check action request.

    ``page_id`` and ``field_name`` name the page and field the link was
    followed on. The ``link_*`` values and codes are the link's own query
    parameters, checked against them.
    """

    page_id: int
    field_name: str
    action: str = ""
    link_page_id: str = ""
    link_field: str = ""
    code: str = ""
    subcode: str = ""
    comment_id: str = ""
    ip: str = ""
    user_id: int | None = None


class CheckActionResponse(BaseModel):
    """Check action response."""

    valid: bool
    success: bool
    action: str | None
    message: str
    page_id: int | None
    field_name: str
    comment_id: int | None


class CheckActionUseCase:
    """Use case for applying a mailed action link."""

    def __init__(
        self,
        action_service: ActionService,
        unit_of_work: UnitOfWork,
        outbox: NotificationOutbox,
    ) -> None:
        """Initialize check action use case.

        Args:
            action_service: Action link domain service
            unit_of_work: Request transaction boundary
            outbox: Mail queued by an approval
        """
        self.action_service = action_service
        self.unit_of_work = unit_of_work
        self.outbox = outbox

    async def execute(self, request: CheckActionRequest) -> CheckActionResponse:
        scope = CommentScope(page_id=PageId(request.page_id), field_name=request.field_name)
        result = await self.action_service.check_action(
            ActionRequest(
                action=request.action,
                page_id=_to_int(request.link_page_id),
                field_name=request.link_field,
                code=request.code,
                subcode=request.subcode,
                comment_id=_to_int(request.comment_id),
                ip=request.ip,
                user_id=UserId(request.user_id) if request.user_id else None,
            ),
            scope,
        )
        await commit_and_notify(self.unit_of_work, self.outbox)
        return CheckActionResponse(
            valid=result.valid,
            success=result.success,
            action=result.action.value if result.action else None,
            message=result.message,
            page_id=result.page_id,
            field_name=result.field_name,
            comment_id=result.comment_id,
        )
