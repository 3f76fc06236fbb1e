"""Action link request and result."""

from typing import Optional

from commentary.domain.model.common import DomainModel
from commentary.domain.value import CommentAction, CommentId, PageId, UserId


class ActionRequest(DomainModel):
    """Query parameters of a mailed action link, as received.

    Values are kept raw; ``ActionService.check_action`` decides what is
    valid. ``ip`` and ``user_id`` identify the voter for vote actions.
    """

    action: str = ""
    page_id: Optional[int] = None
    field_name: str = ""
    code: str = ""
    subcode: str = ""
    comment_id: Optional[int] = None
    ip: str = ""
    user_id: Optional[UserId] = None


class ActionResult(DomainModel):
    """Outcome of an action link.

    ``valid`` is False when the request was not an action request at all
    (unknown action or missing parameters). ``success`` is only True when
    the action was fully applied.
    """

    valid: bool = False
    success: bool = False
    action: Optional[CommentAction] = None
    message: str = ""
    page_id: Optional[PageId] = None
    field_name: str = ""
    comment_id: Optional[CommentId] = None
