"""Comment field configuration.

A page template may carry several comment fields; each one has its own
moderation, threading and notification policy. Configuration is owned by
the host CMS and is only read here.
"""

from typing import Any

from pydantic import Field, field_validator

from commentary.domain.model.common import DomainModel
from commentary.domain.value import CommentFlag, ModerationMode


class CommentField(DomainModel):
    """Read-only policy for one comment field.

    ``max_depth`` of 0 disables threaded replies. ``use_notify`` is the
    widest subscription a commenter may request: 0 (none), NOTIFY_REPLY, or
    NOTIFY_REPLY | NOTIFY_ALL. ``notification_email`` is the admin recipient
    list (see ``NotificationService.resolve_admin_recipients``).
    """

    name: str
    max_depth: int = Field(default=0, ge=0)
    moderation: ModerationMode = ModerationMode.ALL
    notify_spam_to_admin: bool = False
    delete_spam_after_days: int = Field(default=3, ge=0)
    use_notify: CommentFlag = CommentFlag.NONE
    notification_email: str = ""
    from_email: str = ""
    use_notify_text: bool = True
    use_votes: bool = False
    use_stars: bool = False
    use_website: bool = False

    @field_validator("use_notify", mode="before")
    @classmethod
    def coerce_use_notify(cls, v: Any) -> CommentFlag:
        return CommentFlag(int(v or 0))

    def allows_threading(self) -> bool:
        return self.max_depth > 0

    def allowed_flags(self, requested: CommentFlag) -> CommentFlag:
        """Narrow a commenter's requested subscription to what the field allows."""
        allowed = CommentFlag.NONE
        if self.use_notify & CommentFlag.NOTIFY_REPLY:
            allowed |= CommentFlag.NOTIFY_REPLY
        if self.use_notify & CommentFlag.NOTIFY_ALL:
            allowed |= CommentFlag.NOTIFY_ALL
        return CommentFlag(requested & allowed)
