"""Comment field repository backed by application settings."""

from typing import List, Optional

from commentary.config import CommentFieldSettings
from commentary.domain.model import CommentField
from commentary.domain.repository import CommentFieldRepository
from commentary.domain.value import CommentFlag, ModerationMode

_MODERATION = {
    "none": ModerationMode.NONE,
    "pending_only": ModerationMode.PENDING_ONLY,
    "all": ModerationMode.ALL,
}

_USE_NOTIFY = {
    "none": CommentFlag.NONE,
    "reply": CommentFlag.NOTIFY_REPLY,
    "all": CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_ALL,
}


def settings_to_field(settings: CommentFieldSettings) -> CommentField:
    """Convert configured field settings to the domain model."""
    return CommentField(
        name=settings.name,
        max_depth=settings.max_depth,
        moderation=_MODERATION[settings.moderation],
        notify_spam_to_admin=settings.notify_spam_to_admin,
        delete_spam_after_days=settings.delete_spam_after_days,
        use_notify=_USE_NOTIFY[settings.use_notify],
        notification_email=settings.notification_email,
        from_email=settings.from_email,
        use_notify_text=settings.use_notify_text,
        use_votes=settings.use_votes,
        use_stars=settings.use_stars,
        use_website=settings.use_website,
    )


class StaticCommentFieldRepository(CommentFieldRepository):
    """Comment fields fixed at startup."""

    def __init__(self, fields: List[CommentField]) -> None:
        self._fields = {f.name: f for f in fields}

    @classmethod
    def from_settings(
        cls, settings: List[CommentFieldSettings]
    ) -> "StaticCommentFieldRepository":
        return cls([settings_to_field(s) for s in settings])

    async def get(self, name: str) -> Optional[CommentField]:
        return self._fields.get(name)

    async def list_fields(self) -> List[CommentField]:
        return list(self._fields.values())
