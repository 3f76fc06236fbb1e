"""Comment entity.

A comment is one user-submitted item attached to a (page, field) pair,
optionally threaded under a parent comment of the same collection.

Incoming author data is sanitized on construction: markup is stripped,
sizes are bounded in bytes, and anything that fails validation (email,
website, ip) is blanked rather than rejected, so a comment can always be
built from raw form input.
"""

import html
import ipaddress
import re
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

import bleach
from pydantic import Field, field_validator

from commentary.domain.model.common import DomainModel
from commentary.domain.value import (
    GUEST_USER_ID,
    NEW_COMMENT_ID,
    ROOT_PARENT_ID,
    ApprovalCode,
    CommentFlag,
    CommentId,
    CommentScope,
    CommentStatus,
    SubscriberCode,
    UserId,
)

MAX_TEXT_BYTES = 81920
MAX_CITE_BYTES = 128
MAX_USER_AGENT_BYTES = 255
MAX_STARS = 5

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_BLANK_LINE_RUNS = re.compile(r"\n{3,}")


def strip_tags(value: str) -> str:
    """Remove all markup, returning plain text.

    Entities are decoded before stripping, so encoded tags are removed as
    well. Stripping repeats until the text is stable, so no tag can be
    rebuilt from the pieces left around a removed one.
    """
    text = html.unescape(value)
    while True:
        stripped = html.unescape(bleach.clean(text, tags=[], strip=True))
        if stripped == text:
            return stripped
        text = stripped


def truncate_bytes(value: str, limit: int) -> str:
    """Truncate to at most ``limit`` UTF-8 bytes without splitting a character."""
    encoded = value.encode("utf-8")
    if len(encoded) <= limit:
        return value
    return encoded[:limit].decode("utf-8", errors="ignore")


def _single_line(value: str, limit: int) -> str:
    value = truncate_bytes(strip_tags(value), limit)
    for char in ("\r", "\n", "\t"):
        value = value.replace(char, " ")
    return value


class Comment(DomainModel):
    """Comment entity.

    Threading is stored only as ``parent_id``; depth, children and ancestors
    are derived from the owning ``CommentCollection``.

    ``loaded`` marks a comment that was read from storage. Only loaded
    comments record ``prev_status`` on a status change, which is what lets the
    spam filter tell a moderator correction from an initial classification.
    """

    id: CommentId = NEW_COMMENT_ID
    scope: CommentScope
    parent_id: CommentId = ROOT_PARENT_ID
    text: str = ""
    sort: int = 0
    status: CommentStatus = CommentStatus.PENDING
    prev_status: Optional[CommentStatus] = None
    flags: CommentFlag = CommentFlag.NONE
    created_at: datetime = Field(default_factory=datetime.now)
    created_users_id: UserId = GUEST_USER_ID
    email: str = ""
    cite: str = ""
    website: str = ""
    ip: str = ""
    user_agent: str = ""
    code: Optional[ApprovalCode] = None
    subcode: Optional[SubscriberCode] = None
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    stars: int = 0
    meta: dict[str, Any] = Field(default_factory=dict)
    loaded: bool = Field(default=False, exclude=True)

    @field_validator("text", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> str:
        """Strip markup, bound size and normalize newlines."""
        text = strip_tags(str(v or "").strip())
        text = truncate_bytes(text, MAX_TEXT_BYTES)
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return _BLANK_LINE_RUNS.sub("\n\n", text)

    @field_validator("cite", mode="before")
    @classmethod
    def clean_cite(cls, v: Any) -> str:
        """Display name: plain text on one line, at most 128 bytes."""
        return _single_line(str(v or ""), MAX_CITE_BYTES)

    @field_validator("user_agent", mode="before")
    @classmethod
    def clean_user_agent(cls, v: Any) -> str:
        """User agent: plain text on one line, at most 255 bytes."""
        return _single_line(str(v or ""), MAX_USER_AGENT_BYTES)

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v: Any) -> str:
        """Lowercase the address, or blank it when it is not an email."""
        email = str(v or "").strip().lower()
        return email if _EMAIL_PATTERN.match(email) else ""

    @field_validator("website", mode="before")
    @classmethod
    def clean_website(cls, v: Any) -> str:
        """Keep only absolute http(s) URLs, dropping any query string."""
        value = str(v or "").strip()
        if not value or any(c.isspace() for c in value):
            return ""
        if "://" not in value:
            value = f"http://{value}"
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or "." not in parts.netloc:
            return ""
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))

    @field_validator("ip", mode="before")
    @classmethod
    def clean_ip(cls, v: Any) -> str:
        """Keep valid IPv4/IPv6 addresses only."""
        value = str(v or "").strip()
        try:
            return str(ipaddress.ip_address(value))
        except ValueError:
            return ""

    @field_validator("flags", mode="before")
    @classmethod
    def coerce_flags(cls, v: Any) -> CommentFlag:
        """Accept raw bitsets as stored in the database."""
        return CommentFlag(int(v or 0))

    @field_validator("stars", mode="before")
    @classmethod
    def clamp_stars(cls, v: Any) -> int:
        """Clamp rating to 0-5 (anything below 1 means not rated)."""
        stars = int(v or 0)
        if stars < 1:
            return 0
        return min(stars, MAX_STARS)

    def is_new(self) -> bool:
        """True until the comment has been persisted."""
        return self.id == NEW_COMMENT_ID

    def is_approved(self) -> bool:
        """True when the comment is visible on the site (approved or featured)."""
        return CommentStatus.APPROVED <= self.status < CommentStatus.DELETE_PENDING

    def has_flag(self, flag: CommentFlag) -> bool:
        return bool(self.flags & flag)

    def wants_notifications(self) -> bool:
        """True when the author asked for reply or page-wide notifications."""
        return self.has_flag(CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_ALL)

    def url(self, page_url: str) -> str:
        """URL of this comment on the page it belongs to."""
        return f"{page_url}#Comment{self.id}"

    def with_status(self, status: CommentStatus) -> "Comment":
        """Return a copy with a new status.

        The outgoing status is kept in ``prev_status`` for loaded comments.
        """
        update: dict[str, Any] = {"status": status}
        if self.loaded:
            update["prev_status"] = self.status
        return self.model_copy(update=update)

    def with_flags(self, flags: CommentFlag) -> "Comment":
        return self.model_copy(update={"flags": CommentFlag(flags)})

    def __str__(self) -> str:
        return str(self.id)
