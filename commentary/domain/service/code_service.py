"""Action code domain service.

Mints the codes embedded in mailed links and builds those links.
"""

import secrets
from typing import Literal, Optional
from urllib.parse import urlencode

import logfire

from commentary.domain.model.page import Page
from commentary.domain.repository import CommentRepository
from commentary.domain.value import (
    ApprovalCode,
    CommentAction,
    PageId,
    SubscriberCode,
)

from .base import Service

# token_urlsafe(n) yields ceil(4n/3) characters
APPROVAL_CODE_BYTES = 32  # 43 characters
SUBSCRIBER_CODE_BYTES = 30  # 40 characters


class CodeService(Service):
    """Domain service for approval and subscriber codes."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        subscriber_scope: Literal["page", "site"] = "page",
    ) -> None:
        """Initialize code service.

        Args:
            comment_repository: Comment repository (subscriber code lookup)
            subscriber_scope: Whether one email shares a subscriber code per
                page or across the whole site
        """
        self.comment_repository = comment_repository
        self.subscriber_scope = subscriber_scope

    def mint_approval_code(self) -> ApprovalCode:
        """Generate a fresh single-use approval code."""
        return ApprovalCode(secrets.token_urlsafe(APPROVAL_CODE_BYTES))

    def mint_subscriber_code(self) -> SubscriberCode:
        """Generate a fresh 40 character subscriber code."""
        return SubscriberCode(secrets.token_urlsafe(SUBSCRIBER_CODE_BYTES))

    async def subscriber_code_for(
        self, email: str, page_id: PageId
    ) -> Optional[SubscriberCode]:
        """Subscriber code for an email address, reusing an existing one.

        Args:
            email: Commenter email address
            page_id: Page the comment is posted on

        Returns:
            The code already bound to the address within the configured
            scope, a fresh one otherwise, or None when there is no address
        """
        if not email:
            return None
        lookup_page = page_id if self.subscriber_scope == "page" else None
        existing = await self.comment_repository.find_subcode_for_email(
            email, lookup_page
        )
        if existing is not None:
            logfire.debug("Reusing subscriber code", page_id=page_id)
            return existing
        return self.mint_subscriber_code()

    @staticmethod
    def action_url(
        page: Page, field_name: str, code: ApprovalCode, action: CommentAction
    ) -> str:
        """Moderator link for one approval code and action."""
        query = urlencode(
            {
                "field": field_name,
                "page_id": page.id,
                "code": code.root,
                "comment_success": action.value,
            }
        )
        return f"{page.http_url}?{query}"

    @staticmethod
    def subscriber_url(
        page: Page, subcode: SubscriberCode, action: CommentAction
    ) -> str:
        """Subscriber link (confirm or unsub) for a subscriber code."""
        query = urlencode({"comment_success": action.value, "subcode": subcode.root})
        return f"{page.http_url}?{query}"
