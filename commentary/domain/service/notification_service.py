"""Notification domain service.

Decides who hears about a comment, builds the mail for each recipient and
queues it in the request outbox. Also owns the subscriber opt-in/opt-out
flags.
"""

import html
import re
from typing import Literal, NamedTuple, Optional

import logfire

from commentary.config import NotificationSettings, SiteSettings
from commentary.domain.error import ConfigurationError
from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.model.notification import Notification
from commentary.domain.model.page import Page
from commentary.domain.repository import (
    CommentRepository,
    PageRepository,
    UserRepository,
)
from commentary.domain.value import (
    CommentAction,
    CommentFlag,
    CommentStatus,
    PageId,
)

from .base import Service
from .code_service import CodeService
from .notification_dispatcher import NotificationOutbox

_SPEC_SEPARATORS = re.compile(r"[\s,]+")
_EMAIL_IN_TEXT = re.compile(r"[^@\s,;:<>\"']+@[^@\s,;:<>\"']+\.[^@\s,;:<>\"']+")

SUBSCRIPTION_FLAGS = CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_ALL


class RecipientRef(NamedTuple):
    """One parsed token of an admin recipient list."""

    kind: Literal["email", "field", "user", "page"]
    target: str
    field_name: str = ""


def parse_recipient_token(token: str) -> RecipientRef:
    """Parse one admin recipient token.

    Recognized forms::

        admin@example.com      literal address
        field:email            field of the commented page
        user:karen             email of a user account
        123:email              field of page 123
        /about/contact/:email  field of the page at that path

    Raises:
        ConfigurationError: If the token matches none of the forms
    """
    if "@" in token and ":" not in token:
        if not _EMAIL_IN_TEXT.fullmatch(token):
            raise ConfigurationError(f"Invalid recipient email: {token}")
        return RecipientRef("email", token.lower())

    source, _, name = token.rpartition(":")
    if not source or not name:
        raise ConfigurationError(f"Unrecognized recipient: {token}")
    if source == "field":
        return RecipientRef("field", name)
    if source == "user":
        return RecipientRef("user", name)
    if source.isdigit() or source.startswith("/"):
        return RecipientRef("page", source, name)
    raise ConfigurationError(f"Unrecognized recipient source: {token}")


def _emails_in(value: str) -> list[str]:
    return [email.lower() for email in _EMAIL_IN_TEXT.findall(value)]


class NotificationService(Service):
    """Domain service for comment notifications."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        page_repository: PageRepository,
        user_repository: UserRepository,
        code_service: CodeService,
        outbox: NotificationOutbox,
        notification_settings: NotificationSettings,
        site_settings: SiteSettings,
    ) -> None:
        """Initialize notification service.

        Args:
            comment_repository: Comment repository (subscriber flags)
            page_repository: Page lookup for recipient specs
            user_repository: User lookup for recipient specs
            code_service: Builds action and subscriber links
            outbox: Holds mail until the request commits
            notification_settings: Opt-in and subscriber code policy
            site_settings: Site name and default sender
        """
        self.comment_repository = comment_repository
        self.page_repository = page_repository
        self.user_repository = user_repository
        self.code_service = code_service
        self.outbox = outbox
        self.settings = notification_settings
        self.site = site_settings

    # Recipients

    async def resolve_admin_recipients(
        self, field: CommentField, page: Page
    ) -> list[str]:
        """Resolve the field's admin recipient list to email addresses.

        Malformed or unresolvable tokens are logged and skipped, so a bad
        list never fails a submission.
        """
        recipients: list[str] = []
        for token in _SPEC_SEPARATORS.split(field.notification_email.strip()):
            if not token:
                continue
            try:
                ref = parse_recipient_token(token)
            except ConfigurationError as e:
                logfire.warn(
                    "Skipping malformed admin recipient", field=field.name, error=str(e)
                )
                continue

            for email in await self._resolve_ref(ref, page):
                if email not in recipients:
                    recipients.append(email)
        return recipients

    async def _resolve_ref(self, ref: RecipientRef, page: Page) -> list[str]:
        if ref.kind == "email":
            return [ref.target]
        if ref.kind == "field":
            return _emails_in(page.value(ref.target))
        if ref.kind == "user":
            user = await self.user_repository.find_by_name(ref.target)
            if user is None or not user.email:
                logfire.warn("Admin recipient user not found", user=ref.target)
                return []
            return [user.email.lower()]

        if ref.target.isdigit():
            source = await self.page_repository.find_by_id(PageId(int(ref.target)))
        else:
            source = await self.page_repository.find_by_path(ref.target)
        if source is None:
            logfire.warn("Admin recipient page not found", page=ref.target)
            return []
        return _emails_in(source.value(ref.field_name))

    def subscriber_recipients(
        self, collection: CommentCollection, comment: Comment
    ) -> list[Comment]:
        """Earlier comments whose authors should hear about ``comment``.

        Candidates are ancestors subscribed to replies and approved comments
        subscribed to the whole page. One comment per distinct email is
        returned, never the new comment's own author, and with double opt-in
        only confirmed subscribers.
        """
        candidates = [
            a for a in collection.ancestors(comment) if a.flags & SUBSCRIPTION_FLAGS
        ]
        candidates += [
            c for c in collection.approved() if c.has_flag(CommentFlag.NOTIFY_ALL)
        ]

        seen = {comment.email} if comment.email else set()
        recipients: list[Comment] = []
        for candidate in candidates:
            if candidate.id == comment.id or not candidate.is_approved():
                continue
            if not candidate.email or candidate.subcode is None:
                continue
            if self.settings.double_opt_in and not candidate.has_flag(
                CommentFlag.NOTIFY_CONFIRMED
            ):
                continue
            if candidate.email in seen:
                continue
            seen.add(candidate.email)
            recipients.append(candidate)
        return recipients

    # Payloads

    def from_email(self, field: CommentField) -> str:
        return field.from_email or self.site.from_email

    def admin_notification(
        self, comment: Comment, field: CommentField, page: Page, recipient: str
    ) -> Notification:
        """Build the moderator email for a new comment.

        The status line carries the one action that makes sense next:
        approve a pending or spam comment, or mark an approved one as spam.
        """
        if comment.status == CommentStatus.PENDING:
            status = "Pending Approval"
            action, action_label = CommentAction.APPROVE, "Approve Now"
        elif comment.status == CommentStatus.SPAM:
            status = (
                "SPAM - will be deleted automatically after "
                f"{field.delete_spam_after_days} days"
            )
            action, action_label = CommentAction.APPROVE, "Not SPAM: Approve Now"
        elif comment.is_approved():
            status = "Approved"
            action, action_label = CommentAction.SPAM, "Mark as SPAM"
        else:
            status = "Unknown"
            action, action_label = None, ""

        action_url = ""
        if action is not None and comment.code is not None:
            action_url = self.code_service.action_url(
                page, field.name, comment.code, action
            )

        rows: list[tuple[str, str]] = [
            ("Page", page.http_url),
            ("From", comment.cite),
            ("Email", comment.email),
            ("Website", comment.website),
        ]
        if comment.stars:
            rows.append(("Stars", str(comment.stars)))
        rows.append(("Status", status))
        if action_url:
            rows.append(("Action", f"{action_label}: {action_url}"))
        rows.append(("Text", comment.text))

        body_text = "".join(f"{label}: {value}\n" for label, value in rows)

        html_rows = []
        for label, value in rows:
            if label == "Action":
                continue
            cell = html.escape(value)
            if label == "Status" and action_url:
                cell += f" (<a href='{html.escape(action_url)}'>{action_label}</a>)"
            elif label == "Page":
                cell = f"<a href='{cell}'>{html.escape(page.title or page.path)}</a>"
            html_rows.append(f"<tr><th>{label}</th><td>{cell}</td></tr>")
        body_html = (
            "<html><body><table>\n" + "\n".join(html_rows) + "\n</table></body></html>"
        )

        return Notification(
            recipient=recipient,
            subject=f"Comment posted to: {self.site.name} - {page.title or page.path}",
            body_text=body_text,
            body_html=body_html,
            from_email=self.from_email(field),
        )

    def subscriber_notification(
        self, comment: Comment, field: CommentField, page: Page, subscriber: Comment
    ) -> Notification:
        """Build the reply notification for one subscriber."""
        title = page.title or page.path
        url = comment.url(page.http_url)
        unsubscribe_url = None
        if subscriber.subcode is not None:
            unsubscribe_url = self.code_service.subscriber_url(
                page, subscriber.subcode, CommentAction.UNSUB
            )

        lines = [f"Posted at: {title}", f"Posted by: {comment.cite}"]
        if field.use_notify_text:
            lines.append(f"{comment.text}\n")
        lines.append(f"View or reply: {url}\n")
        lines.append("---")
        if unsubscribe_url:
            lines.append(f"Unsubscribe from these notifications: {unsubscribe_url}")
        body_text = "\n".join(lines) + "\n"

        text_html = ""
        if field.use_notify_text:
            text_html = "<div><p>{}</p></div>".format(
                html.escape(comment.text).replace("\n", "<br />")
            )
        unsub_html = ""
        if unsubscribe_url:
            unsub_html = (
                f"<p><small><a href='{html.escape(unsubscribe_url)}'>"
                "Unsubscribe from these notifications</a></small></p>"
            )
        body_html = (
            f"<html><body><p><em>Posted at <a href='{html.escape(url)}'>"
            f"{html.escape(title)}</a> by {html.escape(comment.cite)}</em></p>"
            f"{text_html}<p><a href='{html.escape(url)}'>View or reply</a></p>"
            f"<hr />{unsub_html}</body></html>"
        )

        return Notification(
            recipient=subscriber.email,
            subject=f"New comment posted: {title}",
            body_text=body_text,
            body_html=body_html,
            unsubscribe_url=unsubscribe_url,
            from_email=self.from_email(field),
        )

    def confirmation_notification(
        self, comment: Comment, field: CommentField, page: Page
    ) -> Notification:
        """Build the double opt-in email for a new subscriber."""
        if comment.subcode is None:
            raise ValueError(f"Comment {comment.id} has no subscriber code")
        title = page.title or page.path
        confirm_url = self.code_service.subscriber_url(
            page, comment.subcode, CommentAction.CONFIRM
        )
        message = (
            "You requested to be notified of replies to your comment at {}. "
            "Please confirm this by clicking the link below. If you did not "
            "request this then please ignore this email."
        )
        body_text = (
            message.format(self.site.name)
            + f"\n\nConfirm Notifications: {confirm_url}\n"
        )
        body_html = (
            "<p>"
            + message.format(
                f"<a href='{html.escape(page.http_url)}'>{html.escape(self.site.name)}</a>"
            )
            + f"</p><p><strong><a href='{html.escape(confirm_url)}'>"
            "Confirm Notifications</a></strong></p>"
        )
        return Notification(
            recipient=comment.email,
            subject=f"Please confirm notification - {title}",
            body_text=body_text,
            body_html=body_html,
            from_email=self.from_email(field),
        )

    # Submission flow

    async def prepare_flags(
        self, collection: CommentCollection, comment: Comment, field: CommentField
    ) -> Comment:
        """Settle the notification flags of a comment about to be saved.

        Requested subscriptions are narrowed to what the field allows. An
        address that already confirmed carries the confirmation over. A
        comment that is not approved yet but has subscribers to notify is
        marked NOTIFY_QUEUED so the mail goes out on approval.
        """
        flags = field.allowed_flags(CommentFlag(comment.flags & SUBSCRIPTION_FLAGS))
        if flags and comment.email and await self._is_confirmed(comment):
            flags |= CommentFlag.NOTIFY_CONFIRMED
        if not comment.is_approved() and self.subscriber_recipients(collection, comment):
            flags |= CommentFlag.NOTIFY_QUEUED
        return comment.with_flags(flags)

    async def _is_confirmed(self, comment: Comment) -> bool:
        page_id = (
            comment.scope.page_id if self.settings.subscriber_scope == "page" else None
        )
        earlier = await self.comment_repository.find_by_email(comment.email, page_id)
        return any(
            c.id != comment.id and c.has_flag(CommentFlag.NOTIFY_CONFIRMED)
            for c in earlier
        )

    async def notify_submitted(
        self,
        collection: CommentCollection,
        comment: Comment,
        field: CommentField,
        page: Page,
    ) -> list[Notification]:
        """Queue the mail that follows a successful submission.

        Must only be called once the comment is saved. The mail goes out when
        the caller releases the outbox after commit.

        Returns:
            The notifications added to the outbox
        """
        with logfire.span(
            "notification_service.notify_submitted",
            comment_id=comment.id,
            status=comment.status.name,
            field=field.name,
        ):
            notifications: list[Notification] = []

            if comment.status == CommentStatus.SPAM and not field.notify_spam_to_admin:
                logfire.info("Admin notification skipped for spam", comment_id=comment.id)
            else:
                for recipient in await self.resolve_admin_recipients(field, page):
                    notifications.append(
                        self.admin_notification(comment, field, page, recipient)
                    )

            if comment.is_approved():
                for subscriber in self.subscriber_recipients(collection, comment):
                    notifications.append(
                        self.subscriber_notification(comment, field, page, subscriber)
                    )

            if (
                self.settings.double_opt_in
                and comment.wants_notifications()
                and not comment.has_flag(CommentFlag.NOTIFY_CONFIRMED)
                and comment.status != CommentStatus.SPAM
                and comment.subcode is not None
            ):
                notifications.append(
                    self.confirmation_notification(comment, field, page)
                )

            for notification in notifications:
                self.outbox.add(notification)

            logfire.info(
                "Notifications queued",
                comment_id=comment.id,
                count=len(notifications),
            )
            return notifications

    async def notify_approved(
        self,
        collection: CommentCollection,
        comment: Comment,
        field: CommentField,
        page: Page,
    ) -> list[Notification]:
        """Flush subscriber notifications held back until approval."""
        if not comment.is_approved() or not comment.has_flag(CommentFlag.NOTIFY_QUEUED):
            return []

        with logfire.span(
            "notification_service.notify_approved", comment_id=comment.id
        ):
            await self.comment_repository.set_flags(
                comment.id, CommentFlag(comment.flags & ~CommentFlag.NOTIFY_QUEUED)
            )
            notifications = [
                self.subscriber_notification(comment, field, page, subscriber)
                for subscriber in self.subscriber_recipients(collection, comment)
            ]
            for notification in notifications:
                self.outbox.add(notification)
            logfire.info(
                "Held notifications queued",
                comment_id=comment.id,
                count=len(notifications),
            )
            return notifications

    # Subscriptions

    async def modify_notifications(
        self,
        page_id: PageId,
        subcode: str,
        enable: bool,
        scope_all_pages: bool = False,
    ) -> bool:
        """Confirm or cancel the subscriptions of the address behind a subcode.

        Enabling sets NOTIFY_CONFIRMED on every comment from the address.
        Disabling clears NOTIFY_ALL where set, otherwise NOTIFY_REPLY.

        Args:
            page_id: Page the link was followed on
            subcode: Subscriber code from the link
            enable: True to confirm, False to unsubscribe
            scope_all_pages: Apply to the address's comments on every page

        Returns:
            True if at least one comment changed
        """
        with logfire.span(
            "notification_service.modify_notifications",
            page_id=page_id,
            enable=enable,
            scope_all_pages=scope_all_pages,
        ):
            lookup_page: Optional[PageId] = (
                page_id if self.settings.subscriber_scope == "page" else None
            )
            email = await self.comment_repository.find_email_by_subcode(
                lookup_page, subcode
            )
            if not email:
                logfire.warn("Unknown subscriber code", page_id=page_id)
                return False

            comments = await self.comment_repository.find_by_email(
                email, None if scope_all_pages else page_id
            )
            changed = 0
            for comment in comments:
                flags = comment.flags
                if enable:
                    updated = flags | CommentFlag.NOTIFY_CONFIRMED
                elif flags & CommentFlag.NOTIFY_ALL:
                    updated = flags & ~CommentFlag.NOTIFY_ALL
                elif flags & CommentFlag.NOTIFY_REPLY:
                    updated = flags & ~CommentFlag.NOTIFY_REPLY
                else:
                    continue
                if updated == flags:
                    continue
                if await self.comment_repository.set_flags(
                    comment.id, CommentFlag(updated)
                ):
                    changed += 1

            if changed:
                logfire.info(
                    "Confirmed notifications" if enable else "Unsubscribed",
                    page_id=page_id,
                    comments=changed,
                )
            return changed > 0
