"""Unit tests for NotificationService."""

import pytest

from commentary.adapter.mail import MockMailTransport
from commentary.config import NotificationSettings, SiteSettings
from commentary.domain.error import ConfigurationError
from commentary.domain.model import Comment, CommentField, Page
from commentary.domain.service import (
    CodeService,
    NotificationDispatcher,
    NotificationOutbox,
    NotificationService,
    RecipientRef,
    parse_recipient_token,
)
from commentary.domain.value import CommentFlag, CommentId, CommentStatus, PageId
from commentary.persistence.repository.inmemory import (
    InMemoryCommentRepository,
    InMemoryPageRepository,
    InMemoryUserRepository,
)
from tests.conftest import TEST_SCOPE, deliver, make_collection, make_comment
from tests.di.persistence import ADMIN_EMAIL, EDITOR, THREADED_FIELD

SUBSCRIBED = CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_CONFIRMED
PAGE_WIDE = CommentFlag.NOTIFY_ALL | CommentFlag.NOTIFY_CONFIRMED

HOME_PAGE = Page(
    id=PageId(1001),
    path="/blog/first-post/",
    title="First Post",
    http_url="https://example.com/blog/first-post/",
    values={"email": "Owner <owner@example.com>"},
)
CONTACT_PAGE = Page(
    id=PageId(1002),
    path="/contact/",
    title="Contact",
    http_url="https://example.com/contact/",
    values={"contact": "contact@example.com, sales@example.com"},
)


def build_service(
    comment_repository: InMemoryCommentRepository,
    transport: MockMailTransport,
    double_opt_in: bool = True,
) -> NotificationService:
    pages = InMemoryPageRepository()
    pages.add(HOME_PAGE)
    pages.add(CONTACT_PAGE)
    users = InMemoryUserRepository()
    users.add(EDITOR)
    return NotificationService(
        comment_repository=comment_repository,
        page_repository=pages,
        user_repository=users,
        code_service=CodeService(comment_repository),
        outbox=NotificationOutbox(
            NotificationDispatcher(transport, retry_wait_seconds=0)
        ),
        notification_settings=NotificationSettings(double_opt_in=double_opt_in),
        site_settings=SiteSettings(name="Example Blog", from_email="blog@example.com"),
    )


@pytest.fixture
def repository():
    return InMemoryCommentRepository()


@pytest.fixture
def transport():
    return MockMailTransport()


@pytest.fixture
def service(repository, transport):
    return build_service(repository, transport)


class TestParseRecipientToken:
    """Tests for admin recipient list tokens."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("Admin@Example.com", RecipientRef("email", "admin@example.com")),
            ("field:email", RecipientRef("field", "email")),
            ("user:editor", RecipientRef("user", "editor")),
            ("1002:contact", RecipientRef("page", "1002", "contact")),
            ("/contact/:contact", RecipientRef("page", "/contact/", "contact")),
        ],
    )
    def test_recognized_forms(self, token, expected):
        # Assert
        assert parse_recipient_token(token) == expected

    @pytest.mark.parametrize("token", ["bogus", "bad@", "group:admins", ":email"])
    def test_malformed(self, token):
        # Act & Assert
        with pytest.raises(ConfigurationError):
            parse_recipient_token(token)


@pytest.mark.asyncio
class TestResolveAdminRecipients:
    async def test_mixed_spec_resolves_in_order_without_duplicates(self, service):
        # Arrange
        field = CommentField(
            name="comments",
            notification_email=(
                "admin@example.com, user:editor field:email "
                "1002:contact bogus ADMIN@example.com"
            ),
        )

        # Act
        recipients = await service.resolve_admin_recipients(field, HOME_PAGE)

        # Assert
        assert recipients == [
            "admin@example.com",
            "editor@example.com",
            "owner@example.com",
            "contact@example.com",
            "sales@example.com",
        ]

    async def test_unknown_user_and_page_are_skipped(self, service):
        # Arrange
        field = CommentField(
            name="comments",
            notification_email="user:nobody /missing/:email admin@example.com",
        )

        # Act
        recipients = await service.resolve_admin_recipients(field, HOME_PAGE)

        # Assert
        assert recipients == ["admin@example.com"]

    async def test_page_path_lookup(self, service):
        # Arrange
        field = CommentField(name="comments", notification_email="/contact/:contact")

        # Act
        recipients = await service.resolve_admin_recipients(field, HOME_PAGE)

        # Assert
        assert recipients == ["contact@example.com", "sales@example.com"]


class TestSubscriberRecipients:
    """Tests for who hears about a new comment."""

    @pytest.fixture
    def thread(self):
        return make_collection(
            make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED),
            make_comment(
                2, parent_id=1, email="b@example.com", subcode="subb", flags=PAGE_WIDE
            ),
            make_comment(
                3, email="c@example.com", subcode="subc", flags=CommentFlag.NOTIFY_ALL
            ),
            make_comment(4, email="a@example.com", subcode="suba", flags=PAGE_WIDE),
            make_comment(
                5,
                email="d@example.com",
                subcode="subd",
                flags=PAGE_WIDE,
                status=CommentStatus.PENDING,
            ),
        )

    def reply(self, parent_id: int, email: str) -> Comment:
        return Comment(
            scope=TEST_SCOPE,
            parent_id=CommentId(parent_id),
            email=email,
            text="A reply",
            status=CommentStatus.APPROVED,
        )

    def test_confirmed_subscribers_deduplicated_without_author(self, service, thread):
        """b wrote the reply, c never confirmed, d is not approved, a appears twice."""
        # Act
        recipients = service.subscriber_recipients(thread, self.reply(2, "b@example.com"))

        # Assert
        assert [c.id for c in recipients] == [1]

    def test_without_double_opt_in_unconfirmed_subscribers_included(
        self, repository, transport, thread
    ):
        # Arrange
        service = build_service(repository, transport, double_opt_in=False)

        # Act
        recipients = service.subscriber_recipients(thread, self.reply(2, "b@example.com"))

        # Assert
        assert [c.id for c in recipients] == [1, 3]

    def test_reply_subscription_only_covers_own_thread(self, service):
        # Arrange
        collection = make_collection(
            make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED),
            make_comment(2),
        )

        # Act
        recipients = service.subscriber_recipients(
            collection, self.reply(2, "e@example.com")
        )

        # Assert
        assert recipients == []


@pytest.mark.asyncio
class TestPrepareFlags:
    async def test_not_allowed_subscription_is_dropped(self, service):
        # Arrange
        field = CommentField(name="comments", use_notify=CommentFlag.NOTIFY_REPLY)
        comment = Comment(scope=TEST_SCOPE, text="hi", flags=CommentFlag.NOTIFY_ALL)

        # Act
        prepared = await service.prepare_flags(make_collection(), comment, field)

        # Assert
        assert prepared.flags == CommentFlag.NONE

    async def test_confirmation_carried_over_from_same_address(
        self, service, repository
    ):
        # Arrange
        await repository.save(
            make_comment(email="jane@example.com", subcode="jane", flags=SUBSCRIBED)
        )
        comment = Comment(
            scope=TEST_SCOPE,
            text="hi",
            email="jane@example.com",
            flags=CommentFlag.NOTIFY_REPLY,
        )

        # Act
        prepared = await service.prepare_flags(make_collection(), comment, THREADED_FIELD)

        # Assert
        assert prepared.has_flag(CommentFlag.NOTIFY_CONFIRMED)

    async def test_pending_reply_with_subscribers_is_queued(self, service):
        # Arrange
        collection = make_collection(
            make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        )
        comment = Comment(
            scope=TEST_SCOPE, parent_id=CommentId(1), text="hi", email="z@example.com"
        )

        # Act
        prepared = await service.prepare_flags(collection, comment, THREADED_FIELD)

        # Assert
        assert prepared.has_flag(CommentFlag.NOTIFY_QUEUED)

    async def test_approved_reply_is_not_queued(self, service):
        # Arrange
        collection = make_collection(
            make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        )
        comment = Comment(
            scope=TEST_SCOPE,
            parent_id=CommentId(1),
            text="hi",
            status=CommentStatus.APPROVED,
        )

        # Act
        prepared = await service.prepare_flags(collection, comment, THREADED_FIELD)

        # Assert
        assert not prepared.has_flag(CommentFlag.NOTIFY_QUEUED)


@pytest.mark.asyncio
class TestNotifySubmitted:
    """Tests for the mail that follows a submission."""

    async def test_pending_comment_notifies_admin_with_approve_link(
        self, service, transport
    ):
        # Arrange
        comment = make_comment(
            7, status=CommentStatus.PENDING, code="approve7", cite="Jane"
        )

        # Act
        notifications = await service.notify_submitted(
            make_collection(comment), comment, THREADED_FIELD, HOME_PAGE
        )
        await deliver(service.outbox)

        # Assert
        assert [n.recipient for n in notifications] == [ADMIN_EMAIL]
        sent = transport.sent_to(ADMIN_EMAIL)[0]
        assert sent.subject == "Comment posted to: Example Blog - First Post"
        assert "Status: Pending Approval" in sent.body_text
        assert "code=approve7&comment_success=approve" in sent.body_text
        assert sent.from_email == "blog@example.com"

    async def test_spam_not_sent_to_admin_by_default(self, service, transport):
        # Arrange
        comment = make_comment(7, status=CommentStatus.SPAM, code="spam7")

        # Act
        notifications = await service.notify_submitted(
            make_collection(comment), comment, THREADED_FIELD, HOME_PAGE
        )

        # Assert
        assert notifications == []

    async def test_spam_sent_to_admin_when_enabled(self, service):
        # Arrange
        field = THREADED_FIELD.model_copy(update={"notify_spam_to_admin": True})
        comment = make_comment(7, status=CommentStatus.SPAM, code="spam7")

        # Act
        notifications = await service.notify_submitted(
            make_collection(comment), comment, field, HOME_PAGE
        )

        # Assert
        assert len(notifications) == 1
        assert "SPAM - will be deleted automatically after 3 days" in (
            notifications[0].body_text
        )
        assert "Not SPAM: Approve Now" in notifications[0].body_text

    async def test_approved_reply_notifies_subscriber_with_unsubscribe_link(
        self, service
    ):
        # Arrange
        parent = make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        reply = make_comment(2, parent_id=1, email="b@example.com", text="Thanks!")
        field = THREADED_FIELD.model_copy(update={"notification_email": ""})

        # Act
        notifications = await service.notify_submitted(
            make_collection(parent, reply), reply, field, HOME_PAGE
        )

        # Assert
        assert len(notifications) == 1
        mail = notifications[0]
        assert mail.recipient == "a@example.com"
        assert mail.subject == "New comment posted: First Post"
        assert "Thanks!" in mail.body_text
        assert "#Comment2" in mail.body_text
        assert mail.unsubscribe_url == (
            "https://example.com/blog/first-post/?comment_success=unsub&subcode=suba"
        )

    async def test_comment_text_left_out_when_disabled(self, service):
        # Arrange
        parent = make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        reply = make_comment(2, parent_id=1, email="b@example.com", text="Secret words")
        field = THREADED_FIELD.model_copy(
            update={"notification_email": "", "use_notify_text": False}
        )

        # Act
        notifications = await service.notify_submitted(
            make_collection(parent, reply), reply, field, HOME_PAGE
        )

        # Assert
        assert "Secret words" not in notifications[0].body_text
        assert "Secret words" not in notifications[0].body_html

    async def test_new_subscriber_gets_confirmation(self, service):
        # Arrange
        comment = make_comment(
            3,
            status=CommentStatus.PENDING,
            email="new@example.com",
            subcode="newsub",
            flags=CommentFlag.NOTIFY_REPLY,
        )
        field = THREADED_FIELD.model_copy(update={"notification_email": ""})

        # Act
        notifications = await service.notify_submitted(
            make_collection(comment), comment, field, HOME_PAGE
        )

        # Assert
        assert len(notifications) == 1
        assert notifications[0].recipient == "new@example.com"
        assert notifications[0].subject == "Please confirm notification - First Post"
        assert "comment_success=confirm&subcode=newsub" in notifications[0].body_text


@pytest.mark.asyncio
class TestNotifyApproved:
    async def test_queued_notifications_flushed_once(self, service, repository):
        # Arrange
        parent = await repository.save(
            make_comment(email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        )
        reply = await repository.save(
            make_comment(
                parent_id=parent.id,
                email="b@example.com",
                flags=CommentFlag.NOTIFY_QUEUED,
            )
        )
        collection = await repository.load(TEST_SCOPE)

        # Act
        notifications = await service.notify_approved(
            collection, reply, THREADED_FIELD, HOME_PAGE
        )

        # Assert
        assert [n.recipient for n in notifications] == ["a@example.com"]
        stored = await repository.find_by_id(reply.id)
        assert not stored.has_flag(CommentFlag.NOTIFY_QUEUED)

    async def test_nothing_queued_nothing_sent(self, service):
        # Arrange
        parent = make_comment(1, email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        reply = make_comment(2, parent_id=1)

        # Act
        notifications = await service.notify_approved(
            make_collection(parent, reply), reply, THREADED_FIELD, HOME_PAGE
        )

        # Assert
        assert notifications == []


@pytest.mark.asyncio
class TestModifyNotifications:
    """Tests for confirm and unsubscribe."""

    async def test_confirm_marks_every_comment_of_address(self, service, repository):
        # Arrange
        first = await repository.save(
            make_comment(email="a@example.com", subcode="suba", flags=CommentFlag.NOTIFY_REPLY)
        )
        second = await repository.save(
            make_comment(email="a@example.com", subcode="suba", flags=CommentFlag.NOTIFY_ALL)
        )

        # Act
        changed = await service.modify_notifications(PageId(1001), "suba", enable=True)

        # Assert
        assert changed
        for comment_id in (first.id, second.id):
            stored = await repository.find_by_id(comment_id)
            assert stored.has_flag(CommentFlag.NOTIFY_CONFIRMED)

    async def test_confirm_twice_reports_no_change(self, service, repository):
        # Arrange
        await repository.save(
            make_comment(email="a@example.com", subcode="suba", flags=SUBSCRIBED)
        )

        # Act
        changed = await service.modify_notifications(PageId(1001), "suba", enable=True)

        # Assert
        assert not changed

    async def test_unsubscribe_drops_page_wide_before_reply(self, service, repository):
        # Arrange
        both = await repository.save(
            make_comment(
                email="a@example.com",
                subcode="suba",
                flags=CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_ALL,
            )
        )
        reply_only = await repository.save(
            make_comment(email="a@example.com", subcode="suba", flags=CommentFlag.NOTIFY_REPLY)
        )

        # Act
        changed = await service.modify_notifications(PageId(1001), "suba", enable=False)

        # Assert
        assert changed
        assert (await repository.find_by_id(both.id)).flags == CommentFlag.NOTIFY_REPLY
        assert (await repository.find_by_id(reply_only.id)).flags == CommentFlag.NONE

    async def test_repeat_unsubscribe_is_a_no_op(self, service, repository):
        """Each comment loses its one flag; a second call finds nothing to clear."""
        # Arrange
        page_wide = await repository.save(
            make_comment(email="a@example.com", subcode="XYZ", flags=CommentFlag.NOTIFY_ALL)
        )
        replies = await repository.save(
            make_comment(email="a@example.com", subcode="XYZ", flags=CommentFlag.NOTIFY_REPLY)
        )

        # Act
        first = await service.modify_notifications(PageId(1001), "XYZ", enable=False)
        second = await service.modify_notifications(PageId(1001), "XYZ", enable=False)

        # Assert
        assert first is True
        assert second is False
        assert (await repository.find_by_id(page_wide.id)).flags == CommentFlag.NONE
        assert (await repository.find_by_id(replies.id)).flags == CommentFlag.NONE

    async def test_unknown_subcode(self, service):
        # Act
        changed = await service.modify_notifications(PageId(1001), "nobody", enable=False)

        # Assert
        assert not changed
