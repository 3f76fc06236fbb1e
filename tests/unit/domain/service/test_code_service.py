"""Unit tests for CodeService."""

import pytest

from commentary.domain.service import CodeService
from commentary.domain.value import (
    ApprovalCode,
    CommentAction,
    CommentScope,
    PageId,
    SubscriberCode,
)
from commentary.persistence.repository.inmemory import InMemoryCommentRepository
from tests.conftest import make_comment
from tests.di.persistence import TEST_PAGE


@pytest.fixture
def repository():
    return InMemoryCommentRepository()


class TestMint:
    def test_approval_code_is_url_safe(self, repository):
        # Act
        code = CodeService(repository).mint_approval_code()

        # Assert
        assert len(code.root) == 43

    def test_codes_are_unique(self, repository):
        # Arrange
        service = CodeService(repository)

        # Act
        codes = {service.mint_approval_code().root for _ in range(50)}

        # Assert
        assert len(codes) == 50

    def test_subscriber_code_is_40_characters(self, repository):
        # Act
        subcode = CodeService(repository).mint_subscriber_code()

        # Assert
        assert len(subcode.root) == 40


@pytest.mark.asyncio
class TestSubscriberCodeFor:
    """Tests for reuse of subscriber codes per email address."""

    async def test_no_email_no_code(self, repository):
        # Act
        subcode = await CodeService(repository).subscriber_code_for("", PageId(1001))

        # Assert
        assert subcode is None

    async def test_reuses_existing_code_on_same_page(self, repository):
        # Arrange
        await repository.save(make_comment(email="jane@example.com", subcode="janecode"))

        # Act
        subcode = await CodeService(repository).subscriber_code_for(
            "jane@example.com", PageId(1001)
        )

        # Assert
        assert subcode == SubscriberCode("janecode")

    async def test_page_scope_mints_new_code_on_other_page(self, repository):
        # Arrange
        await repository.save(make_comment(email="jane@example.com", subcode="janecode"))

        # Act
        subcode = await CodeService(repository, subscriber_scope="page").subscriber_code_for(
            "jane@example.com", PageId(1002)
        )

        # Assert
        assert subcode is not None
        assert subcode.root != "janecode"

    async def test_site_scope_reuses_code_across_pages(self, repository):
        # Arrange
        other_scope = CommentScope(page_id=PageId(1002), field_name="comments")
        await repository.save(
            make_comment(scope=other_scope, email="jane@example.com", subcode="janecode")
        )

        # Act
        subcode = await CodeService(repository, subscriber_scope="site").subscriber_code_for(
            "jane@example.com", PageId(1001)
        )

        # Assert
        assert subcode == SubscriberCode("janecode")


class TestLinks:
    def test_action_url(self):
        # Act
        url = CodeService.action_url(
            TEST_PAGE, "comments", ApprovalCode("abc123"), CommentAction.APPROVE
        )

        # Assert
        assert url == (
            "https://example.com/blog/first-post/"
            "?field=comments&page_id=1001&code=abc123&comment_success=approve"
        )

    def test_subscriber_url(self):
        # Act
        url = CodeService.subscriber_url(
            TEST_PAGE, SubscriberCode("sub123"), CommentAction.UNSUB
        )

        # Assert
        assert url == (
            "https://example.com/blog/first-post/?comment_success=unsub&subcode=sub123"
        )
