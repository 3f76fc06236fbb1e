"""Unit tests for ActionService."""

import asyncio

import pytest

from commentary.domain.model import ActionRequest
from commentary.domain.repository import CommentRepository
from commentary.domain.service import (
    INVALID_CODE_MESSAGE,
    ActionService,
    CommentService,
    SpamFilter,
)
from commentary.domain.value import (
    CommentAction,
    CommentFlag,
    CommentScope,
    CommentStatus,
    PageId,
)
from tests.conftest import TEST_SCOPE, make_comment
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

GUESTBOOK_SCOPE = CommentScope(page_id=PageId(1001), field_name="guestbook")


def link(action: str, code: str = "", **kwargs) -> ActionRequest:
    """Helper to build the parameters of a moderator link."""
    values = {"page_id": 1001, "field_name": "comments", "code": code}
    values.update(kwargs)
    return ActionRequest(action=action, **values)


@pytest.mark.asyncio
class TestModerationLinks:
    """Tests for approve, spam and pending links."""

    async def test_approve_with_code_then_replay_rejected(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(
            make_comment(status=CommentStatus.PENDING, code="approve-1")
        )

        # Act
        first = await service.check_action(link("approve", "approve-1"), TEST_SCOPE)
        replay = await service.check_action(link("approve", "approve-1"), TEST_SCOPE)

        # Assert
        assert first.valid and first.success
        assert first.action == CommentAction.APPROVE
        assert first.comment_id == comment.id
        assert first.message == f"Updated comment {comment.id} to “approve”"
        stored = await repository.find_by_id(comment.id)
        assert stored.status == CommentStatus.APPROVED
        assert stored.code is None

        assert replay.valid
        assert not replay.success
        assert replay.message == INVALID_CODE_MESSAGE

    async def test_unknown_code_looks_like_used_code(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(link("approve", "never-issued"), TEST_SCOPE)

        # Assert
        assert result.valid
        assert not result.success
        assert result.message == INVALID_CODE_MESSAGE

    async def test_marking_approved_comment_as_spam_reports_it(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        spam_filter = await unit_env.get(SpamFilter)
        comment = await repository.save(make_comment(code="spam-1"))

        # Act
        result = await service.check_action(link("spam", "spam-1"), TEST_SCOPE)

        # Assert
        assert result.success
        assert (await repository.find_by_id(comment.id)).status == CommentStatus.SPAM
        assert [c.id for c in spam_filter.false_negatives] == [comment.id]

    async def test_approving_spam_reports_false_positive(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        spam_filter = await unit_env.get(SpamFilter)
        comment = await repository.save(
            make_comment(status=CommentStatus.SPAM, code="ham-1")
        )

        # Act
        result = await service.check_action(link("approve", "ham-1"), TEST_SCOPE)

        # Assert
        assert result.success
        assert [c.id for c in spam_filter.false_positives] == [comment.id]

    async def test_forbidden_transition_keeps_code(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(
            make_comment(status=CommentStatus.DELETE_PENDING, code="gone-1")
        )

        # Act
        result = await service.check_action(link("approve", "gone-1"), TEST_SCOPE)

        # Assert
        assert result.valid
        assert not result.success
        assert "cannot change status" in result.message
        assert (await repository.find_by_id(comment.id)).code is not None

    async def test_concurrent_links_consume_code_once(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(
            make_comment(status=CommentStatus.PENDING, code="race-1")
        )

        # Act
        results = await asyncio.gather(
            service.check_action(link("approve", "race-1"), TEST_SCOPE),
            service.check_action(link("approve", "race-1"), TEST_SCOPE),
            service.check_action(link("spam", "race-1"), TEST_SCOPE),
        )

        # Assert
        assert [r.success for r in results].count(True) == 1
        losers = [r for r in results if not r.success]
        assert all(r.message == INVALID_CODE_MESSAGE for r in losers)
        stored = await repository.find_by_id(comment.id)
        assert stored.code is None

    async def test_link_never_revives_comment_deleted_meanwhile(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        actions = await unit_env.get(ActionService)
        comments = await unit_env.get(CommentService)
        comment = await repository.save(
            make_comment(status=CommentStatus.PENDING, code="late-1")
        )

        # Act
        await asyncio.gather(
            comments.change_status(
                TEST_SCOPE, comment.id, CommentStatus.DELETE_PENDING
            ),
            actions.check_action(link("approve", "late-1"), TEST_SCOPE),
        )

        # Assert
        stored = await repository.find_by_id(comment.id)
        assert stored.status == CommentStatus.DELETE_PENDING

    async def test_wrong_page(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(
            link("approve", "approve-1", page_id=1002), TEST_SCOPE
        )

        # Assert
        assert not result.valid
        assert result.message == "Invalid page specified: 1002"

    async def test_wrong_field(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(
            link("approve", "approve-1", field_name="guestbook"), TEST_SCOPE
        )

        # Assert
        assert not result.valid
        assert result.message == "Incorrect field name: guestbook"

    async def test_missing_code(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(link("approve"), TEST_SCOPE)

        # Assert
        assert not result.valid
        assert result.message == "No approval code provided"

    async def test_unknown_action(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(link("explode", "x"), TEST_SCOPE)

        # Assert
        assert not result.valid
        assert result.action is None
        assert result.message == "Unknown action: explode"

    async def test_no_action_is_not_an_action_request(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(ActionRequest(), TEST_SCOPE)

        # Assert
        assert not result.valid
        assert result.message == ""


@pytest.mark.asyncio
class TestSubscriptionLinks:
    async def test_unsubscribe(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(
            make_comment(
                email="jane@example.com", subcode="janesub", flags=CommentFlag.NOTIFY_REPLY
            )
        )

        # Act
        result = await service.check_action(
            ActionRequest(action="unsub", subcode="janesub"), TEST_SCOPE
        )

        # Assert
        assert result.valid and result.success
        assert "unsubscribed" in result.message
        assert (await repository.find_by_id(comment.id)).flags == CommentFlag.NONE

    async def test_confirm(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(
            make_comment(
                email="jane@example.com", subcode="janesub", flags=CommentFlag.NOTIFY_REPLY
            )
        )

        # Act
        result = await service.check_action(
            ActionRequest(action="confirm", subcode="janesub"), TEST_SCOPE
        )

        # Assert
        assert result.success
        assert result.message == (
            "You have confirmed receipt of notifications from this page."
        )
        stored = await repository.find_by_id(comment.id)
        assert stored.has_flag(CommentFlag.NOTIFY_CONFIRMED)

    async def test_unknown_subcode(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(
            ActionRequest(action="unsub", subcode="nobody"), TEST_SCOPE
        )

        # Assert
        assert result.valid
        assert not result.success
        assert result.message == "Error disabling notifications"

    async def test_empty_subcode(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(
            ActionRequest(action="confirm", subcode="  "), TEST_SCOPE
        )

        # Assert
        assert not result.valid
        assert result.message == "No subscriber code provided"


@pytest.mark.asyncio
class TestVoteLinks:
    async def test_upvote_then_duplicate(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(make_comment())
        request = ActionRequest(action="upvote", comment_id=comment.id, ip="192.0.2.1")

        # Act
        first = await service.check_action(request, TEST_SCOPE)
        second = await service.check_action(request, TEST_SCOPE)

        # Assert
        assert first.success
        assert first.message == f"Recorded upvote for comment {comment.id}"
        assert second.valid
        assert not second.success
        assert second.message == "You have already voted for this comment"
        assert (await repository.find_by_id(comment.id)).upvotes == 1

    async def test_logged_in_voter_identified_by_user(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(make_comment())

        # Act
        await service.check_action(
            ActionRequest(action="downvote", comment_id=comment.id, ip="192.0.2.1", user_id=41),
            TEST_SCOPE,
        )
        second = await service.check_action(
            ActionRequest(action="downvote", comment_id=comment.id, ip="192.0.2.9", user_id=41),
            TEST_SCOPE,
        )

        # Assert
        assert not second.success
        assert (await repository.find_by_id(comment.id)).downvotes == 1

    async def test_votes_disabled_on_field(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(make_comment(scope=GUESTBOOK_SCOPE))

        # Act
        result = await service.check_action(
            ActionRequest(action="upvote", comment_id=comment.id, ip="192.0.2.1"),
            GUESTBOOK_SCOPE,
        )

        # Assert
        assert not result.success
        assert result.message == "Votes are disabled for field guestbook"

    async def test_comment_from_other_field_unknown(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        service = await unit_env.get(ActionService)
        comment = await repository.save(make_comment(scope=GUESTBOOK_SCOPE))

        # Act
        result = await service.check_action(
            ActionRequest(action="upvote", comment_id=comment.id, ip="192.0.2.1"),
            TEST_SCOPE,
        )

        # Assert
        assert not result.success
        assert result.message == "Unknown comment"

    async def test_missing_comment_id(self, unit_env):
        # Arrange
        service = await unit_env.get(ActionService)

        # Act
        result = await service.check_action(ActionRequest(action="upvote"), TEST_SCOPE)

        # Assert
        assert not result.valid
        assert result.message == "No comment specified"
