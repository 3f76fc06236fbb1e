"""Unit tests for the moderator use cases."""

from datetime import datetime, timedelta

import pytest

from commentary.application.usecase.comment import (
    ChangeStatusRequest,
    ChangeStatusUseCase,
    DeleteCommentRequest,
    DeleteCommentUseCase,
    MoveCommentRequest,
    MoveCommentUseCase,
    PurgeSpamRequest,
    PurgeSpamUseCase,
)
from commentary.domain.error import DeletionBlockedError
from commentary.domain.repository import CommentRepository
from commentary.domain.value import CommentStatus
from tests.conftest import make_comment
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


@pytest.mark.asyncio
class TestChangeStatusUseCase:
    async def test_feature_comment(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(ChangeStatusUseCase)
        comment = await repository.save(make_comment())

        # Act
        response = await use_case.execute(
            ChangeStatusRequest(
                page_id=1001,
                field_name="comments",
                comment_id=comment.id,
                status="featured",
            )
        )

        # Assert
        assert response.status == "featured"
        assert response.approved is True

    async def test_mark_for_deletion(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(ChangeStatusUseCase)
        comment = await repository.save(make_comment())

        # Act
        response = await use_case.execute(
            ChangeStatusRequest(
                page_id=1001,
                field_name="comments",
                comment_id=comment.id,
                status="delete_pending",
            )
        )

        # Assert
        assert response.status == "delete_pending"
        assert response.approved is False


@pytest.mark.asyncio
class TestDeleteCommentUseCase:
    async def test_delete_leaf(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(DeleteCommentUseCase)
        comment = await repository.save(make_comment())

        # Act
        await use_case.execute(
            DeleteCommentRequest(page_id=1001, field_name="comments", comment_id=comment.id)
        )

        # Assert
        assert await repository.find_by_id(comment.id) is None

    async def test_delete_parent_blocked(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(DeleteCommentUseCase)
        parent = await repository.save(make_comment())
        await repository.save(make_comment(parent_id=parent.id))

        # Act & Assert
        with pytest.raises(DeletionBlockedError):
            await use_case.execute(
                DeleteCommentRequest(
                    page_id=1001, field_name="comments", comment_id=parent.id
                )
            )


@pytest.mark.asyncio
class TestMoveCommentUseCase:
    async def test_move_under_other_root(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(MoveCommentUseCase)
        first = await repository.save(make_comment())
        second = await repository.save(make_comment())

        # Act
        response = await use_case.execute(
            MoveCommentRequest(
                page_id=1001,
                field_name="comments",
                comment_id=second.id,
                parent_id=first.id,
            )
        )

        # Assert
        assert response.parent_id == first.id


@pytest.mark.asyncio
class TestPurgeSpamUseCase:
    async def test_purge(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        use_case = await unit_env.get(PurgeSpamUseCase)
        now = datetime(2026, 10, 18, 12, 0)
        await repository.save(
            make_comment(status=CommentStatus.SPAM, created_at=now - timedelta(days=4))
        )

        # Act
        response = await use_case.execute(
            PurgeSpamRequest(page_id=1001, field_name="comments", now=now)
        )

        # Assert
        assert response.deleted == 1
