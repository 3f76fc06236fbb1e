"""Thread integrity domain service."""

import logfire

from commentary.domain.error import CycleError, OwnParentError, ThreadingDisabledError
from commentary.domain.model.collection import CommentCollection
from commentary.domain.model.comment import Comment
from commentary.domain.model.field import CommentField
from commentary.domain.value import ROOT_PARENT_ID, CommentId, CommentStatus

from .base import Service


class ThreadService(Service):
    """Domain service for reply threading.

    Threading is validated against the collection the comment belongs to.
    Nothing here touches storage, so the same checks can be re-run on a
    freshly loaded collection right before a save.
    """

    def assign_parent(
        self,
        collection: CommentCollection,
        comment: Comment,
        requested_parent_id: CommentId,
        field: CommentField,
    ) -> CommentId:
        """Resolve the parent a comment will actually be stored under.

        Args:
            collection: Comments of the field the comment belongs to
            comment: The comment being placed (new or existing)
            requested_parent_id: Parent asked for, 0 for a root comment
            field: Field configuration (``max_depth``)

        Returns:
            The effective parent id. A parent missing from the collection
            resolves to root. A parent too deep to take the comment (and the
            replies below it) without exceeding ``max_depth`` resolves to its
            nearest ancestor with room.

        Raises:
            OwnParentError: If the comment is asked to be its own parent
            ThreadingDisabledError: If the field does not allow replies
            CycleError: If the parent is inside the comment's own subtree
        """
        if requested_parent_id == ROOT_PARENT_ID:
            return ROOT_PARENT_ID

        with logfire.span(
            "thread_service.assign_parent",
            comment_id=comment.id,
            requested_parent_id=requested_parent_id,
            max_depth=field.max_depth,
        ):
            if not comment.is_new() and requested_parent_id == comment.id:
                raise OwnParentError(comment.id)

            if not field.allows_threading():
                raise ThreadingDisabledError(field.name)

            parent = collection.get(requested_parent_id)
            if parent is None:
                logfire.warn(
                    "Requested parent not found, using root",
                    requested_parent_id=requested_parent_id,
                    scope=str(collection.scope),
                )
                return ROOT_PARENT_ID

            if not comment.is_new() and collection.is_descendant(parent.id, comment):
                logfire.warn(
                    "Rejected parent inside own subtree",
                    comment_id=comment.id,
                    parent_id=parent.id,
                )
                raise CycleError(comment.id, parent.id)

            # Walk up until the comment and its whole subtree fit under max_depth
            height = collection.height(comment)
            resolved: Comment | None = parent
            while (
                resolved is not None
                and collection.depth(resolved) + 1 + height > field.max_depth
            ):
                resolved = collection.parent(resolved)

            if resolved is None:
                parent_id = ROOT_PARENT_ID
            else:
                parent_id = resolved.id

            if parent_id != requested_parent_id:
                logfire.info(
                    "Reply moved up to fit max depth",
                    requested_parent_id=requested_parent_id,
                    parent_id=parent_id,
                )
            return parent_id

    def can_delete(self, collection: CommentCollection, comment: Comment) -> bool:
        """Check the deletion guard.

        A comment may be physically deleted only when none of its direct
        replies is still live (every child is at least DELETE_PENDING).
        """
        return all(
            child.status >= CommentStatus.DELETE_PENDING
            for child in collection.children(comment)
        )
