"""Comment collection.

All comments for one (page, field) pair, as loaded for a single request.
The collection is not persisted itself; comments are saved one at a time
through the comment repository.
"""

from dataclasses import dataclass, field
from typing import Iterator

from commentary.domain.model.comment import Comment
from commentary.domain.value import CommentId, CommentScope


@dataclass
class CommentCollection:
    """Ordered comments of one page field, plus pagination metadata.

    ``total`` counts comments across all pages of a paginated load and may
    exceed the number of loaded items. Tree queries (children, ancestors,
    depth) scan the loaded comments once per call.
    """

    scope: CommentScope
    comments: list[Comment] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0

    def __iter__(self) -> Iterator[Comment]:
        return iter(self.comments)

    def __len__(self) -> int:
        return len(self.comments)

    def get(self, comment_id: CommentId) -> Comment | None:
        """Find a loaded comment by id."""
        if not comment_id:
            return None
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None

    def add(self, comment: Comment) -> None:
        """Append a comment belonging to this collection's scope."""
        if comment.scope != self.scope:
            raise ValueError(
                f"Comment scope {comment.scope} does not match collection {self.scope}"
            )
        self.comments.append(comment)

    def replace(self, comment: Comment) -> None:
        """Swap in an updated copy of an already loaded comment."""
        for index, existing in enumerate(self.comments):
            if existing.id == comment.id:
                self.comments[index] = comment
                return
        self.add(comment)

    def remove(self, comment_id: CommentId) -> Comment | None:
        for index, existing in enumerate(self.comments):
            if existing.id == comment_id:
                return self.comments.pop(index)
        return None

    def parent(self, comment: Comment) -> Comment | None:
        return self.get(comment.parent_id)

    def children(self, comment: Comment) -> list[Comment]:
        """Direct replies to ``comment``, in collection order."""
        if comment.is_new():
            return []
        return [c for c in self.comments if c.parent_id == comment.id]

    def ancestors(self, comment: Comment) -> list[Comment]:
        """Parent chain of ``comment``, nearest first.

        Stops early on a parent that is missing from the collection, and on
        a repeated id so corrupt stored data cannot loop forever.
        """
        ancestors: list[Comment] = []
        seen = {comment.id}
        current = self.parent(comment)
        while current is not None and current.id not in seen:
            ancestors.append(current)
            seen.add(current.id)
            current = self.parent(current)
        return ancestors

    def depth(self, comment: Comment) -> int:
        """Number of ancestors (0 for a root comment)."""
        return len(self.ancestors(comment))

    def descendants(self, comment: Comment) -> list[Comment]:
        """All comments in the subtree below ``comment`` (breadth first)."""
        found: list[Comment] = []
        seen = {comment.id}
        queue = self.children(comment)
        while queue:
            current = queue.pop(0)
            if current.id in seen:
                continue
            seen.add(current.id)
            found.append(current)
            queue.extend(self.children(current))
        return found

    def is_descendant(self, candidate_id: CommentId, comment: Comment) -> bool:
        """True if ``candidate_id`` is somewhere in the subtree of ``comment``."""
        return any(c.id == candidate_id for c in self.descendants(comment))

    def height(self, comment: Comment) -> int:
        """Levels of replies below ``comment`` (0 when it has none)."""
        height = 0
        seen = {comment.id}
        level = [comment]
        while True:
            below = [
                child
                for parent in level
                for child in self.children(parent)
                if child.id not in seen
            ]
            if not below:
                return height
            seen.update(child.id for child in below)
            height += 1
            level = below

    def approved(self) -> list[Comment]:
        return [c for c in self.comments if c.is_approved()]

    def stars(self, allow_partial: bool = True) -> tuple[float | int | None, int]:
        """Average star rating and the number of ratings it is based on.

        Comments without a rating are ignored. The average is None when
        nobody has rated yet.
        """
        ratings = [c.stars for c in self.comments if c.stars]
        if not ratings:
            return None, 0
        average = sum(ratings) / len(ratings)
        if allow_partial:
            return round(average, 2), len(ratings)
        return int(round(average)), len(ratings)

    def get_total(self) -> int:
        """Total across pagination, falling back to the loaded count."""
        return self.total or len(self.comments)

    def get_limit(self) -> int:
        """Page size of a paginated load, falling back to the loaded count."""
        return self.limit or len(self.comments)
