"""In-memory vote repository for testing."""

from commentary.domain.model.vote import CommentVote
from commentary.domain.repository.vote import VoteRepository
from commentary.domain.value import CommentId


class InMemoryVoteRepository(VoteRepository):
    """In-memory implementation of VoteRepository for testing."""

    def __init__(self) -> None:
        self._votes: dict[tuple[CommentId, str], CommentVote] = {}

    async def add(self, vote: CommentVote) -> bool:
        key = (vote.comment_id, vote.voter)
        if key in self._votes:
            return False
        self._votes[key] = vote
        return True
