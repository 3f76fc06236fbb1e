"""PostgreSQL implementation of Vote repository."""

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from commentary.domain.model import CommentVote
from commentary.domain.repository import VoteRepository
from commentary.persistence.mappers import vote_to_dict
from commentary.persistence.tables import comment_votes_table


class PostgresVoteRepository(VoteRepository):
    """PostgreSQL implementation of VoteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def add(self, vote: CommentVote) -> bool:
        """Insert the vote; the primary key rejects a second vote."""
        stmt = (
            insert(comment_votes_table)
            .values(**vote_to_dict(vote))
            .on_conflict_do_nothing(index_elements=["comment_id", "voter"])
            .returning(comment_votes_table.c.comment_id)
        )
        result = await self.session.execute(stmt)
        inserted = result.fetchone() is not None
        await self.session.flush()
        return inserted
