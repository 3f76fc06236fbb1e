"""PostgreSQL implementation of the unit of work."""

import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from commentary.domain.error import PersistenceError
from commentary.domain.repository import UnitOfWork


class PostgresUnitOfWork(UnitOfWork):
    """Commits the request session shared by the PostgreSQL repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        """Commit the session, releasing any scope locks it holds."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logfire.error("Commit failed", error=str(e))
            await self.session.rollback()
            raise PersistenceError("Failed to commit changes") from e
