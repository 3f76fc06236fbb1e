"""PostgreSQL implementation of Page and User repositories."""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from commentary.domain.model import Page, User
from commentary.domain.repository import PageRepository, UserRepository
from commentary.domain.value import PageId
from commentary.persistence.mappers import row_to_page, row_to_user
from commentary.persistence.tables import pages_table, users_table


class PostgresPageRepository(PageRepository):
    """PostgreSQL implementation of PageRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, page_id: PageId) -> Optional[Page]:
        """Find a page by ID."""
        stmt = select(pages_table).where(pages_table.c.id == page_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_page(row._asdict()) if row else None

    async def find_by_path(self, path: str) -> Optional[Page]:
        """Find a page by path, with or without trailing slash."""
        bare = path.rstrip("/") or "/"
        stmt = select(pages_table).where(
            or_(pages_table.c.path == bare, pages_table.c.path == f"{bare.rstrip('/')}/")
        )
        result = await self.session.execute(stmt.limit(1))
        row = result.fetchone()
        return row_to_page(row._asdict()) if row else None


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_name(self, name: str) -> Optional[User]:
        """Find a user by login name."""
        stmt = select(users_table).where(users_table.c.name == name)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_user(row._asdict()) if row else None
