"""In-memory page and user repositories for testing."""

from typing import Optional

from commentary.domain.model.page import Page, User
from commentary.domain.repository.page import PageRepository, UserRepository
from commentary.domain.value import PageId


class InMemoryPageRepository(PageRepository):
    """In-memory implementation of PageRepository for testing."""

    def __init__(self) -> None:
        self._pages: dict[PageId, Page] = {}

    def add(self, page: Page) -> Page:
        """Register a page (pages are created by the host CMS)."""
        self._pages[page.id] = page
        return page

    async def find_by_id(self, page_id: PageId) -> Optional[Page]:
        return self._pages.get(page_id)

    async def find_by_path(self, path: str) -> Optional[Page]:
        wanted = path.rstrip("/")
        for page in self._pages.values():
            if page.path.rstrip("/") == wanted:
                return page
        return None


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def add(self, user: User) -> User:
        self._users[user.name] = user
        return user

    async def find_by_name(self, name: str) -> Optional[User]:
        return self._users.get(name)
