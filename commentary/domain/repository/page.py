"""Page and user repository interfaces.

Pages and users belong to the host CMS; these are read-only lookups.
"""

from abc import ABC, abstractmethod
from typing import Optional

from commentary.domain.model.page import Page, User
from commentary.domain.value import PageId


class PageRepository(ABC):
    """Repository for Page entity."""

    @abstractmethod
    async def find_by_id(self, page_id: PageId) -> Optional[Page]:
        """Find a page by ID.

        Args:
            page_id: The page's identifier

        Returns:
            The page if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_path(self, path: str) -> Optional[Page]:
        """Find a page by its site path (e.g. ``/about/contact/``).

        Args:
            path: Page path, with or without trailing slash

        Returns:
            The page if found, None otherwise
        """
        pass


class UserRepository(ABC):
    """Repository for User entity."""

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[User]:
        """Find a user by login name.

        Args:
            name: The user name

        Returns:
            The user if found, None otherwise
        """
        pass
