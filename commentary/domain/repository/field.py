"""Comment field configuration repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from commentary.domain.model.field import CommentField


class CommentFieldRepository(ABC):
    """Read-only source of comment field configuration."""

    @abstractmethod
    async def get(self, name: str) -> Optional[CommentField]:
        """Find a comment field by name.

        Args:
            name: Field name

        Returns:
            The field configuration if it exists, None otherwise
        """
        pass

    @abstractmethod
    async def list_fields(self) -> List[CommentField]:
        """List all configured comment fields."""
        pass
