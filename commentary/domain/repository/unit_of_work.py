"""Transaction boundary interface."""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """Commits the writes made through the repositories of one request."""

    @abstractmethod
    async def commit(self) -> None:
        """Make every write of the request durable.

        Raises:
            PersistenceError: If the commit fails
        """
        pass
