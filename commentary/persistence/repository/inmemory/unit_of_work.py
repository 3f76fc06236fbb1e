"""In-memory unit of work for testing."""

from commentary.domain.error import PersistenceError
from commentary.domain.repository.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """Counts commits; set ``fail`` to make the next commit raise."""

    def __init__(self) -> None:
        self.commits = 0
        self.fail = False

    async def commit(self) -> None:
        if self.fail:
            raise PersistenceError("Simulated commit failure")
        self.commits += 1
