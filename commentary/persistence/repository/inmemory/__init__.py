"""In-memory repository implementations for testing."""

from .comment import InMemoryCommentRepository
from .page import InMemoryPageRepository, InMemoryUserRepository
from .unit_of_work import InMemoryUnitOfWork
from .vote import InMemoryVoteRepository

__all__ = [
    "InMemoryCommentRepository",
    "InMemoryPageRepository",
    "InMemoryUnitOfWork",
    "InMemoryUserRepository",
    "InMemoryVoteRepository",
]
