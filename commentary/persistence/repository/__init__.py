"""Repository implementations."""

from commentary.persistence.repository.comment import PostgresCommentRepository
from commentary.persistence.repository.field import StaticCommentFieldRepository
from commentary.persistence.repository.page import (
    PostgresPageRepository,
    PostgresUserRepository,
)
from commentary.persistence.repository.unit_of_work import PostgresUnitOfWork
from commentary.persistence.repository.vote import PostgresVoteRepository

__all__ = [
    "PostgresCommentRepository",
    "PostgresPageRepository",
    "PostgresUnitOfWork",
    "PostgresUserRepository",
    "PostgresVoteRepository",
    "StaticCommentFieldRepository",
]
