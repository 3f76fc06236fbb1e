"""Repository interfaces for the comments domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from commentary.domain.repository.comment import CommentRepository
from commentary.domain.repository.field import CommentFieldRepository
from commentary.domain.repository.page import PageRepository, UserRepository
from commentary.domain.repository.unit_of_work import UnitOfWork
from commentary.domain.repository.vote import VoteRepository

__all__ = [
    "CommentRepository",
    "CommentFieldRepository",
    "PageRepository",
    "UnitOfWork",
    "UserRepository",
    "VoteRepository",
]
