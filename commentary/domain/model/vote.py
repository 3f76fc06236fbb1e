"""Comment vote entity.

One row per (comment, voter); the voter is a user id for logged in users
and the IP address for guests.
"""

from datetime import datetime

from pydantic import Field

from commentary.domain.model.common import DomainModel
from commentary.domain.value import CommentId


class CommentVote(DomainModel):
    comment_id: CommentId
    voter: str
    up: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
