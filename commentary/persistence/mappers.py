"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from commentary.domain.model import Comment, CommentVote, Page, User
from commentary.domain.value import (
    ApprovalCode,
    CommentFlag,
    CommentId,
    CommentScope,
    CommentStatus,
    PageId,
    SubscriberCode,
    UserId,
)


def row_to_comment(row: Dict[str, Any]) -> Comment:
    """Convert database row to Comment domain model.

    Args:
        row: Database row as dict

    Returns:
        Comment domain model, marked as loaded
    """
    return Comment(
        id=CommentId(row["id"]),
        scope=CommentScope(page_id=PageId(row["pages_id"]), field_name=row["field"]),
        parent_id=CommentId(row["parent_id"] or 0),
        text=row["text"],
        sort=row["sort"],
        status=CommentStatus(row["status"]),
        flags=CommentFlag(row["flags"]),
        created_at=row["created"],
        created_users_id=UserId(row["created_users_id"]),
        email=row["email"],
        cite=row["cite"],
        website=row["website"],
        ip=row["ip"],
        user_agent=row["user_agent"],
        code=ApprovalCode(row["code"]) if row.get("code") else None,
        subcode=SubscriberCode(row["subcode"]) if row.get("subcode") else None,
        upvotes=row["upvotes"],
        downvotes=row["downvotes"],
        stars=row["stars"],
        meta=row.get("meta") or {},
        loaded=True,
    )


def comment_to_dict(comment: Comment) -> Dict[str, Any]:
    """Convert Comment domain model to database dict.

    Args:
        comment: Comment domain model

    Returns:
        Dict suitable for database insertion/update (without ``id``)
    """
    return {
        "pages_id": comment.scope.page_id,
        "field": comment.scope.field_name,
        "parent_id": comment.parent_id,
        "text": comment.text,
        "sort": comment.sort,
        "status": int(comment.status),
        "flags": int(comment.flags),
        "created": comment.created_at,
        "email": comment.email,
        "cite": comment.cite,
        "website": comment.website,
        "ip": comment.ip,
        "user_agent": comment.user_agent,
        "created_users_id": comment.created_users_id,
        "code": comment.code.root if comment.code else None,
        "subcode": comment.subcode.root if comment.subcode else None,
        "upvotes": comment.upvotes,
        "downvotes": comment.downvotes,
        "stars": comment.stars,
        "meta": comment.meta,
    }


def vote_to_dict(vote: CommentVote) -> Dict[str, Any]:
    return {
        "comment_id": vote.comment_id,
        "voter": vote.voter,
        "up": vote.up,
        "created": vote.created_at,
    }


def row_to_page(row: Dict[str, Any]) -> Page:
    return Page(
        id=PageId(row["id"]),
        path=row["path"],
        title=row.get("title") or "",
        http_url=row["http_url"],
        values=row.get("values") or {},
    )


def row_to_user(row: Dict[str, Any]) -> User:
    return User(id=UserId(row["id"]), name=row["name"], email=row.get("email") or "")
