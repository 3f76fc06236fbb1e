"""Strongly typed identifiers.

Comments live in a per-(page, field) table keyed by integer ids, and pages
and users are owned by the host CMS, which also uses integer ids.
"""

from typing import NewType

PageId = NewType("PageId", int)
CommentId = NewType("CommentId", int)
UserId = NewType("UserId", int)

# Id of a comment that has not been persisted yet, and of the "root" parent
NEW_COMMENT_ID = CommentId(0)
ROOT_PARENT_ID = CommentId(0)

# Anonymous commenters are attributed to the guest user
GUEST_USER_ID = UserId(40)
