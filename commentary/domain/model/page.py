"""Pages and users of the host CMS.

Both are read-only here: they resolve admin recipients and build URLs.
"""

from typing import Any

from pydantic import Field

from commentary.domain.model.common import DomainModel
from commentary.domain.value import PageId, UserId


class Page(DomainModel):
    """A page that comments are attached to."""

    id: PageId
    path: str
    title: str = ""
    http_url: str
    values: dict[str, Any] = Field(default_factory=dict)

    def value(self, field_name: str) -> str:
        """Text value of a page field, or an empty string."""
        value = self.values.get(field_name)
        return "" if value is None else str(value)


class User(DomainModel):
    """A CMS user account."""

    id: UserId
    name: str
    email: str = ""
