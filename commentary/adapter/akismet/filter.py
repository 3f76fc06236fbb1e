"""Akismet spam filter client.

Implements the comment-check, submit-spam and submit-ham calls of the
Akismet REST API (https://akismet.com/developers/).
"""

import httpx
import logfire

from commentary.adapter.error import SpamFilterError
from commentary.domain.model.comment import Comment
from commentary.domain.service.spam_filter import SpamFilter


class AkismetSpamFilter(SpamFilter):
    """Spam filter backed by Akismet."""

    def __init__(
        self,
        api_key: str,
        site_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Akismet client.

        Args:
            api_key: Akismet API key
            site_url: Site URL registered with the key ("blog" parameter)
            timeout: Request timeout in seconds
            transport: httpx transport override (tests)
        """
        self.api_key = api_key
        self.site_url = site_url
        self.timeout = timeout
        self.transport = transport
        self.base_url = f"https://{api_key}.rest.akismet.com/1.1"

    def _params(self, comment: Comment) -> dict[str, str]:
        params = {
            "blog": self.site_url,
            "user_ip": comment.ip,
            "user_agent": comment.user_agent,
            "comment_type": "comment",
            "comment_author": comment.cite,
            "comment_author_email": comment.email,
            "comment_author_url": comment.website,
            "comment_content": comment.text,
        }
        if comment.parent_id:
            params["comment_type"] = "reply"
        return {k: v for k, v in params.items() if v}

    async def _call(self, endpoint: str, comment: Comment) -> str:
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/{endpoint}",
                    data=self._params(comment),
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Akismet HTTP error", endpoint=endpoint, error=str(e))
            raise SpamFilterError(f"HTTP error calling Akismet {endpoint}: {e}")

        if response.status_code != 200:
            logfire.error(
                "Akismet request failed",
                endpoint=endpoint,
                status_code=response.status_code,
                error=response.text[:500],
            )
            raise SpamFilterError(
                f"Akismet {endpoint} failed: {response.status_code}"
            )
        return response.text.strip()

    async def check_spam(self, comment: Comment) -> bool:
        """Ask Akismet whether a comment is spam.

        Raises:
            SpamFilterError: If Akismet fails or answers something other
                than "true" or "false"
        """
        result = await self._call("comment-check", comment)
        if result not in ("true", "false"):
            raise SpamFilterError(f"Unexpected Akismet response: {result[:100]}")
        is_spam = result == "true"
        logfire.info("Akismet classification", spam=is_spam)
        return is_spam

    async def report_false_positive(self, comment: Comment) -> None:
        await self._call("submit-ham", comment)
        logfire.info("Submitted ham to Akismet", comment_id=comment.id)

    async def report_false_negative(self, comment: Comment) -> None:
        await self._call("submit-spam", comment)
        logfire.info("Submitted spam to Akismet", comment_id=comment.id)


class MockSpamFilter(SpamFilter):
    """Mock spam filter for testing.

    Flags any comment whose text contains one of ``spam_words`` and records
    every correction it is sent.
    """

    def __init__(self, spam_words: tuple[str, ...] = ("viagra", "casino")) -> None:
        self.spam_words = spam_words
        self.fail = False
        self.checked: list[Comment] = []
        self.false_positives: list[Comment] = []
        self.false_negatives: list[Comment] = []

    async def check_spam(self, comment: Comment) -> bool:
        if self.fail:
            raise SpamFilterError("Simulated spam filter failure")
        self.checked.append(comment)
        text = comment.text.lower()
        return any(word in text for word in self.spam_words)

    async def report_false_positive(self, comment: Comment) -> None:
        self.false_positives.append(comment)

    async def report_false_negative(self, comment: Comment) -> None:
        self.false_negatives.append(comment)
