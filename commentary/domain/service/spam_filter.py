"""Spam classifier interface."""

from commentary.domain.model.comment import Comment


class SpamFilter:
    """Generic spam classifier interface.

    ``check_spam`` is consulted once per submission. The two report methods
    send moderator corrections back to the classifier.
    """

    async def check_spam(self, comment: Comment) -> bool:
        """Classify a new comment.

        Args:
            comment: The submitted comment (not yet persisted)

        Returns:
            True if the comment should be treated as spam
        """
        raise NotImplementedError

    async def report_false_positive(self, comment: Comment) -> None:
        """Report a comment flagged as spam that a moderator approved (ham)."""
        raise NotImplementedError

    async def report_false_negative(self, comment: Comment) -> None:
        """Report an approved comment that a moderator marked as spam."""
        raise NotImplementedError


class NoopSpamFilter(SpamFilter):
    """Classifier used when no spam service is configured: never spam."""

    async def check_spam(self, comment: Comment) -> bool:
        return False

    async def report_false_positive(self, comment: Comment) -> None:
        return None

    async def report_false_negative(self, comment: Comment) -> None:
        return None
