"""Akismet spam filter adapter."""

from .filter import AkismetSpamFilter, MockSpamFilter

__all__ = ["AkismetSpamFilter", "MockSpamFilter"]
