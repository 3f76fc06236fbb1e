"""Outbound mail adapters."""

from .transport import HttpMailTransport, LogMailTransport, MockMailTransport

__all__ = ["HttpMailTransport", "LogMailTransport", "MockMailTransport"]
