"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the comment rules that span several comments or
    collaborators: threading, moderation, action links and notifications.
    """

    pass
