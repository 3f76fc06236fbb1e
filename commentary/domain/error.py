"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Recoverable validation error; the caller can re-prompt."""

    pass


class OwnParentError(ValidationError):
    """Raised when a comment is asked to be its own parent."""

    def __init__(self, comment_id: int):
        self.comment_id = comment_id
        super().__init__(f"Comment {comment_id} cannot be its own parent")


class ThreadingDisabledError(ValidationError):
    """Raised when a reply is requested on a field without threading."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Threaded replies are disabled for field {field_name}")


class CycleError(ValidationError):
    """Raised when a parent assignment would make a comment its own ancestor."""

    def __init__(self, comment_id: int, parent_id: int):
        self.comment_id = comment_id
        self.parent_id = parent_id
        super().__init__(
            f"Comment {parent_id} is a descendant of comment {comment_id}"
        )


class InvalidStatusTransitionError(ValidationError):
    """Raised when a status change is not allowed by the state machine."""

    def __init__(self, comment_id: int, current: str, requested: str):
        self.comment_id = comment_id
        super().__init__(
            f"Comment {comment_id} cannot change status from {current} to {requested}"
        )


class DeletionBlockedError(ValidationError):
    """Raised when deleting a comment that still has live replies."""

    def __init__(self, comment_id: int):
        self.comment_id = comment_id
        super().__init__(
            f"Comment {comment_id} has replies that are not pending deletion"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class PersistenceError(DomainError):
    """Raised when the storage collaborator fails to apply a change."""

    pass


class ConfigurationError(DomainError):
    """Raised for malformed field configuration such as a bad recipient list."""

    pass
