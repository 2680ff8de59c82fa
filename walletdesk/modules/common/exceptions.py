"""Error taxonomy shared by every domain module."""


class DomainError(Exception):
    """Base class for errors raised by domain services."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Referenced record does not exist."""


class ValidationError(DomainError):
    """Request is malformed or not allowed in the current state."""


class StoreWriteError(DomainError):
    """The backing store rejected a write."""


class NotificationError(DomainError):
    """Outbound notification could not be delivered."""


__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "StoreWriteError",
    "NotificationError",
]
