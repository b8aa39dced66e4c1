"""Error taxonomy shared by the services and the HTTP layer."""


class MediaBuzzError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(MediaBuzzError):
    """Raised when an entity id is absent."""

    status_code = 404


class ValidationError(MediaBuzzError):
    """Raised when required fields are missing or malformed."""

    status_code = 400


class InsufficientBalanceError(MediaBuzzError):
    """Raised when a withdrawal exceeds the available coins."""

    status_code = 400

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient coins: requested {requested}, available {available}"
        )


class PendingWithdrawExistsError(MediaBuzzError):
    """Raised when the user already has a pending withdraw request."""

    status_code = 400


class InvalidStatusTransitionError(MediaBuzzError):
    """Raised when a status change is not allowed from the current state."""

    status_code = 409

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")


class StorageUnavailableError(MediaBuzzError):
    """Raised when no storage backend could serve the request."""

    status_code = 503
