"""Custom exceptions for the share service."""


class ShareException(Exception):
    """Base class for share service exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    """
    status_code: int = 500

    def __init__(self, message: str = "Share service error"):
        self.message = message
        super().__init__(message)


class StorageError(ShareException):
    """Raised when the underlying database reports an I/O or constraint error.

    The original SQLAlchemy exception is kept as ``__cause__``.
    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        message = f"Storage operation '{operation}' failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class MessageConflictError(StorageError):
    """Raised when a message token is already taken.

    Maps to HTTP 409 Conflict.
    """
    status_code = 409

    def __init__(self, message_token: str):
        self.message_token = message_token
        super().__init__("save_message", "message token already exists")


class QuotaDeniedError(ShareException):
    """Raised when a creation request is refused by the quota engine.

    Carries the denial reason and, for cooldown denials, how many minutes
    the user has to wait. Maps to HTTP 400, or 404 for an unknown user.
    """
    status_code = 400

    def __init__(
        self,
        reason: str,
        message: str,
        minutes_left: int | None = None,
        status_code: int | None = None,
    ):
        self.reason = reason
        self.minutes_left = minutes_left
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> dict:
        """Convert to API response format."""
        response = {
            "error": "quota_denied",
            "reason": self.reason,
            "message": self.message,
        }
        if self.minutes_left is not None:
            response["minutes_left"] = self.minutes_left
        return response


class MigrationChainError(ShareException):
    """Raised when the registered migrations cannot carry the store to latest.

    Fatal: the process must not serve traffic against a store whose schema
    cannot be reconciled.
    """
    status_code = 500

    def __init__(self, current_version: str, latest_version: str, reached: str | None):
        self.current_version = current_version
        self.latest_version = latest_version
        self.reached = reached
        super().__init__(
            f"Cannot migrate database from version {current_version!r} to "
            f"{latest_version!r}: migration chain ends at {reached!r}"
        )
