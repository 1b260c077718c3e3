"""Application exceptions mapped to HTTP responses in the API layer."""


class ExpiryTrackerError(Exception):
    """Base class for application errors."""

    error_code = "internal_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidFoodIdError(ExpiryTrackerError):
    """Raised when an identifier is not a valid store identifier."""

    error_code = "invalid_id"
    status_code = 400

    def __init__(self, food_id: str) -> None:
        self.food_id = food_id
        super().__init__(f"'{food_id}' is not a valid food id")


class InvalidExpiryDateError(ExpiryTrackerError):
    """Raised when an expiry date cannot be turned into a timestamp."""

    error_code = "invalid_expiry_date"
    status_code = 400

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Cannot interpret expiryDate {value!r} as a date")


class EmptyUpdateError(ExpiryTrackerError):
    """Raised when an update carries no fields to merge."""

    error_code = "empty_update"
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Update body must contain at least one field")


class StorageError(ExpiryTrackerError):
    """Raised when the document store fails an operation.

    The message is safe to return to clients; the underlying driver error is
    kept as ``__cause__`` for server-side logging only.
    """
