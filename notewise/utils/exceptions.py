"""
Custom exception hierarchy for notewise.

Provides structured error types for the data layer, the AI services and
the session mode handling. All exceptions inherit from NotewiseError for
easy catching.
"""


class NotewiseError(Exception):
    """
    Base exception for all notewise errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize notewise error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(NotewiseError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    pass


class BackendError(StoreError):
    """
    Backend data service errors.
    Raised when a select/insert/update/delete against the backend fails.
    Treated as transient by the services.
    """

    pass


class DuplicateError(BackendError):
    """
    Unique constraint violations.
    Raised when the backend rejects a row because a unique key already exists
    (for example a second tag with the same name for one owner).
    """

    pass


class LocalStateError(StoreError):
    """
    Persisted local state errors.
    Raised when the key/value store cannot be read or written.
    """

    pass


class SyncError(StoreError):
    """
    Change feed errors.
    Raised when a feed subscription cannot be established or has failed.
    """

    pass


class ValidationError(NotewiseError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    pass


class NotFoundError(NotewiseError):
    """
    Resource not found errors.
    Raised when a requested resource (note, folder, flashcard) doesn't exist.
    """

    pass


class ConfigurationError(NotewiseError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass


class ModeError(NotewiseError):
    """
    Session mode errors.
    Raised when an operation is not available in the current session mode.
    """

    pass


class UnauthenticatedError(ModeError):
    """
    Raised when a data operation is attempted with neither a signed-in
    identity nor fallback mode active.
    """

    pass


class LLMError(NotewiseError):
    """
    LLM operation errors.
    Raised when LLM operations fail (API errors, timeouts, etc.).
    """

    pass


class AIServiceError(NotewiseError):
    """
    AI HTTP function errors.
    Raised by the client when the AI service answers with a non-2xx status
    or a body that is not the expected JSON. Always recoverable.
    """

    def __init__(self, message: str, status_code: int | None = None, context: dict | None = None):
        super().__init__(message, context)
        self.status_code = status_code
