"""Domain-specific exceptions with user-ready messages."""


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass


class BusinessLogicException(Exception):
    """Base exception class for business logic errors."""

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class SwitchBotApiException(BusinessLogicException):
    """Exception raised when a call to the SwitchBot cloud API fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="UPSTREAM_ERROR")

    def with_context(self, context: str) -> "SwitchBotApiException":
        """Return a copy of this error prefixed with request-specific context."""
        return SwitchBotApiException(f"{context}: {self.message}")


class InvalidOperationException(BusinessLogicException):
    """Exception raised when an operation cannot be performed due to business rules."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        message = f"Cannot {operation} because {cause}"
        super().__init__(message, error_code="INVALID_OPERATION")
